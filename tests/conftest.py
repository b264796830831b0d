"""Shared test fixtures and configuration."""
import pytest
from fastapi.testclient import TestClient

from anonymchat.main import app
from anonymchat.api.deps import get_store, get_upload_storage
from anonymchat.core.cache import global_cache
from anonymchat.core.security import create_access_token
from anonymchat.db.store import JsonFileStore
from anonymchat.db.uploads import UploadStorage


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    from anonymchat.core.rate_limit import limiter

    # Rate limiting tests are marked with @pytest.mark.rate_limit
    if "rate_limit" in request.keywords:
        limiter.reset()
        limiter.enabled = True
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True


@pytest.fixture
def store(tmp_path):
    """A JSON store in a fresh temporary data directory."""
    return JsonFileStore(tmp_path / "data")


@pytest.fixture
def upload_storage(tmp_path):
    return UploadStorage(tmp_path / "uploads", "/uploads")


@pytest.fixture(scope="function")
def client(store, upload_storage):
    """Create a test client backed by the temporary store."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_upload_storage] = lambda: upload_storage
    global_cache.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    global_cache.clear()


@pytest.fixture
def user_client(client):
    """Client that has picked the nickname "tester"."""
    client.cookies.set("nickname", "tester")
    return client


@pytest.fixture
def admin_token():
    """Generate a valid admin JWT token."""
    return create_access_token({"is_admin": True})


@pytest.fixture
def admin_client(client, admin_token):
    """Create a test client with admin cookie already set."""
    client.cookies.set("admin_token", admin_token)
    return client
