import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
# Default sessions when running "nox"
nox.options.sessions = ["lint", "unit", "integration"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "SECRET_KEY",
    "ADMIN_USERNAME",
    "ADMIN_PASSWORD",
    "DATA_DIR",
    "UPLOADS_DIR",
    "LOG_LEVEL",
]


def _set_env(session):
    """
    Propagate configuration environment variables into the session.
    Also ensure the project root is on PYTHONPATH.
    """
    session.env["PYTHONPATH"] = str(Path.cwd())
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "anonymchat/", "tests/")
    session.run("black", "anonymchat/", "tests/")
    session.run("flake8", "anonymchat/", "tests/")
    session.run("mypy", "anonymchat/")


@nox.session(name="unit")
def unit(session):
    """
    Run unit tests (store, services, core helpers).
    Usage:
      nox -s unit
      nox -s unit -- tests/unit/test_services/test_message.py
    """
    _set_env(session)
    session.install("-e", ".[test]")
    tests = session.posargs or ["tests/unit"]
    session.run(
        "pytest",
        *tests,
        "--maxfail=1",
        "-vv",
        "--tb=short",
        "--cov=anonymchat",
        "--cov-report=term-missing",
        "--cov-report=html:.nox/htmlcov",
        "--cov-fail-under=80",
    )


@nox.session(name="integration")
def integration(session):
    """
    Run HTTP API tests through FastAPI's TestClient.
    Usage:
      nox -s integration
      nox -s integration -- tests/integration/test_api/test_messages.py
    """
    _set_env(session)
    session.install("-e", ".[test]")
    tests = session.posargs or ["tests/integration"]
    session.run("pytest", *tests, "--maxfail=1", "-vv", "--tb=short")
