"""Flat-file JSON store.

Each entity kind lives in its own JSON array file under the data directory.
Every mutation is a read-modify-write of the whole file. Mutations go through
``transaction()``, which holds a per-file lock for the full cycle so two
requests in the same process cannot interleave their read and write (the lost
update a bare read/write pair is prone to). Nothing coordinates separate
processes sharing one data directory.
"""
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union

from anonymchat.core.logging_config import get_logger

logger = get_logger(__name__)

Record = Dict[str, Any]


class StoreKind(str, Enum):
    """Entity collections and their file names."""

    MESSAGES = "messages"
    POLLS = "polls"
    USER_PREFERENCES = "user_preferences"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"


class JsonFileStore:
    """Whole-file JSON array persistence with one writer lock per file."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self._locks = {kind: threading.RLock() for kind in StoreKind}

    def path_for(self, kind: StoreKind) -> Path:
        return self.data_dir / kind.filename

    def _ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def read(self, kind: StoreKind) -> List[Record]:
        """
        Load every record of ``kind``.

        A missing or blank file reads as an empty list. Unparseable content is
        logged and also reads as empty; the next write for that kind replaces
        the corrupt file. Array entries that are not JSON objects are logged
        and skipped.
        """
        path = self.path_for(kind)
        with self._locks[kind]:
            try:
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return []

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("store_parse_failed", kind=kind.value, path=str(path), error=str(exc))
            return []

        if not isinstance(data, list):
            logger.error("store_not_an_array", kind=kind.value, path=str(path),
                         found=type(data).__name__)
            return []

        records = [entry for entry in data if isinstance(entry, dict)]
        if len(records) != len(data):
            logger.warning("store_invalid_record", kind=kind.value, path=str(path),
                           skipped=len(data) - len(records))
        return records

    def write(self, kind: StoreKind, records: List[Record]) -> None:
        """
        Replace the file for ``kind`` with ``records``.

        The array is written to a temporary file in the same directory and
        moved over the old one, so readers never observe a half-written file.
        """
        path = self.path_for(kind)
        payload = json.dumps(records, indent=2, ensure_ascii=False)

        with self._locks[kind]:
            self._ensure_data_dir()
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{kind.value}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except OSError as exc:
                logger.error("store_write_failed", kind=kind.value, path=str(path), error=str(exc))
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
                raise

    @contextmanager
    def transaction(self, kind: StoreKind) -> Iterator[List[Record]]:
        """
        Read-modify-write ``kind`` under its lock.

        Yields the mutable record list; it is written back when the block exits
        normally and discarded if the block raises.

        Example:
            with store.transaction(StoreKind.MESSAGES) as records:
                records.append(new_record)
        """
        with self._locks[kind]:
            records = self.read(kind)
            yield records
            self.write(kind, records)
