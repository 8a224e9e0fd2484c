"""Small helpers shared by the JSON-file repositories."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pharmstock.infrastructure.persistence.file_lock import DataFileLock


def ensure_file(path: Path, lock: DataFileLock) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with lock:
        if not path.exists():
            persist_records(path, [])


def load_records(path: Path) -> list[dict]:
    return json.loads(path.read_text(encoding="utf-8"))


def persist_records(path: Path, records: list[dict]) -> None:
    """Write to a uniquely named temp file and rename it over ``path``.

    Readers never see half a file, and concurrent writers never share a
    temp file. Callers hold the file's lock.
    """
    tmp = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=path.name + ".",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            tmp.write(json.dumps(records, indent=2) + "\n")
        os.replace(tmp.name, path)
    except OSError:
        os.unlink(tmp.name)
        raise


def dump_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def load_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
