"""Practice history persistence (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import ValidationError

from ..models.session import PracticeRecord

logger = structlog.get_logger()

HISTORY_FILENAME = "practice_history.json"


def _read(history_path: Path) -> dict:
    if not history_path.exists():
        return {"records": []}
    data = json.loads(history_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("records"), list):
        raise ValueError(f"{history_path.name} has no 'records' list")
    return data


def append_practice_record(history_dir: Path, record: PracticeRecord) -> None:
    """Prepend a record to practice_history.json, newest first.

    Raises:
        OSError: The history file could not be written.
        ValueError: The existing file is not valid history; it is left untouched.
    """
    history_dir.mkdir(parents=True, exist_ok=True)
    history_path = history_dir / HISTORY_FILENAME

    lock_path = history_dir / (HISTORY_FILENAME + ".lock")
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)

        data = _read(history_path)
        data["records"].insert(0, record.model_dump(mode="json"))

        with tempfile.NamedTemporaryFile(
            "w", dir=history_dir, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            json.dump(data, tmp, indent=2)
        os.replace(tmp.name, history_path)


def read_practice_history(history_dir: Path) -> list[PracticeRecord]:
    """Read persisted records, most recent first.

    Empty if no file exists. An unreadable or corrupt file is logged and
    also read as empty.
    """
    history_path = history_dir / HISTORY_FILENAME
    try:
        data = _read(history_path)
        return [PracticeRecord.model_validate(entry) for entry in data["records"]]
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("practice_history_unreadable", path=str(history_path), error=str(e))
        return []
