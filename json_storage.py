"""JSON files backing the treatment and history stores.

Data files (auto-created if missing, both shaped ``{"meds": [...]}``):
    dosage-treatments.json : treatment definitions
    dosage-history.json    : outcome log (taken / skipped / missed)
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path

from dose_errors import ParseError, StorageError

logger = logging.getLogger(__name__)

TREATMENTS = "treatments"
HISTORY = "history"
KINDS = (TREATMENTS, HISTORY)

EMPTY_DOCUMENT = {"meds": []}


class JsonStorage:
    """Load and save the raw record lists of each kind.

    Args:
        data_dir: Directory holding ``dosage-<kind>.json`` files.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, kind: str) -> Path:
        if kind not in KINDS:
            raise ValueError(f"unknown data kind {kind!r}")
        return self.data_dir / f"dosage-{kind}.json"

    def ensure(self, kind: str) -> Path:
        """Create the data file with an empty ``meds`` list if it does not exist.

        Raises:
            StorageError: if the directory or file can not be created.
        """
        path = self.path_for(kind)
        if not path.exists():
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                with open(path, "w", encoding="utf-8") as f:
                    json.dump(EMPTY_DOCUMENT, f)
            except OSError as exc:
                raise StorageError(f"could not create {path}: {exc}") from exc
            logger.info("New %s file created at: %s", kind, path)
        return path

    def load(self, kind: str) -> list[dict]:
        """Read the record list of a kind, bootstrapping the file first.

        Raises:
            StorageError: if the file can not be read.
            ParseError: if the file is not a ``{"meds": [...]}`` document.
        """
        path = self.ensure(kind)
        try:
            with open(path, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"{path} is not valid UTF-8 JSON: {exc}") from exc
        except OSError as exc:
            raise StorageError(f"could not read {path}: {exc}") from exc

        meds = doc.get("meds") if isinstance(doc, dict) else None
        if not isinstance(meds, list) or not all(isinstance(r, dict) for r in meds):
            raise ParseError(f"{path} has no 'meds' record list")
        return meds

    def save(self, kind: str, records: list[dict]) -> None:
        """Atomically overwrite the file of a kind.

        The document is written to a sibling ``.tmp`` file and then moved into
        place, so a crash mid-write leaves the previous version intact.

        Raises:
            StorageError: if the file can not be written.
        """
        path = self.path_for(kind)
        tmp = path.with_suffix(".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump({"meds": records}, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except OSError as exc:
            raise StorageError(f"update of {path.name} failed: {exc}") from exc
        logger.debug("%s updated", path.name)

    def quarantine(self, kind: str, now: datetime) -> Path | None:
        """Move an unparseable file aside so the next save does not erase it.

        Returns:
            The new path, or None if there was nothing to move or the move failed.
        """
        path = self.path_for(kind)
        if not path.exists():
            return None
        target = path.with_name(f"{path.name}.corrupt-{now:%Y%m%d%H%M%S}")
        try:
            os.replace(path, target)
        except OSError as exc:
            logger.warning("Could not move corrupt %s aside: %s", path, exc)
            return None
        logger.warning("Moved unreadable %s file to %s", kind, target)
        return target
