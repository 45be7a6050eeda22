"""
Key-value persistence for saved sessions

A JSON file holding {key: blob}. Storage problems never interrupt play:
failures are logged and the session simply continues in memory.
"""
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

from .snapshot import SnapshotError, from_snapshot, to_snapshot
from .state import GameSession

logger = logging.getLogger(__name__)

SAVE_KEY = "scoundrel.save.v1"
DEFAULT_SAVE_PATH = Path.home() / ".scoundrel" / "save.json"


class SaveStore:
    """
    JSON-file key-value store

    Every method swallows I/O and decode errors.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_SAVE_PATH):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write_all(self, blobs: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(blobs, f, ensure_ascii=False)
        tmp.replace(self.path)

    def save(self, key: str, data: Any) -> bool:
        """
        Store a blob under key

        Returns:
            Whether the write succeeded
        """
        try:
            try:
                blobs = self._read_all()
            except ValueError:
                logger.warning(f"Discarding unreadable save file {self.path}")
                blobs = {}
            blobs[key] = data
            self._write_all(blobs)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not save {key!r} to {self.path}: {e}")
            return False
        return True

    def load(self, key: str, default: Any = None) -> Any:
        """Fetch the blob stored under key, or default"""
        try:
            return self._read_all().get(key, default)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load {key!r} from {self.path}: {e}")
            return default

    def delete(self, key: str) -> bool:
        try:
            blobs = self._read_all()
            if key not in blobs:
                return True
            del blobs[key]
            self._write_all(blobs)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not delete {key!r} from {self.path}: {e}")
            return False
        return True


def save_session(store: SaveStore, session: GameSession, key: str = SAVE_KEY) -> bool:
    """Persist a session snapshot"""
    return store.save(key, to_snapshot(session))


def load_session(store: SaveStore, key: str = SAVE_KEY, clock=None) -> Optional[GameSession]:
    """
    Restore the saved session

    Returns:
        The session, or None when nothing valid is stored
    """
    data = store.load(key)
    if data is None:
        return None
    try:
        return from_snapshot(data, clock=clock)
    except SnapshotError as e:
        logger.warning(f"Ignoring invalid saved session: {e}")
        return None
