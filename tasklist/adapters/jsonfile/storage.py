from tasklist.domain.errors import PersistenceError
from pathlib import Path
from typing import Optional
import logging
import os
import re

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorage:
    def __init__(self, directory: Path) -> None:
        """Initializes file storage rooted at `directory`.
        Each key lives in its own `<key>.json` file; the directory is created if missing."""
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(str(e))

    def path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key) or key in {".", ".."}:
            raise PersistenceError(f"unsupported storage key {key!r}")
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Returns the file content for `key`, or None when the file does not exist."""
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(str(e))

    def set_item(self, key: str, value: str) -> None:
        """Writes `value` atomically: temp file, fsync, then replace."""
        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".swap")
        try:
            with tmp.open("w", encoding="utf-8", newline="\n") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            try:
                if tmp.exists():
                    tmp.unlink()
            except OSError:
                logger.debug("Could not remove leftover %s", tmp)
            raise PersistenceError(str(e))
        logger.debug("Wrote %d chars to %s", len(value), path)

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise PersistenceError(str(e))
