from typing import Mapping, Optional

### COMMENTS
# ==========================================================
# In-memory storage adapter (adapters/memory/storage.py).
# ==========================================================
# - Used by tests and by `tasklist --memory` (nothing survives the process).
# - Plain dict: key -> stored string.


class InMemoryStorage:
    """
        Key/value storage living only as long as the object.
        :param initial: Optional seed of key -> value pairs.
    """
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)
