from typing import Protocol, Optional


### COMMENTS
# ==========================================================
# Key/value storage contract (ports/storage.py).
# ==========================================================
# Shaped like browser local storage: string keys, string values.
# - The store keeps the whole task list under ONE key and rewrites it
#   after every mutation (read-entire / write-entire, last write wins).
# - Adapters map technical failures onto `PersistenceError`.
# - Adapters know nothing about tasks; (de)serialization lives in domain/codec.py.


class KeyValueStorage(Protocol):
    """Interface for durable string storage addressed by key."""

    def get_item(self, key: str) -> Optional[str]:
        """Returns the value stored under `key`.

        Returns:
            Optional[str]: The stored string, or `None` when nothing is stored.

        Domain errors:
            PersistenceError: When the backend cannot be read.
        """

    def set_item(self, key: str, value: str) -> None:
        """Stores `value` under `key`, overwriting any previous value.

        Domain errors:
            PersistenceError: When the backend cannot be written.
        """

    def remove_item(self, key: str) -> None:
        """Removes `key`. Missing keys are ignored.

        Domain errors:
            PersistenceError: When the backend cannot be written.
        """
