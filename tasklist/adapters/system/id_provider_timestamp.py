from tasklist.ports.id_provider import IdProvider
import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


class TimestampIdProvider(IdProvider):
    """Ids like '1718000000000-k3j9x0a': epoch milliseconds plus a random base-36 suffix."""

    def __init__(self, suffix_length: int = 7) -> None:
        self.suffix_length = suffix_length

    def new_id(self) -> str:
        millis = time.time_ns() // 1_000_000
        suffix = "".join(secrets.choice(_ALPHABET) for _ in range(self.suffix_length))
        return f"{millis}-{suffix}"
