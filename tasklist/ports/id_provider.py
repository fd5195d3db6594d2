from typing import Protocol

class IdProvider(Protocol):
    """Port that generates unique task identifiers."""
    def new_id(self) -> str:
        pass
