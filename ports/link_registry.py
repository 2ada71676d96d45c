"""
Port: LinkRegistry
Odpowiedzialność: kolejkowanie odroczonych żądań powiązań pod kluczem (rodzaj, id)
do momentu zbudowania rekordu docelowego.
"""
from typing import Any, Protocol, runtime_checkable

from contracts import LinkKey, PendingLink


@runtime_checkable
class LinkRegistry(Protocol):
    def register(self, key: LinkKey, link: PendingLink) -> None:
        """
        Appends a pending link to the ordered queue stored at key,
        creating the queue if absent.
        """
        ...

    def drain(self, key: LinkKey) -> list[PendingLink]:
        """
        Returns and removes every pending link stored at key, in insertion order.
        Called exactly once per record, right after its own fields are decoded.
        A later drain of the same key returns an empty list.
        """
        ...

    def pending(self) -> list[tuple[LinkKey, PendingLink]]:
        """Returns all links that were never drained, in registration order."""
        ...

    def dump(self) -> list[dict[str, Any]]:
        """Returns the undrained links as JSON-ready dicts."""
        ...
