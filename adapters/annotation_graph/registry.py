"""
annotation_graph/registry.py — InMemoryLinkRegistry: rejestr odroczonych powiązań.

Jeden rejestr na jedno dekodowanie odpowiedzi. Klucz (rodzaj, id) → uporządkowana
lista PendingLink. Kolejki pod kluczami słów rosną najdłużej, bo słowa są budowane
na końcu, a wskazuje je niemal każdy inny rodzaj adnotacji.
"""
from __future__ import annotations

import logging
from typing import Any

from contracts import LinkKey, PendingLink

logger = logging.getLogger("razorgraph.registry")


class InMemoryLinkRegistry:
    """
    Implementacja portu LinkRegistry na zwykłym dict (zachowuje kolejność wstawiania).

    Każde żądanie odpala co najwyżej raz: drain() zdejmuje kolejkę, a klucz
    trafia do zbioru już rozwiązanych. Żądanie zarejestrowane pod takim kluczem
    nie ma już szansy się wykonać i zostaje w pending().
    """

    def __init__(self) -> None:
        # LinkKey → list[PendingLink]
        self._queues: dict[LinkKey, list[PendingLink]] = {}
        self._drained: set[LinkKey] = set()

    def register(self, key: LinkKey, link: PendingLink) -> None:
        if key in self._drained:
            logger.debug("Rejestracja pod już rozwiązanym kluczem %r: %s", key, link.op.value)
        self._queues.setdefault(key, []).append(link)

    def drain(self, key: LinkKey) -> list[PendingLink]:
        self._drained.add(key)
        return self._queues.pop(key, [])

    def pending(self) -> list[tuple[LinkKey, PendingLink]]:
        return [(key, link) for key, queue in self._queues.items() for link in queue]

    def dump(self) -> list[dict[str, Any]]:
        return [
            {"key": [key.kind, key.ident], "link": link.model_dump(mode="json")}
            for key, link in self.pending()
        ]

    def __len__(self) -> int:
        return sum(len(queue) for queue in self._queues.values())

    def __contains__(self, key: object) -> bool:
        return key in self._queues
