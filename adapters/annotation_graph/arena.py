"""
annotation_graph/arena.py — AnnotationArena: właściciel rekordów jednej odpowiedzi.

Rekord dostaje uchwyt (indeks) w momencie adopcji. Powiązania krzyżowe trzymane
są w osobnej tablicy: uchwyt właściciela → slot → uporządkowany zbiór uchwytów
celów. Rekordy nie trzymają referencji do siebie nawzajem, tylko uchwyty.
"""
from __future__ import annotations

from typing import Optional

from contracts import Annotation


class AnnotationArena:

    def __init__(self) -> None:
        self._records: list[Annotation] = []
        # uchwyt → slot → {uchwyt_celu: None}  (dict jako zbiór z kolejnością)
        self._links: dict[int, dict[str, dict[int, None]]] = {}

    # ── rekordy ───────────────────────────────────────────────────────────────

    def adopt(self, record: Annotation) -> int:
        """Przypisuje rekordowi uchwyt i wiąże go z areną. Zwraca uchwyt."""
        if record.handle >= 0:
            raise ValueError(f"Rekord już należy do areny: {record!s}")
        handle = len(self._records)
        record._handle = handle
        record._arena = self
        self._records.append(record)
        return handle

    def get(self, handle: int) -> Annotation:
        return self._records[handle]

    def __len__(self) -> int:
        return len(self._records)

    # ── tablica powiązań ──────────────────────────────────────────────────────

    def attach(self, owner: int, slot: str, target: int) -> None:
        """Dopisuje cel do kolekcji `slot` właściciela (idempotentnie)."""
        self._links.setdefault(owner, {}).setdefault(slot, {})[target] = None

    def assign(self, owner: int, slot: str, target: int) -> None:
        """Ustawia pojedyncze powiązanie (np. rodzic słowa), nadpisując poprzednie."""
        self._links.setdefault(owner, {})[slot] = {target: None}

    def handles(self, owner: int, slot: str) -> list[int]:
        return list(self._links.get(owner, {}).get(slot, ()))

    def linked(self, owner: int, slot: str) -> list[Annotation]:
        return [self._records[h] for h in self.handles(owner, slot)]

    def linked_one(self, owner: int, slot: str) -> Optional[Annotation]:
        handles = self.handles(owner, slot)
        return self._records[handles[0]] if handles else None
