"""
schemas.py — Request/Response modele FastAPI.
Oddzielone od contracts.py żeby API mogło ewoluować niezależnie.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


# ─────────────────────────── /graph ──────────────────────────────

class WordView(BaseModel):
    position: Optional[int]
    token: Optional[str]
    part_of_speech: Optional[str]
    parent_position: Optional[int]       # None gdy rodzic nie został powiązany
    children: list[Optional[int]]
    entities: list[Optional[int]]        # document_id encji
    relations: list[Optional[int]]
    noun_phrases: list[Optional[int]]
    is_root: bool = False


class SentenceView(BaseModel):
    position: Optional[int]
    root_position: Optional[int]
    words: list[WordView]


class EntityView(BaseModel):
    document_id: Optional[int]
    entity_id: Optional[str]
    matched_text: Optional[str]
    matched_positions: list[int]
    matched_word_positions: list[Optional[int]]   # pozycje faktycznie powiązanych słów
    relevance_score: Optional[float] = None
    confidence_score: Optional[float] = None


class UnresolvedLinkView(BaseModel):
    kind: str
    ident: Any
    op: str
    source: int


class GraphResponse(BaseModel):
    ok: bool
    error: str
    message: str
    summary: str
    matching_rules: list[Optional[str]]
    topics: list[str]
    sentences: list[SentenceView]
    entities: list[EntityView]
    unresolved_links: list[UnresolvedLinkView]


# ─────────────────────────── /health ─────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
