"""
contracts.py — Jedyne źródło prawdy dla wszystkich typów danych w razorgraph.
Wszystkie moduły importują WYŁĄCZNIE stąd. Nie modyfikować bez versioning.

Rekordy adnotacji są zamrożonymi modelami pydantic: pola pierwotne pochodzą
z JSON-a odpowiedzi i nie zmieniają się po dekodowaniu. Powiązania krzyżowe
(słowo → encje, encja → słowa, …) nie są polami rekordu — żyją w tablicy
powiązań areny (adapters/annotation_graph/arena.py), a rekord tylko je czyta.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Hashable, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

CONTRACTS_VERSION = "1.0.0"


# ─────────────────────────── Błędy ───────────────────────────────────────

class AnalysisError(Exception):
    """Serwis zwrócił ok=false — komunikat przepisany z pola `error`."""

    def __init__(self, error: str) -> None:
        super().__init__(error)
        self.error = error


class InvalidResponseError(ValueError):
    """Odpowiedź nie jest poprawnym dokumentem JSON z obiektem na szczycie."""


# ─────────────────────────── Klucze i żądania powiązań ───────────────────

class AnnotationKind(str, Enum):
    TOPIC = "topic"
    ENTITY = "entity"
    ENTAILMENT = "entailment"
    RELATION = "relation"
    PROPERTY = "property"
    NOUN_PHRASE = "nounPhrase"
    WORD = "word"


class LinkKey(NamedTuple):
    """(rodzaj adnotacji, identyfikator) — wyłącznie klucz rejestru, nigdy nie zapisywany."""
    kind: str
    ident: Hashable

    @classmethod
    def of(cls, kind: AnnotationKind | str, ident: Any) -> LinkKey:
        # Linki reguł niestandardowych podają rodzaj jako zwykły string
        # ("entity", "word", …), więc enum sprowadzamy do jego wartości.
        if isinstance(kind, AnnotationKind):
            kind = kind.value
        return cls(str(kind), _hashable(ident))


def _hashable(value: Any) -> Hashable:
    """Listy i obiekty JSON (dowolnie zagnieżdżone) jako krotki."""
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((str(k), _hashable(v)) for k, v in value.items()))
    return value


class LinkOp(str, Enum):
    ATTACH_ENTITY_TO_WORD = "attach_entity_to_word"
    ATTACH_ENTAILMENT_TO_WORD = "attach_entailment_to_word"
    ATTACH_RELATION_TO_WORD = "attach_relation_to_word"
    ATTACH_RELATION_PARAM_TO_WORD = "attach_relation_param_to_word"
    ATTACH_PROPERTY_PREDICATE_TO_WORD = "attach_property_predicate_to_word"
    ATTACH_PROPERTY_PROPERTY_TO_WORD = "attach_property_property_to_word"
    ATTACH_NOUN_PHRASE_TO_WORD = "attach_noun_phrase_to_word"
    ATTACH_CUSTOM_ANNOTATION = "attach_custom_annotation"


class PendingLink(BaseModel):
    """
    Odroczone żądanie powiązania, czekające w rejestrze na zbudowanie celu.
    Przy rozwiązaniu interpretowane jako op(source, *args, target).
    """
    model_config = ConfigDict(frozen=True)

    op: LinkOp
    source: int                    # uchwyt rekordu zlecającego w arenie
    args: tuple[Any, ...] = ()


def custom_slot(rule_name: Optional[str]) -> str:
    """Nazwa slotu, pod którym cel trzyma adnotacje danej reguły."""
    return f"custom:{rule_name}"


def link_slot(content_index: int, link_index: int) -> str:
    """Nazwa slotu, pod którym adnotacja niestandardowa trzyma rozwiązany cel linku."""
    return f"link:{content_index}:{link_index}"


# ─────────────────────────── Rekordy adnotacji ───────────────────────────

class Annotation(BaseModel):
    """
    Baza rekordów: pola z JSON-a (z domyślnymi wartościami dla brakujących
    kluczy) plus odczyt powiązań z areny, która rekord adoptowała.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    kind: ClassVar[Optional[AnnotationKind]] = None

    _handle: int = PrivateAttr(default=-1)
    _arena: Any = PrivateAttr(default=None)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # null w odpowiedzi = brak pola, obowiązuje wartość domyślna
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @property
    def handle(self) -> int:
        return self._handle

    def identity(self) -> Any:
        return None

    def identity_key(self) -> Optional[LinkKey]:
        """Klucz, pod którym inne rekordy adresują ten rekord (None = nieadresowalny)."""
        if self.kind is None:
            return None
        return LinkKey.of(self.kind, self.identity())

    def custom_annotations(self, rule_name: str) -> list[CustomAnnotation]:
        """Adnotacje niestandardowe danej reguły, które wskazują ten rekord."""
        return self._linked(custom_slot(rule_name))

    def _linked(self, slot: str) -> list[Any]:
        if self._arena is None:
            return []
        return self._arena.linked(self._handle, slot)

    def _linked_one(self, slot: str) -> Any:
        if self._arena is None:
            return None
        return self._arena.linked_one(self._handle, slot)

    def __str__(self) -> str:
        ident = self.identity()
        return type(self).__name__ + ("" if ident in (None, "") else f" @id={ident}")


def _positions(values: list[Any]) -> str:
    return ", ".join(str(v) for v in values)


class CustomAnnotation(Annotation):
    name: Optional[str] = None
    contents: list[dict[str, Any]] = Field(default_factory=list)

    _saved_values: dict[str, list[Any]] = PrivateAttr(default_factory=dict)

    def links(self) -> list[tuple[int, int, dict[str, Any]]]:
        """Wszystkie linki jako (indeks wpisu, indeks linku, surowy link)."""
        return [
            (ci, li, link)
            for ci, key_value in enumerate(self.contents)
            for li, link in enumerate(key_value.get("links") or [])
            if isinstance(link, dict)
        ]

    def __getitem__(self, attribute: str) -> list[Any]:
        if attribute not in self._saved_values:
            values: list[Any] = []
            for ci, key_value in enumerate(self.contents):
                if key_value.get("key") != attribute:
                    continue
                for li, link in enumerate(key_value.get("links") or []):
                    linked = self._linked_one(link_slot(ci, li))
                    values.append(link if linked is None else linked)
                for value_key in ("intValue", "floatValue", "stringValue", "bytesValue"):
                    values.extend(key_value.get(value_key) or [])
            self._saved_values[attribute] = values
        return self._saved_values[attribute]

    def __str__(self) -> str:
        return f"CustomAnnotation with name '{self.name}'"


class Topic(Annotation):
    kind: ClassVar[Optional[AnnotationKind]] = AnnotationKind.TOPIC

    id: Optional[int] = None
    label: str = ""
    wikipedia_link: Optional[str] = Field(default=None, alias="wikiLink")
    score: float = 0

    def identity(self) -> Any:
        return self.id

    def __str__(self) -> str:
        return super().__str__() + f" with label '{self.label}'"


class Entity(Annotation):
    """Encja nazwana; `id` to identyfikator Wikipedii, `document_id` — klucz w odpowiedzi."""
    kind: ClassVar[Optional[AnnotationKind]] = AnnotationKind.ENTITY

    document_id: Optional[int] = Field(default=None, alias="id")
    entity_id: Optional[str] = Field(default=None, alias="entityId")
    entity_english_id: Optional[str] = Field(default=None, alias="entityEnglishId")
    freebase_id: Optional[str] = Field(default=None, alias="freebaseId")
    wikipedia_link: Optional[str] = Field(default=None, alias="wikiLink")
    matched_text: Optional[str] = Field(default=None, alias="matchedText")
    starting_position: Optional[int] = Field(default=None, alias="startingPos")
    ending_position: Optional[int] = Field(default=None, alias="endingPos")
    matched_positions: list[int] = Field(default_factory=list, alias="matchingTokens")
    freebase_types: list[str] = Field(default_factory=list, alias="freebaseTypes")
    relevance_score: Optional[float] = Field(default=None, alias="relevanceScore")
    confidence_score: Optional[float] = Field(default=None, alias="confidenceScore")
    dbpedia_types: list[str] = Field(default_factory=list, alias="type")
    data: dict[str, Any] = Field(default_factory=dict)

    def identity(self) -> Any:
        return self.document_id

    @property
    def id(self) -> Optional[str]:
        return self.entity_id

    @property
    def localized_id(self) -> Optional[str]:
        return self.entity_id

    @property
    def unique_id(self) -> Optional[str]:
        return self.entity_english_id

    @property
    def english_id(self) -> Optional[str]:
        return self.entity_english_id

    @property
    def matched_words(self) -> list[Word]:
        return self._linked("matched_words")

    def __str__(self) -> str:
        label = "Entity" if not self.entity_id else f"Entity @id={self.entity_id}"
        return label + f" at positions {_positions(self.matched_positions)}"


class Entailment(Annotation):
    kind: ClassVar[Optional[AnnotationKind]] = AnnotationKind.ENTAILMENT

    id: Optional[int] = None
    matched_positions: list[int] = Field(default_factory=list, alias="wordPositions")
    prior_score: Optional[float] = Field(default=None, alias="priorScore")
    context_score: Optional[float] = Field(default=None, alias="contextScore")
    score: Optional[float] = None
    entailed_tree: Optional[dict[str, Any]] = Field(default=None, alias="entailedTree")

    def identity(self) -> Any:
        return self.id

    @property
    def entailed_word(self) -> Optional[str]:
        if not self.entailed_tree:
            return None
        return self.entailed_tree.get("word")

    @property
    def matched_words(self) -> list[Word]:
        return self._linked("matched_words")

    def __str__(self) -> str:
        return (
            super().__str__()
            + f": '{self.entailed_word}' at positions {_positions(self.matched_positions)}"
        )


class RelationParam(Annotation):
    relation: Optional[str] = None          # SUBJECT / OBJECT / OTHER
    param_positions: list[int] = Field(default_factory=list, alias="wordPositions")

    @property
    def relation_parent(self) -> Optional[Relation]:
        return self._linked_one("relation_parent")

    @property
    def param_words(self) -> list[Word]:
        return self._linked("param_words")

    @property
    def entities(self) -> list[Entity]:
        """Encje wspomniane w słowach parametru, bez powtórzeń."""
        seen: dict[int, Entity] = {}
        for word in self.param_words:
            for entity in word.entities:
                seen.setdefault(entity.handle, entity)
        return list(seen.values())

    def __str__(self) -> str:
        return f"RelationParam: '{self.relation}' at positions {_positions(self.param_positions)}"


class Relation(Annotation):
    kind: ClassVar[Optional[AnnotationKind]] = AnnotationKind.RELATION

    id: Optional[int] = None
    predicate_positions: list[int] = Field(default_factory=list, alias="wordPositions")
    param_payloads: list[dict[str, Any]] = Field(default_factory=list, alias="params")

    def identity(self) -> Any:
        return self.id

    @property
    def predicate_words(self) -> list[Word]:
        return self._linked("predicate_words")

    @property
    def params(self) -> list[RelationParam]:
        return self._linked("params")

    def __str__(self) -> str:
        return super().__str__() + f" at positions {_positions(self.predicate_positions)}"


class Property(Annotation):
    """Relacja "is-a"/"has-a" między predykatem (fokusem) a jego właściwością."""
    kind: ClassVar[Optional[AnnotationKind]] = AnnotationKind.PROPERTY

    id: Optional[int] = None
    predicate_positions: list[int] = Field(default_factory=list, alias="wordPositions")
    property_positions: list[int] = Field(default_factory=list, alias="propertyPositions")

    def identity(self) -> Any:
        return self.id

    @property
    def predicate_words(self) -> list[Word]:
        return self._linked("predicate_words")

    @property
    def property_words(self) -> list[Word]:
        return self._linked("property_words")

    def __str__(self) -> str:
        return super().__str__() + f" at positions {_positions(self.predicate_positions)}"


class NounPhrase(Annotation):
    kind: ClassVar[Optional[AnnotationKind]] = AnnotationKind.NOUN_PHRASE

    id: Optional[int] = None
    word_positions: list[int] = Field(default_factory=list, alias="wordPositions")

    def identity(self) -> Any:
        return self.id

    @property
    def words(self) -> list[Word]:
        return self._linked("words")

    def __str__(self) -> str:
        return super().__str__() + f" at positions {_positions(self.word_positions)}"


class Word(Annotation):
    """Pojedynczy token. Pozycje są globalne w obrębie dokumentu."""
    kind: ClassVar[Optional[AnnotationKind]] = AnnotationKind.WORD

    position: Optional[int] = None
    token: Optional[str] = None
    stem: Optional[str] = None
    lemma: Optional[str] = None
    part_of_speech: Optional[str] = Field(default=None, alias="partOfSpeech")   # Penn Treebank
    parent_position: Optional[int] = Field(default=None, alias="parentPosition")
    relation_to_parent: Optional[str] = Field(default=None, alias="relationToParent")
    input_start_offset: Optional[int] = Field(default=None, alias="startingPos")
    input_end_offset: Optional[int] = Field(default=None, alias="endingPos")
    senses: list[Any] = Field(default_factory=list)

    def identity(self) -> Any:
        return self.position

    # ── drzewo zależności ─────────────────────────────────────────────────────

    @property
    def sentence(self) -> Optional[Sentence]:
        return self._linked_one("sentence")

    @property
    def parent(self) -> Optional[Word]:
        return self._linked_one("parent")

    @property
    def children(self) -> list[Word]:
        return self._linked("children")

    # ── adnotacje wskazujące to słowo ─────────────────────────────────────────

    @property
    def entities(self) -> list[Entity]:
        return self._linked("entities")

    @property
    def entailments(self) -> list[Entailment]:
        return self._linked("entailments")

    @property
    def relations(self) -> list[Relation]:
        return self._linked("relations")

    @property
    def relation_params(self) -> list[RelationParam]:
        return self._linked("relation_params")

    @property
    def property_predicates(self) -> list[Property]:
        return self._linked("property_predicates")

    @property
    def property_properties(self) -> list[Property]:
        return self._linked("property_properties")

    @property
    def noun_phrases(self) -> list[NounPhrase]:
        return self._linked("noun_phrases")

    def __str__(self) -> str:
        return f"Word: '{self.token}' at position {self.position}"


class Sentence(Annotation):
    position: Optional[int] = None
    word_payloads: list[dict[str, Any]] = Field(default_factory=list, alias="words")

    @property
    def words(self) -> list[Word]:
        return self._linked("words")

    @property
    def root_word(self) -> Optional[Word]:
        return self._linked_one("root_word")

    def __str__(self) -> str:
        return f"Sentence with {len(self.word_payloads)} words"
