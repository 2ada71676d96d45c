"""
annotation_graph/graph.py — AnnotationGraphDecoder i AnnotationGraph.

Dekoder przechodzi tablice odpowiedzi w stałej kolejności topologicznej:
  customAnnotations → topics → coarseTopics → entities → entailments
  → relations (+ params) → properties → nounPhrases → sentences (+ words, drzewa)
Wszystkie odwołania wewnątrz payloadu rozwiązują się więc "w przód",
a odwołania do słów — na samym końcu, gdy powstają słowa.

Po dekodowaniu graf jest tylko do odczytu.
"""
from __future__ import annotations

import logging
from itertools import chain
from typing import Any, Callable, Iterator, TypeVar

from contracts import (
    Annotation,
    CustomAnnotation,
    Entailment,
    Entity,
    InvalidResponseError,
    LinkKey,
    NounPhrase,
    PendingLink,
    Property,
    Relation,
    Sentence,
    Topic,
    Word,
)

from .arena import AnnotationArena
from .constructors import (
    DecodeContext,
    build_custom_annotation,
    build_entailment,
    build_entity,
    build_noun_phrase,
    build_property,
    build_relation,
    build_topic,
)
from .dependency_tree import build_sentence
from .registry import InMemoryLinkRegistry
from .resolver import LinkResolver

logger = logging.getLogger("razorgraph.decoder")

T = TypeVar("T")


class AnnotationGraph:
    """
    Wynik dekodowania jednej odpowiedzi: wszystkie kolekcje adnotacji,
    zdania oraz pola statusu przepisane z poziomu dokumentu.
    """

    def __init__(
        self,
        document: dict[str, Any],
        arena: AnnotationArena,
        *,
        custom_annotations: list[CustomAnnotation],
        topics: list[Topic],
        coarse_topics: list[Topic],
        entities: list[Entity],
        entailments: list[Entailment],
        relations: list[Relation],
        properties: list[Property],
        noun_phrases: list[NounPhrase],
        sentences: list[Sentence],
        unresolved_links: list[tuple[LinkKey, PendingLink]],
    ) -> None:
        self._document = document
        self._body: dict[str, Any] = document.get("response") or {}
        self._arena = arena
        self._custom_annotations = custom_annotations
        self._topics = topics
        self._coarse_topics = coarse_topics
        self._entities = entities
        self._entailments = entailments
        self._relations = relations
        self._properties = properties
        self._noun_phrases = noun_phrases
        self._sentences = sentences
        self._unresolved_links = tuple(unresolved_links)
        self._saved_values: dict[str, list[CustomAnnotation]] = {}

    # ── status ────────────────────────────────────────────────────────────────

    @property
    def ok(self) -> bool:
        return self._document.get("ok", False)

    @property
    def error(self) -> str:
        return self._document.get("error") or ""

    @property
    def message(self) -> str:
        return self._document.get("message") or ""

    @property
    def raw_text(self) -> str:
        return self._body.get("rawText") or ""

    @property
    def cleaned_text(self) -> str:
        return self._body.get("cleanedText") or ""

    @property
    def custom_annotation_output(self) -> str:
        """Wyjście silnika reguł (Prolog) uruchomionego na regułach użytkownika."""
        return self._body.get("customAnnotationOutput") or ""

    def summary(self) -> str:
        return "Request processed in: %s seconds.  Num Sentences:%s" % (
            self._document.get("time"),
            len(self._sentences),
        )

    # ── kolekcje ──────────────────────────────────────────────────────────────

    @property
    def custom_annotations(self) -> list[CustomAnnotation]:
        return list(self._custom_annotations)

    @property
    def topics(self) -> list[Topic]:
        return list(self._topics)

    @property
    def coarse_topics(self) -> list[Topic]:
        return list(self._coarse_topics)

    @property
    def entities(self) -> list[Entity]:
        return list(self._entities)

    @property
    def entailments(self) -> list[Entailment]:
        return list(self._entailments)

    @property
    def relations(self) -> list[Relation]:
        return list(self._relations)

    @property
    def properties(self) -> list[Property]:
        return list(self._properties)

    @property
    def noun_phrases(self) -> list[NounPhrase]:
        return list(self._noun_phrases)

    @property
    def sentences(self) -> list[Sentence]:
        return list(self._sentences)

    @property
    def words(self) -> Iterator[Word]:
        """Leniwa sekwencja wszystkich słów ze wszystkich zdań."""
        return chain.from_iterable(sentence.words for sentence in self._sentences)

    @property
    def matching_rules(self) -> list[str | None]:
        return [annotation.name for annotation in self._custom_annotations]

    @property
    def unresolved_links(self) -> tuple[tuple[LinkKey, PendingLink], ...]:
        """Żądania, których cel nie pojawił się w payloadzie."""
        return self._unresolved_links

    def record(self, handle: int) -> Annotation:
        """Rekord po uchwycie areny (np. źródło nierozwiązanego powiązania)."""
        return self._arena.get(handle)

    def __getitem__(self, rule_name: str) -> list[CustomAnnotation]:
        if rule_name not in self._saved_values:
            self._saved_values[rule_name] = [
                annotation
                for annotation in self._custom_annotations
                if annotation.name == rule_name
            ]
        return self._saved_values[rule_name]

    def __len__(self) -> int:
        return len(self._arena)


class AnnotationGraphDecoder:
    """
    Implementacja portu ResponseDecoder. Bezstanowy między wywołaniami —
    każde decode() dostaje własny rejestr i arenę, więc jeden dekoder
    można współdzielić między wątkami.
    """

    def __init__(self, report_unresolved: bool = False) -> None:
        self._report_unresolved = report_unresolved

    def decode(self, document: dict[str, Any]) -> AnnotationGraph:
        arena = AnnotationArena()
        registry = InMemoryLinkRegistry()
        ctx = DecodeContext(arena=arena, registry=registry, resolver=LinkResolver(arena))
        body: dict[str, Any] = document.get("response") or {}
        if not isinstance(body, dict):
            raise InvalidResponseError(
                f"Field 'response' must be a JSON object, got {type(body).__name__}"
            )

        def build_all(name: str, constructor: Callable[[dict[str, Any], DecodeContext], T]) -> list[T]:
            payloads = body.get(name) or []
            if not isinstance(payloads, list):
                logger.debug("Pole %s nie jest tablicą (%s), pominięte", name, type(payloads).__name__)
                return []
            return [constructor(payload, ctx) for payload in payloads]

        # Kolejność jak w docstringu modułu.
        custom_annotations = build_all("customAnnotations", build_custom_annotation)
        topics = build_all("topics", build_topic)
        coarse_topics = build_all("coarseTopics", build_topic)
        entities = build_all("entities", build_entity)
        entailments = build_all("entailments", build_entailment)
        relations = build_all("relations", build_relation)
        properties = build_all("properties", build_property)
        noun_phrases = build_all("nounPhrases", build_noun_phrase)
        sentences = build_all("sentences", build_sentence)

        unresolved = registry.pending()
        if unresolved:
            log = logger.warning if self._report_unresolved else logger.debug
            log("Nierozwiązane powiązania: %d (klucze: %s)",
                len(unresolved), sorted({str(key) for key, _ in unresolved})[:10])

        logger.debug("Zdekodowano %d rekordów, %d zdań", len(arena), len(sentences))
        return AnnotationGraph(
            document,
            arena,
            custom_annotations=custom_annotations,
            topics=topics,
            coarse_topics=coarse_topics,
            entities=entities,
            entailments=entailments,
            relations=relations,
            properties=properties,
            noun_phrases=noun_phrases,
            sentences=sentences,
            unresolved_links=unresolved,
        )
