"""
annotation_graph/constructors.py — konstruktory adnotacji, po jednym na rodzaj.

Każdy konstruktor, dostając fragment JSON i kontekst dekodowania:
  1. dekoduje rekord i oddaje go arenie,
  2. samorozwiązanie — wykonuje żądania czekające pod własnym kluczem,
  3. rejestracja w przód — zostawia żądania pod kluczami rekordów,
     które jeszcze nie istnieją (w praktyce: pozycje słów, a dla adnotacji
     niestandardowych — dowolne (annotationName, linkedId)).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ValidationError

from contracts import (
    Annotation,
    AnnotationKind,
    CustomAnnotation,
    Entailment,
    Entity,
    InvalidResponseError,
    LinkKey,
    LinkOp,
    NounPhrase,
    PendingLink,
    Property,
    Relation,
    RelationParam,
    Topic,
    Word,
)
from ports.link_registry import LinkRegistry

from .arena import AnnotationArena
from .resolver import LinkResolver

logger = logging.getLogger("razorgraph.constructors")

R = TypeVar("R", bound=Annotation)


def decode_record(model: type[R], payload: Any) -> R:
    """
    Dekoduje rekord tolerancyjnie: pole o złym typie jest pomijane
    (obowiązuje wartość domyślna), a nie przerywa całego dekodowania.
    Rzuca InvalidResponseError tylko gdy fragment w ogóle nie jest obiektem JSON.
    """
    if not isinstance(payload, dict):
        raise InvalidResponseError(
            f"{model.__name__} payload must be a JSON object, got {type(payload).__name__}"
        )
    data = dict(payload)
    while True:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            rejected = {
                error["loc"][0] for error in exc.errors()
                if error["loc"] and error["loc"][0] in data
            }
            if not rejected:
                raise InvalidResponseError(f"Invalid {model.__name__} payload: {exc}") from exc
            logger.debug("Pominięte pola %s o złym typie: %s", model.__name__, sorted(map(str, rejected)))
            for key in rejected:
                del data[key]


@dataclass
class DecodeContext:
    """Stan jednego dekodowania — przekazywany jawnie do każdego konstruktora."""
    arena: AnnotationArena
    registry: LinkRegistry
    resolver: LinkResolver

    def adopt(self, model: type[R], payload: dict[str, Any]) -> R:
        record = decode_record(model, payload)
        self.arena.adopt(record)
        self.resolver.resolve(self.registry, record)
        return record

    def request(
        self,
        kind: AnnotationKind | str,
        ident: Any,
        op: LinkOp,
        source: Annotation,
        *args: Any,
    ) -> None:
        self.registry.register(
            LinkKey.of(kind, ident),
            PendingLink(op=op, source=source.handle, args=args),
        )

    def request_words(self, positions: list[int], op: LinkOp, source: Annotation) -> None:
        for position in positions:
            self.request(AnnotationKind.WORD, position, op, source)


# ── Konstruktory ──────────────────────────────────────────────────────────────

def build_custom_annotation(payload: dict[str, Any], ctx: DecodeContext) -> CustomAnnotation:
    # Budowane jako pierwsze, nikt ich nie adresuje.
    annotation = ctx.adopt(CustomAnnotation, payload)
    for content_index, link_index, link in annotation.links():
        ctx.request(
            link.get("annotationName", ""),
            link.get("linkedId"),
            LinkOp.ATTACH_CUSTOM_ANNOTATION,
            annotation,
            content_index,
            link_index,
        )
    return annotation


def build_topic(payload: dict[str, Any], ctx: DecodeContext) -> Topic:
    return ctx.adopt(Topic, payload)


def build_entity(payload: dict[str, Any], ctx: DecodeContext) -> Entity:
    entity = ctx.adopt(Entity, payload)
    ctx.request_words(entity.matched_positions, LinkOp.ATTACH_ENTITY_TO_WORD, entity)
    return entity


def build_entailment(payload: dict[str, Any], ctx: DecodeContext) -> Entailment:
    entailment = ctx.adopt(Entailment, payload)
    ctx.request_words(entailment.matched_positions, LinkOp.ATTACH_ENTAILMENT_TO_WORD, entailment)
    return entailment


def build_relation(payload: dict[str, Any], ctx: DecodeContext) -> Relation:
    relation = ctx.adopt(Relation, payload)
    ctx.request_words(relation.predicate_positions, LinkOp.ATTACH_RELATION_TO_WORD, relation)
    for param_payload in relation.param_payloads:
        build_relation_param(param_payload, relation, ctx)
    return relation


def build_relation_param(
    payload: dict[str, Any],
    relation: Relation,
    ctx: DecodeContext,
) -> RelationParam:
    param = ctx.adopt(RelationParam, payload)
    # Rodzic już istnieje: wiązanie bezpośrednie, bez rejestru.
    ctx.arena.assign(param.handle, "relation_parent", relation.handle)
    ctx.arena.attach(relation.handle, "params", param.handle)
    ctx.request_words(param.param_positions, LinkOp.ATTACH_RELATION_PARAM_TO_WORD, param)
    return param


def build_property(payload: dict[str, Any], ctx: DecodeContext) -> Property:
    prop = ctx.adopt(Property, payload)
    ctx.request_words(prop.predicate_positions, LinkOp.ATTACH_PROPERTY_PREDICATE_TO_WORD, prop)
    ctx.request_words(prop.property_positions, LinkOp.ATTACH_PROPERTY_PROPERTY_TO_WORD, prop)
    return prop


def build_noun_phrase(payload: dict[str, Any], ctx: DecodeContext) -> NounPhrase:
    phrase = ctx.adopt(NounPhrase, payload)
    ctx.request_words(phrase.word_positions, LinkOp.ATTACH_NOUN_PHRASE_TO_WORD, phrase)
    return phrase


def build_word(payload: dict[str, Any], ctx: DecodeContext) -> Word:
    # Słowa niczego nie adresują, tylko zbierają żądania innych rodzajów.
    return ctx.adopt(Word, payload)
