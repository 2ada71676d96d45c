"""
annotation_graph/resolver.py — LinkResolver: interpretacja PendingLink przy drain().

Każda operacja wiąże oba końce naraz: źródło dostaje cel w swoim slocie,
cel dostaje źródło w slocie zwrotnym. Dzięki temu graf jest dwukierunkowy,
choć payload koduje odwołania tylko w jedną stronę (encja → pozycje słów).
"""
from __future__ import annotations

from contracts import (
    Annotation,
    CustomAnnotation,
    LinkOp,
    PendingLink,
    custom_slot,
    link_slot,
)
from ports.link_registry import LinkRegistry

from .arena import AnnotationArena

# op → (slot źródła, slot zwrotny celu)
_BIDIRECTIONAL: dict[LinkOp, tuple[str, str]] = {
    LinkOp.ATTACH_ENTITY_TO_WORD: ("matched_words", "entities"),
    LinkOp.ATTACH_ENTAILMENT_TO_WORD: ("matched_words", "entailments"),
    LinkOp.ATTACH_RELATION_TO_WORD: ("predicate_words", "relations"),
    LinkOp.ATTACH_RELATION_PARAM_TO_WORD: ("param_words", "relation_params"),
    LinkOp.ATTACH_PROPERTY_PREDICATE_TO_WORD: ("predicate_words", "property_predicates"),
    LinkOp.ATTACH_PROPERTY_PROPERTY_TO_WORD: ("property_words", "property_properties"),
    LinkOp.ATTACH_NOUN_PHRASE_TO_WORD: ("words", "noun_phrases"),
}


class LinkResolver:

    def __init__(self, arena: AnnotationArena) -> None:
        self._arena = arena

    def apply(self, link: PendingLink, target: int) -> None:
        """Wykonuje jedno żądanie z rekordem `target` jako dopisanym argumentem."""
        if link.op is LinkOp.ATTACH_CUSTOM_ANNOTATION:
            self._attach_custom(link, target)
            return
        slots = _BIDIRECTIONAL.get(link.op)
        if slots is None:
            raise ValueError(f"Nieznana operacja powiązania: {link.op!r}")
        forward, backward = slots
        self._arena.attach(link.source, forward, target)
        self._arena.attach(target, backward, link.source)

    def resolve(self, registry: LinkRegistry, record: Annotation) -> int:
        """
        Samorozwiązanie: zdejmuje kolejkę spod klucza tożsamości rekordu
        i wykonuje żądania w kolejności rejestracji. Zwraca liczbę wykonanych.
        """
        key = record.identity_key()
        if key is None:
            return 0
        links = registry.drain(key)
        for link in links:
            self.apply(link, record.handle)
        return len(links)

    def _attach_custom(self, link: PendingLink, target: int) -> None:
        content_index, link_index = link.args
        annotation = self._arena.get(link.source)
        if not isinstance(annotation, CustomAnnotation):
            raise ValueError(f"Źródło linku reguły nie jest adnotacją niestandardową: {annotation!s}")
        self._arena.assign(link.source, link_slot(content_index, link_index), target)
        self._arena.attach(target, custom_slot(annotation.name), link.source)
