"""
annotation_graph/dependency_tree.py — budowa zdań i drzew zależności.

Drugi, niezależny przebieg wiązania: nie korzysta z rejestru, tylko z pozycji
słów w obrębie jednego zdania. Uruchamiany raz na zdanie, gdy wszystkie jego
słowa już istnieją.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from contracts import Sentence, Word

from .arena import AnnotationArena
from .constructors import DecodeContext, build_word

logger = logging.getLogger("razorgraph.dependency_tree")

# Tagi Penn Treebank interpunkcji; nigdy nie zostają korzeniem zdania.
PUNCTUATION_TAGS = frozenset({"$", "``", "''", "(", ")", ",", "--", ".", ":"})


def build_sentence(payload: dict[str, Any], ctx: DecodeContext) -> Sentence:
    sentence = ctx.adopt(Sentence, payload)
    words: list[Word] = []
    for word_payload in sentence.word_payloads:
        word = build_word(word_payload, ctx)
        ctx.arena.attach(sentence.handle, "words", word.handle)
        ctx.arena.assign(word.handle, "sentence", sentence.handle)
        words.append(word)
    link_dependency_tree(sentence, words, ctx.arena)
    return sentence


def link_dependency_tree(
    sentence: Sentence,
    words: list[Word],
    arena: AnnotationArena,
) -> Optional[Word]:
    """
    Wiąże rodzica z dziećmi i wybiera korzeń zdania.

    Korzeniem jest słowo bez pozycji rodzica (lub z ujemną), które nie jest
    interpunkcją. Przy kilku kandydatach wygrywa ostatni. Zwraca korzeń lub None.
    """
    by_position = {word.position: word for word in words}
    root: Optional[Word] = None

    for word in words:
        parent_position = word.parent_position
        if parent_position is not None and parent_position >= 0:
            parent = by_position.get(parent_position)
            if parent is None:
                logger.debug(
                    "Słowo %s wskazuje rodzica spoza zdania (pozycja %s)",
                    word.position, parent_position,
                )
                continue
            arena.assign(word.handle, "parent", parent.handle)
            arena.attach(parent.handle, "children", word.handle)
        elif word.part_of_speech not in PUNCTUATION_TAGS:
            root = word

    if root is not None:
        arena.assign(sentence.handle, "root_word", root.handle)
    return root
