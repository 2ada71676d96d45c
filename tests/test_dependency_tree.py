from __future__ import annotations

import logging

from adapters.annotation_graph import AnnotationArena, PUNCTUATION_TAGS, link_dependency_tree
from contracts import Sentence, Word


def _sentence(arena: AnnotationArena, *word_payloads: dict) -> tuple[Sentence, list[Word]]:
    sentence = Sentence.model_validate({"position": 0, "words": list(word_payloads)})
    arena.adopt(sentence)
    words = []
    for payload in word_payloads:
        word = Word.model_validate(payload)
        arena.adopt(word)
        words.append(word)
    return sentence, words


def _word(position: int, token: str, pos: str | None = "NN", parent: int | None = None) -> dict:
    payload = {"position": position, "token": token}
    if pos is not None:
        payload["partOfSpeech"] = pos
    if parent is not None:
        payload["parentPosition"] = parent
    return payload


def test_two_word_sentence_links_parent_child_and_root():
    arena = AnnotationArena()
    sentence, (dogs, bark) = _sentence(
        arena, _word(0, "Dogs", "NNS"), _word(1, "bark", "VBP", parent=0)
    )

    root = link_dependency_tree(sentence, [dogs, bark], arena)

    assert root is dogs
    assert sentence.root_word is dogs
    assert bark.parent is dogs
    assert dogs.children == [bark]
    assert dogs.parent is None


def test_children_keep_sentence_order():
    arena = AnnotationArena()
    sentence, words = _sentence(
        arena,
        _word(0, "The", "DT", parent=1),
        _word(1, "dog", "NN", parent=2),
        _word(2, "barked", "VBD"),
        _word(3, "loudly", "RB", parent=2),
        _word(4, ".", ".", parent=2),
    )

    link_dependency_tree(sentence, words, arena)

    assert [w.token for w in words[2].children] == ["dog", "loudly", "."]
    assert sentence.root_word is words[2]


def test_punctuation_is_never_root():
    arena = AnnotationArena()
    sentence, words = _sentence(arena, _word(0, "Hi", "UH"), _word(1, ".", "."))

    assert link_dependency_tree(sentence, words, arena) is words[0]


def test_sentence_of_only_punctuation_has_no_root():
    arena = AnnotationArena()
    sentence, words = _sentence(arena, _word(0, "(", "("), _word(1, ")", ")"))

    assert link_dependency_tree(sentence, words, arena) is None
    assert sentence.root_word is None


def test_last_parentless_candidate_wins():
    arena = AnnotationArena()
    sentence, words = _sentence(arena, _word(0, "Yes", "UH"), _word(1, "no", "UH"))

    assert link_dependency_tree(sentence, words, arena) is words[1]


def test_negative_parent_position_counts_as_parentless():
    arena = AnnotationArena()
    sentence, words = _sentence(arena, _word(0, "Run", "VB", parent=-1))

    assert link_dependency_tree(sentence, words, arena) is words[0]
    assert words[0].parent is None


def test_word_without_part_of_speech_may_be_root():
    arena = AnnotationArena()
    sentence, words = _sentence(arena, _word(0, "???", pos=None))

    assert link_dependency_tree(sentence, words, arena) is words[0]


def test_parent_outside_sentence_leaves_word_unlinked(caplog):
    arena = AnnotationArena()
    sentence, words = _sentence(
        arena, _word(0, "Dogs", "NNS"), _word(1, "bark", "VBP", parent=7)
    )

    with caplog.at_level(logging.DEBUG, logger="razorgraph.dependency_tree"):
        root = link_dependency_tree(sentence, words, arena)

    assert root is words[0]
    assert words[1].parent is None
    assert words[0].children == []
    assert any("7" in record.getMessage() for record in caplog.records)


def test_punctuation_tags_cover_penn_treebank_marks():
    assert {"$", "``", "''", "(", ")", ",", "--", ".", ":"} == set(PUNCTUATION_TAGS)
    assert "NN" not in PUNCTUATION_TAGS
