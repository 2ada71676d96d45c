from __future__ import annotations

import logging

import pytest

from adapters.annotation_graph import AnnotationGraphDecoder
from contracts import InvalidResponseError, LinkKey, LinkOp


def _document(**response) -> dict:
    return {"ok": True, "time": 0.01, "response": response}


def _word(position: int, token: str, pos: str = "NN", parent: int | None = None) -> dict:
    payload = {"position": position, "token": token, "partOfSpeech": pos}
    if parent is not None:
        payload["parentPosition"] = parent
    return payload


def _dogs_bark(**response) -> dict:
    sentences = [{"position": 0, "words": [_word(0, "Dogs", "NNS"), _word(1, "bark", "VBP", parent=0)]}]
    return _document(sentences=sentences, **response)


def _decode(document: dict, **kwargs):
    return AnnotationGraphDecoder(**kwargs).decode(document)


def _tokens(words) -> list:
    return [w.token for w in words]


# ── drzewo i słowa ────────────────────────────────────────────────────────────

def test_two_word_sentence_builds_dependency_tree():
    graph = _decode(_dogs_bark())

    sentence = graph.sentences[0]
    dogs, bark = sentence.words
    assert sentence.root_word is dogs
    assert bark.parent is dogs
    assert dogs.children == [bark]
    assert dogs.sentence is sentence
    assert graph.unresolved_links == ()


def test_words_iterates_lazily_across_sentences():
    document = _document(sentences=[
        {"position": 0, "words": [_word(0, "Dogs", "NNS"), _word(1, "bark", "VBP", parent=0)]},
        {"position": 1, "words": [_word(2, "Cats", "NNS"), _word(3, "sleep", "VBP", parent=2)]},
    ])
    graph = _decode(document)

    words = graph.words

    assert iter(words) is words
    assert _tokens(words) == ["Dogs", "bark", "Cats", "sleep"]
    assert [s.root_word.token for s in graph.sentences] == ["Dogs", "Cats"]


# ── encje ─────────────────────────────────────────────────────────────────────

def test_entity_links_to_words_built_after_it():
    graph = _decode(_dogs_bark(entities=[{"id": 0, "entityId": "Dog", "matchingTokens": [0, 1]}]))

    entity = graph.entities[0]
    dogs, bark = graph.sentences[0].words
    assert _tokens(entity.matched_words) == ["Dogs", "bark"]
    assert dogs.entities == [entity]
    assert bark.entities == [entity]
    assert entity.id == "Dog"


def test_entities_on_same_word_keep_source_order():
    graph = _decode(_dogs_bark(entities=[
        {"id": 0, "entityId": "Dog", "matchingTokens": [0]},
        {"id": 1, "entityId": "Animal", "matchingTokens": [0]},
    ]))

    dogs = graph.sentences[0].words[0]
    assert [e.id for e in dogs.entities] == ["Dog", "Animal"]


def test_repeated_position_links_once():
    graph = _decode(_dogs_bark(entities=[{"id": 0, "entityId": "Dog", "matchingTokens": [0, 0]}]))

    entity = graph.entities[0]
    assert _tokens(entity.matched_words) == ["Dogs"]
    assert graph.sentences[0].words[0].entities == [entity]


def test_entity_fields_default_when_missing():
    graph = _decode(_document(entities=[{"id": 3}]))

    entity = graph.entities[0]
    assert entity.document_id == 3
    assert entity.id is None
    assert entity.matched_positions == []
    assert entity.freebase_types == []
    assert entity.data == {}
    assert entity.relevance_score is None
    assert entity.matched_words == []


# ── relacje, właściwości, frazy, wnioskowania, tematy ─────────────────────────

def test_relation_params_link_to_parent_and_words():
    graph = _decode(_dogs_bark(
        entities=[{"id": 0, "entityId": "Dog", "matchingTokens": [0]}],
        relations=[{"id": 0, "wordPositions": [1], "params": [{"relation": "SUBJECT", "wordPositions": [0]}]}],
    ))

    relation = graph.relations[0]
    param = relation.params[0]
    dogs, bark = graph.sentences[0].words
    assert _tokens(relation.predicate_words) == ["bark"]
    assert bark.relations == [relation]
    assert param.relation_parent is relation
    assert param.relation == "SUBJECT"
    assert param.param_words == [dogs]
    assert dogs.relation_params == [param]
    assert param.entities == graph.entities


def test_property_predicate_and_property_words_are_separate():
    graph = _decode(_dogs_bark(properties=[{"id": 0, "wordPositions": [0], "propertyPositions": [1]}]))

    prop = graph.properties[0]
    dogs, bark = graph.sentences[0].words
    assert prop.predicate_words == [dogs]
    assert prop.property_words == [bark]
    assert dogs.property_predicates == [prop]
    assert dogs.property_properties == []
    assert bark.property_properties == [prop]


def test_noun_phrases_and_entailments_link_to_words():
    graph = _decode(_dogs_bark(
        nounPhrases=[{"id": 0, "wordPositions": [0]}],
        entailments=[{"id": 0, "wordPositions": [0], "entailedTree": {"word": "canine"}, "score": 0.4}],
    ))

    phrase = graph.noun_phrases[0]
    entailment = graph.entailments[0]
    dogs = graph.sentences[0].words[0]
    assert phrase.words == [dogs]
    assert dogs.noun_phrases == [phrase]
    assert entailment.entailed_word == "canine"
    assert entailment.matched_words == [dogs]
    assert dogs.entailments == [entailment]


def test_topics_and_coarse_topics_decode_separately():
    graph = _decode(_document(
        topics=[{"id": 0, "label": "Pets", "score": 0.9, "wikiLink": "http://en.wikipedia.org/wiki/Pet"}],
        coarseTopics=[{"id": 0}],
    ))

    assert [t.label for t in graph.topics] == ["Pets"]
    assert graph.topics[0].wikipedia_link.endswith("/Pet")
    assert graph.coarse_topics[0].label == ""
    assert graph.coarse_topics[0].score == 0


# ── puste i brakujące tablice ─────────────────────────────────────────────────

def test_empty_arrays_give_empty_collections():
    graph = _decode(_dogs_bark(entities=[], topics=[], relations=[], customAnnotations=[]))

    assert graph.entities == []
    assert graph.topics == []
    assert graph.relations == []
    assert graph.custom_annotations == []
    assert len(graph.sentences) == 1


def test_missing_response_body_decodes_to_empty_graph():
    graph = _decode({"ok": True, "time": 0.2})

    assert graph.sentences == []
    assert list(graph.words) == []
    assert graph.raw_text == ""
    assert graph.cleaned_text == ""
    assert len(graph) == 0
    assert graph.summary() == "Request processed in: 0.2 seconds.  Num Sentences:0"


def test_status_fields_copied_verbatim():
    graph = _decode({"ok": False, "error": "Bad key", "message": "quota", "time": 1})

    assert graph.ok is False
    assert graph.error == "Bad key"
    assert graph.message == "quota"


def test_summary_counts_sentences():
    graph = _decode(_dogs_bark(rawText="Dogs bark", cleanedText="Dogs bark"))

    assert graph.summary() == "Request processed in: 0.01 seconds.  Num Sentences:1"
    assert graph.raw_text == "Dogs bark"
    assert graph.cleaned_text == "Dogs bark"


# ── nierozwiązane powiązania ──────────────────────────────────────────────────

def test_missing_target_is_silently_unresolved():
    graph = _decode(_dogs_bark(entities=[{"id": 0, "matchingTokens": [9]}]))

    assert graph.entities[0].matched_words == []
    [(key, link)] = graph.unresolved_links
    assert key == LinkKey("word", 9)
    assert link.op is LinkOp.ATTACH_ENTITY_TO_WORD
    assert graph.record(link.source) is graph.entities[0]


def test_unresolved_links_are_warned_about_when_reporting(caplog):
    document = _dogs_bark(entities=[{"id": 0, "matchingTokens": [9]}])

    with caplog.at_level(logging.WARNING, logger="razorgraph.decoder"):
        _decode(document, report_unresolved=True)

    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_unresolved_links_stay_quiet_by_default(caplog):
    document = _dogs_bark(entities=[{"id": 0, "matchingTokens": [9]}])

    with caplog.at_level(logging.WARNING, logger="razorgraph.decoder"):
        _decode(document)

    assert caplog.records == []


def test_each_decode_builds_an_independent_graph():
    document = _dogs_bark(entities=[{"id": 0, "matchingTokens": [0]}])
    decoder = AnnotationGraphDecoder()

    first = decoder.decode(document)
    second = decoder.decode(document)

    assert first.entities[0] is not second.entities[0]
    assert len(first.sentences[0].words[0].entities) == 1
    assert len(second.sentences[0].words[0].entities) == 1
    assert second.unresolved_links == ()


# ── pola null i złe typy ──────────────────────────────────────────────────────

def test_null_fields_fall_back_to_defaults():
    graph = _decode(_dogs_bark(
        topics=[{"id": 1, "label": None, "score": None}],
        entities=[{"id": 0, "entityId": None, "matchingTokens": None, "freebaseTypes": None,
                   "type": None, "data": None, "relevanceScore": None}],
        relations=[{"id": 0, "wordPositions": [1], "params": None}],
    ))

    topic = graph.topics[0]
    assert topic.label == ""
    assert topic.score == 0
    entity = graph.entities[0]
    assert entity.matched_positions == []
    assert entity.freebase_types == []
    assert entity.dbpedia_types == []
    assert entity.data == {}
    assert entity.id is None
    assert graph.relations[0].params == []
    assert _tokens(graph.relations[0].predicate_words) == ["bark"]


def test_wrongly_typed_field_is_dropped_and_the_rest_decodes():
    graph = _decode(_dogs_bark(
        topics=[{"id": 1, "label": 5, "score": "high"}],
        entities=[{"id": 0, "entityId": "Dog", "matchingTokens": "0", "matchedText": "Dogs"},
                  {"id": 1, "entityId": "Bark", "matchingTokens": [1]}],
    ))

    assert graph.topics[0].label == ""
    assert graph.topics[0].score == 0
    dog, bark = graph.entities
    assert dog.matched_positions == []
    assert dog.matched_text == "Dogs"
    assert graph.sentences[0].words[1].entities == [bark]


def test_null_arrays_and_status_fields():
    graph = _decode({"ok": True, "error": None, "message": None,
                     "response": {"entities": None, "sentences": None, "rawText": None}})

    assert graph.entities == []
    assert graph.sentences == []
    assert graph.error == ""
    assert graph.message == ""
    assert graph.raw_text == ""


def test_array_field_of_wrong_shape_is_skipped():
    graph = _decode(_dogs_bark(entities={"id": 0}, topics=3))

    assert graph.entities == []
    assert graph.topics == []
    assert len(graph.sentences) == 1


def test_annotation_entry_that_is_not_an_object_is_rejected():
    with pytest.raises(InvalidResponseError):
        _decode(_document(entities=["Dog"]))


def test_response_body_that_is_not_an_object_is_rejected():
    with pytest.raises(InvalidResponseError):
        _decode({"ok": True, "response": ["sentences"]})
