"""
Router: POST /graph

Przyjmuje surową odpowiedź serwisu analizy tekstu (JSON) i zwraca
powiązany widok: zdania z drzewami zależności, encje ze słowami
oraz listę powiązań, których cel nie wystąpił w payloadzie.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from adapters.annotation_graph import AnnotationGraph, AnnotationGraphDecoder
from adapters.response_loader import load_response
from api.dependencies import get_decoder, get_settings
from api.schemas import (
    EntityView,
    GraphResponse,
    SentenceView,
    UnresolvedLinkView,
    WordView,
)
from config import Settings
from contracts import AnalysisError, Entity, InvalidResponseError, Word

router = APIRouter(prefix="/graph", tags=["graph"])


def _word_view(word: Word, root: Word | None) -> WordView:
    parent = word.parent
    return WordView(
        position=word.position,
        token=word.token,
        part_of_speech=word.part_of_speech,
        parent_position=parent.position if parent is not None else None,
        children=[child.position for child in word.children],
        entities=[entity.document_id for entity in word.entities],
        relations=[relation.id for relation in word.relations],
        noun_phrases=[phrase.id for phrase in word.noun_phrases],
        is_root=root is not None and root.handle == word.handle,
    )


def _entity_view(entity: Entity) -> EntityView:
    return EntityView(
        document_id=entity.document_id,
        entity_id=entity.id,
        matched_text=entity.matched_text,
        matched_positions=entity.matched_positions,
        matched_word_positions=[word.position for word in entity.matched_words],
        relevance_score=entity.relevance_score,
        confidence_score=entity.confidence_score,
    )


def to_graph_response(graph: AnnotationGraph) -> GraphResponse:
    sentences = []
    for sentence in graph.sentences:
        root = sentence.root_word
        sentences.append(SentenceView(
            position=sentence.position,
            root_position=root.position if root is not None else None,
            words=[_word_view(word, root) for word in sentence.words],
        ))

    return GraphResponse(
        ok=graph.ok,
        error=graph.error,
        message=graph.message,
        summary=graph.summary(),
        matching_rules=graph.matching_rules,
        topics=[topic.label for topic in graph.topics],
        sentences=sentences,
        entities=[_entity_view(entity) for entity in graph.entities],
        unresolved_links=[
            UnresolvedLinkView(kind=key.kind, ident=key.ident, op=link.op.value, source=link.source)
            for key, link in graph.unresolved_links
        ],
    )


@router.post("", response_model=GraphResponse)
async def resolve_graph(
    request: Request,
    decoder: AnnotationGraphDecoder = Depends(get_decoder),
    settings: Settings = Depends(get_settings),
) -> GraphResponse:
    raw = await request.body()
    if len(raw) > settings.max_payload_bytes:
        raise HTTPException(status_code=413, detail="Payload przekracza max_payload_bytes")

    try:
        graph = load_response(raw, decoder)
    except InvalidResponseError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AnalysisError as exc:
        raise HTTPException(status_code=422, detail=f"Analiza nie powiodła się: {exc.error}")

    return to_graph_response(graph)
