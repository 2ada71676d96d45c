"""
response_loader.py — granica między klientem HTTP a resolverem.

Czyta tylko pola statusu odpowiedzi; resolver uruchamiany jest wyłącznie
dla dokumentów z ok != false.
"""
from __future__ import annotations

import json
from typing import Any, Optional, Union

from pydantic import ValidationError

from adapters.annotation_graph import AnnotationGraph, AnnotationGraphDecoder
from contracts import AnalysisError, InvalidResponseError
from ports.response_decoder import ResponseDecoder


def parse_document(raw: Union[str, bytes, bytearray, dict[str, Any]]) -> dict[str, Any]:
    """Zwraca obiekt JSON odpowiedzi. Rzuca InvalidResponseError dla czegokolwiek innego."""
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidResponseError(f"Response is not valid JSON: {exc}") from exc
    else:
        document = raw
    if not isinstance(document, dict):
        raise InvalidResponseError(
            f"Response must be a JSON object, got {type(document).__name__}"
        )
    return document


def load_response(
    raw: Union[str, bytes, bytearray, dict[str, Any]],
    decoder: Optional[ResponseDecoder] = None,
) -> AnnotationGraph:
    """
    Parsuje odpowiedź i buduje graf adnotacji.

    Rzuca InvalidResponseError dla nie-JSON-a lub payloadu niezgodnego ze schematem,
    AnalysisError gdy ok=false.
    """
    document = parse_document(raw)
    if document.get("ok") is False:
        raise AnalysisError(document.get("error") or "")
    try:
        return (decoder or AnnotationGraphDecoder()).decode(document)
    except ValidationError as exc:
        raise InvalidResponseError(f"Response does not match the annotation schema: {exc}") from exc
