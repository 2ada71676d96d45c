"""
Port: ResponseDecoder
Odpowiedzialność: zamiana sparsowanego dokumentu JSON odpowiedzi na graf adnotacji.
"""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ResponseDecoder(Protocol):
    def decode(self, document: dict[str, Any]) -> Any:
        """
        Builds a fully cross-linked, read-only annotation graph from one parsed
        response document (AnnotationGraph in the default adapter).
        Missing, null or wrongly typed optional fields fall back to defaults;
        references to records absent from the payload are left unresolved.
        Raises InvalidResponseError only when an annotation entry is not a JSON object.
        """
        ...
