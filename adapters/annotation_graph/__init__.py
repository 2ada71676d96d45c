"""
annotation_graph — rekonstrukcja grafu adnotacji z płaskiej odpowiedzi JSON.

Public import:
    from adapters.annotation_graph import AnnotationGraphDecoder, AnnotationGraph
"""
from .arena import AnnotationArena
from .dependency_tree import PUNCTUATION_TAGS, link_dependency_tree
from .graph import AnnotationGraph, AnnotationGraphDecoder
from .registry import InMemoryLinkRegistry
from .resolver import LinkResolver

__all__ = [
    "AnnotationArena",
    "AnnotationGraph",
    "AnnotationGraphDecoder",
    "InMemoryLinkRegistry",
    "LinkResolver",
    "PUNCTUATION_TAGS",
    "link_dependency_tree",
]
