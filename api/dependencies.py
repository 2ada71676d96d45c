"""
dependencies.py — FastAPI Dependency Injection.
Każda zależność zwraca odpowiedni obiekt przez Request.app.state.
"""
from __future__ import annotations

from fastapi import Request

from adapters.annotation_graph import AnnotationGraphDecoder
from config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_decoder(request: Request) -> AnnotationGraphDecoder:
    return request.app.state.decoder
