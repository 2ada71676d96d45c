"""
config.py — Konfiguracja aplikacji przez zmienne środowiskowe.
Wszystkie zmienne mają prefiks RAZORGRAPH_.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Resolver: nierozwiązane powiązania logowane na WARNING zamiast DEBUG
    report_unresolved_links: bool = False

    # API: limit rozmiaru przyjmowanego payloadu
    max_payload_bytes: int = 10_000_000

    # App
    app_title: str = "razorgraph"
    app_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_prefix="RAZORGRAPH_", env_file=".env", extra="ignore")
