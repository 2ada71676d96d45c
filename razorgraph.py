#!/usr/bin/env python3
"""
razorgraph.py — CLI narzędzie razorgraph.

Działa całkowicie lokalnie — czyta zapisaną odpowiedź serwisu analizy tekstu
(JSON) z pliku lub stdin, buduje graf adnotacji i wyświetla go w tabelach.

Konfiguracja: zmienne środowiskowe z prefiksem RAZORGRAPH_
lub plik .env (np. RAZORGRAPH_REPORT_UNRESOLVED_LINKS=true).

Podkomendy:
    summary   — status odpowiedzi i liczności kolekcji
    words     — słowa z drzewem zależności i powiązanymi adnotacjami
    entities  — encje z dopasowanymi słowami
    links     — powiązania, których cel nie wystąpił w odpowiedzi
    rules     — adnotacje niestandardowe pogrupowane po regułach

Użycie:
    python razorgraph.py summary --file response.json
    python razorgraph.py words --file response.json --sentence 0
    cat response.json | python razorgraph.py entities
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from adapters.annotation_graph import AnnotationGraph, AnnotationGraphDecoder
from adapters.response_loader import load_response
from config import Settings
from contracts import AnalysisError, InvalidResponseError

logger = logging.getLogger("razorgraph.cli")


# -- helpers ---------------------------------------------------------------

_CONSOLE: Console | None = None


def _console() -> Console:
    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console(highlight=False)
    return _CONSOLE


def _safe_terminal_text(value: Any) -> str:
    s = "-" if value is None else str(value)
    encoding = sys.stdout.encoding or "utf-8"
    try:
        s.encode(encoding)
        return s
    except UnicodeEncodeError:
        return s.encode(encoding, errors="replace").decode(encoding, errors="replace")


def _short(value: Any, limit: int = 64) -> str:
    s = _safe_terminal_text(value).replace("\n", " ").strip()
    if len(s) <= limit:
        return s
    return s[: limit - 3] + "..."


def _join(values: list[Any]) -> str:
    return ", ".join(_safe_terminal_text(v) for v in values)


def _print_kv_table(title: str, rows: list[tuple[str, Any]]) -> None:
    table = Table(title=title, box=box.ASCII, show_header=False, pad_edge=False)
    table.add_column("Key", no_wrap=True, style="bold cyan")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(_safe_terminal_text(key), _safe_terminal_text(value))
    _console().print(table)


def _read_raw(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if sys.stdin.isatty():
        _console().print("[red]Podaj --file lub przekaż odpowiedź JSON na stdin.[/red]")
        sys.exit(1)
    return sys.stdin.read()


def _load_graph(args: argparse.Namespace, settings: Settings) -> AnnotationGraph:
    decoder = AnnotationGraphDecoder(report_unresolved=settings.report_unresolved_links)
    try:
        return load_response(_read_raw(args), decoder)
    except InvalidResponseError as exc:
        _console().print(f"[red]Niepoprawna odpowiedź: {exc}[/red]")
        sys.exit(1)
    except AnalysisError as exc:
        _console().print(f"[red]Analiza nie powiodła się: {exc.error}[/red]")
        sys.exit(1)


# -- rows ------------------------------------------------------------------

def _summary_rows(graph: AnnotationGraph) -> list[tuple[str, Any]]:
    return [
        ("ok", graph.ok),
        ("error", graph.error),
        ("message", graph.message),
        ("summary", graph.summary()),
        ("sentences", len(graph.sentences)),
        ("words", sum(1 for _ in graph.words)),
        ("entities", len(graph.entities)),
        ("topics", len(graph.topics)),
        ("coarse topics", len(graph.coarse_topics)),
        ("entailments", len(graph.entailments)),
        ("relations", len(graph.relations)),
        ("properties", len(graph.properties)),
        ("noun phrases", len(graph.noun_phrases)),
        ("custom annotations", len(graph.custom_annotations)),
        ("unresolved links", len(graph.unresolved_links)),
    ]


def _word_rows(graph: AnnotationGraph, sentence_index: int | None = None) -> list[list[str]]:
    rows: list[list[str]] = []
    for index, sentence in enumerate(graph.sentences):
        if sentence_index is not None and index != sentence_index:
            continue
        root = sentence.root_word
        for word in sentence.words:
            parent = word.parent
            rows.append([
                _safe_terminal_text(index),
                _safe_terminal_text(word.position),
                _short(word.token, 24),
                _safe_terminal_text(word.part_of_speech),
                _safe_terminal_text(parent.position if parent is not None else None),
                _join([child.position for child in word.children]),
                _join([entity.id or entity.matched_text for entity in word.entities]),
                "ROOT" if root is not None and root.handle == word.handle else "",
            ])
    return rows


def _entity_rows(graph: AnnotationGraph) -> list[list[str]]:
    rows: list[list[str]] = []
    for entity in graph.entities:
        relevance = entity.relevance_score
        rows.append([
            _safe_terminal_text(entity.document_id),
            _short(entity.id, 32),
            _short(entity.matched_text, 32),
            _join([word.token for word in entity.matched_words]),
            f"{relevance:.2f}" if relevance is not None else "-",
        ])
    return rows


def _link_rows(graph: AnnotationGraph) -> list[list[str]]:
    return [
        [
            _safe_terminal_text(key.kind),
            _safe_terminal_text(key.ident),
            link.op.value,
            _short(graph.record(link.source), 48),
        ]
        for key, link in graph.unresolved_links
    ]


# -- commands --------------------------------------------------------------

def _summary(args: argparse.Namespace, settings: Settings) -> None:
    graph = _load_graph(args, settings)
    _print_kv_table("Response", _summary_rows(graph))


def _words(args: argparse.Namespace, settings: Settings) -> None:
    graph = _load_graph(args, settings)
    rows = _word_rows(graph, args.sentence)
    table = Table(title=f"Words [{len(rows)}]", box=box.ASCII)
    for column in ("Sent", "Pos", "Token", "POS", "Parent", "Children", "Entities", ""):
        table.add_column(column, no_wrap=column in ("Sent", "Pos", "POS"))
    for row in rows:
        table.add_row(*row)
    _console().print(table)


def _entities(args: argparse.Namespace, settings: Settings) -> None:
    graph = _load_graph(args, settings)
    rows = _entity_rows(graph)
    table = Table(title=f"Entities [{len(rows)}]", box=box.ASCII)
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Entity")
    table.add_column("Matched text")
    table.add_column("Words")
    table.add_column("Rel", justify="right", no_wrap=True)
    for row in rows:
        table.add_row(*row)
    _console().print(table)


def _links(args: argparse.Namespace, settings: Settings) -> None:
    graph = _load_graph(args, settings)
    rows = _link_rows(graph)
    if not rows:
        _console().print("Wszystkie powiązania rozwiązane.")
        return
    table = Table(title=f"Unresolved links [{len(rows)}]", box=box.ASCII)
    table.add_column("Kind", no_wrap=True, style="cyan")
    table.add_column("Ident", no_wrap=True)
    table.add_column("Operation")
    table.add_column("Source")
    for row in rows:
        table.add_row(*row)
    _console().print(table)


def _rules(args: argparse.Namespace, settings: Settings) -> None:
    graph = _load_graph(args, settings)
    if graph.custom_annotation_output:
        _console().print(_safe_terminal_text(graph.custom_annotation_output))
    table = Table(title=f"Rules [{len(set(graph.matching_rules))}]", box=box.ASCII)
    table.add_column("Rule", no_wrap=True, style="cyan")
    table.add_column("Matches", justify="right", no_wrap=True)
    table.add_column("Keys")
    for name in dict.fromkeys(graph.matching_rules):
        matches = graph[name]
        keys = dict.fromkeys(
            key_value.get("key") for annotation in matches for key_value in annotation.contents
        )
        table.add_row(_safe_terminal_text(name), str(len(matches)), _join(list(keys)))
    _console().print(table)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="razorgraph",
        description="razorgraph — CLI (lokalny, bez połączenia z serwisem)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_input(p: argparse.ArgumentParser) -> None:
        p.add_argument("--file", "-f", help="Plik z odpowiedzią JSON (lub stdin)")

    # summary
    p = sub.add_parser("summary", help="Status odpowiedzi i liczności kolekcji")
    add_input(p)

    # words
    p = sub.add_parser("words", help="Słowa z drzewem zależności")
    add_input(p)
    p.add_argument("--sentence", "-s", type=int, default=None, metavar="N",
                   help="Tylko zdanie o indeksie N")

    # entities
    p = sub.add_parser("entities", help="Encje z dopasowanymi słowami")
    add_input(p)

    # links
    p = sub.add_parser("links", help="Nierozwiązane powiązania")
    add_input(p)

    # rules
    p = sub.add_parser("rules", help="Adnotacje niestandardowe po regułach")
    add_input(p)

    args = parser.parse_args(argv)
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    commands = {
        "summary":  _summary,
        "words":    _words,
        "entities": _entities,
        "links":    _links,
        "rules":    _rules,
    }
    commands[args.command](args, settings)


if __name__ == "__main__":
    main()
