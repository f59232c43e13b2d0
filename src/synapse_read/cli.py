from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Tuple, TypedDict

import typer
import yaml

from .config import (
    PARAGRAPH_MODE,
    ReaderSettings,
    apply_preset,
    load_config,
    update_settings,
)
from .models import WORD, Chunk, Paragraph, ProgressEvent, Token
from .pipeline import document_summary, process_text
from .playback import PlaybackController
from .scheduling import ThreadingScheduler

app = typer.Typer(help="Synapse Read CLI.", no_args_is_help=True)

# File types the CLI knows how to read as documents.
SUPPORTED_INPUT_EXTENSIONS = {".txt"}


class TokenPayload(TypedDict, total=False):
    kind: str
    content: str
    bold: str
    normal: str
    opacity: float


class ChunkPayload(TypedDict):
    chunk_index: int
    is_paragraph_break: bool
    original_content: str
    word_count: int
    tokens: List[TokenPayload]


class DocumentSummary(TypedDict):
    doc_id: str
    chunk_count: int
    paragraph_count: int
    word_count: int
    longest_chunk_words: int


@app.command()
def chunk(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    preset: str | None = typer.Option(
        None, "--preset", "-p", help="Accessibility preset (default, dyslexia, adhd)."
    ),
    fixation: float | None = typer.Option(
        None, "--fixation", help="Fraction of each word to emphasize (0.2-0.8)."
    ),
    opacity: float | None = typer.Option(
        None, "--opacity", help="Opacity carried on word tokens (0.3-1.0)."
    ),
    max_words_per_chunk: int | None = typer.Option(
        None, "--max-words-per-chunk", "-m", help="Upper bound on words per chunk."
    ),
) -> None:
    """Segment a document and emit its chunks and paragraphs as JSON."""
    settings = _resolve_settings(
        config,
        preset,
        {
            "fixation": fixation,
            "opacity": opacity,
            "max_words_per_chunk": max_words_per_chunk,
        },
    )
    document = process_text(_read_text(input_path), settings)
    payload = {
        "chunks": [_chunk_dict(item) for item in document.chunks],
        "paragraphs": [
            [item.chunk_index for item in paragraph.chunks]
            for paragraph in document.paragraphs
        ],
    }
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command()
def analyze(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=True, file_okay=True
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    preset: str | None = typer.Option(None, "--preset", "-p"),
    max_words_per_chunk: int | None = typer.Option(
        None, "--max-words-per-chunk", "-m"
    ),
) -> None:
    """Summarize chunk, paragraph and word counts for each document."""
    settings = _resolve_settings(
        config, preset, {"max_words_per_chunk": max_words_per_chunk}
    )
    documents = _load_documents(input_path)
    summary: List[DocumentSummary] = []
    for doc_id, text in documents:
        counts = document_summary(process_text(text, settings))
        summary.append({"doc_id": doc_id, **counts})  # type: ignore[typeddict-item]
    typer.echo(json.dumps({"documents": summary}, indent=2))


@app.command()
def play(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    preset: str | None = typer.Option(None, "--preset", "-p"),
    speed: float | None = typer.Option(
        None, "--speed", "-s", help="Seconds each chunk stays on screen (0.5-10)."
    ),
    mode: str | None = typer.Option(
        None, "--mode", help="Reading mode: 'chunk' or 'paragraph'."
    ),
    max_words_per_chunk: int | None = typer.Option(
        None, "--max-words-per-chunk", "-m"
    ),
    emphasis: bool = typer.Option(
        True, "--emphasis/--no-emphasis", help="Bold the fixation prefix of words."
    ),
) -> None:
    """Pace through a document in the terminal and report reading stats."""
    settings = _resolve_settings(
        config,
        preset,
        {
            "speed": speed,
            "reading_mode": mode,
            "max_words_per_chunk": max_words_per_chunk,
        },
    )
    controller = PlaybackController(
        _read_text(input_path), settings, scheduler=ThreadingScheduler()
    )
    if controller.document.is_empty:
        typer.echo("No readable text found.", err=True)
        raise typer.Exit(code=1)

    _echo_content(controller.current_content(), emphasis)
    if settings.reading_mode == PARAGRAPH_MODE:
        while controller.next_paragraph():
            _echo_content(controller.current_content(), emphasis)
    else:

        def show(_event: ProgressEvent) -> None:
            _echo_content(controller.current_content(), emphasis)

        controller.add_listener(show)
        controller.play()
        try:
            # Short waits keep Ctrl+C responsive.
            while not controller.wait(timeout=0.25):
                pass
        except KeyboardInterrupt:
            controller.pause()
        finally:
            controller.close()

    stats = controller.stats
    typer.echo(
        f"words={stats.words_read} wpm={stats.wpm} "
        f"time={round(stats.time_elapsed)}s pauses={stats.pause_count} "
        f"comprehension={stats.comprehension_score}"
    )


@app.command("print-config")
def print_config(
    preset: str | None = typer.Option(None, "--preset", "-p"),
) -> None:
    """Print the default (or preset) settings as YAML."""
    settings = ReaderSettings()
    if preset:
        settings = _preset_or_bad_parameter(settings, preset)
    typer.echo(yaml.safe_dump(settings.to_dict(), sort_keys=False))


def main() -> None:
    app()


def _resolve_settings(
    config: Path | None, preset: str | None, overrides: Dict[str, object]
) -> ReaderSettings:
    """Load the config file, then layer the preset and explicit CLI flags on top."""
    try:
        settings = load_config(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    if preset:
        settings = _preset_or_bad_parameter(settings, preset)
    changes = {key: value for key, value in overrides.items() if value is not None}
    return update_settings(settings, changes)


def _preset_or_bad_parameter(settings: ReaderSettings, preset: str) -> ReaderSettings:
    try:
        return apply_preset(settings, preset)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--preset") from exc


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise typer.BadParameter(
            f"{path} is not UTF-8 text.", param_hint="--input-path"
        ) from exc


def _load_documents(input_path: Path) -> List[Tuple[str, str]]:
    """Expand the input path into (doc_id, text) pairs."""
    if input_path.is_file():
        return [(input_path.name, _read_text(input_path))]
    files = sorted(
        p
        for p in input_path.rglob("*")
        if p.is_file() and p.suffix.lower() in SUPPORTED_INPUT_EXTENSIONS
    )
    return [(str(file.relative_to(input_path)), _read_text(file)) for file in files]


def _chunk_dict(item: Chunk) -> ChunkPayload:
    return {
        "chunk_index": item.chunk_index,
        "is_paragraph_break": item.is_paragraph_break,
        "original_content": item.original_content,
        "word_count": item.word_count,
        "tokens": [_token_dict(token) for token in item.tokens],
    }


def _token_dict(token: Token) -> TokenPayload:
    payload: TokenPayload = {"kind": token.kind, "content": token.content}
    if token.kind == WORD:
        payload["bold"] = token.bold  # type: ignore[union-attr]
        payload["normal"] = token.normal  # type: ignore[union-attr]
    if hasattr(token, "opacity"):
        payload["opacity"] = token.opacity  # type: ignore[union-attr]
    return payload


def _render(content: Chunk | Paragraph, emphasis: bool) -> str:
    if not emphasis:
        return "".join(token.content for token in content.tokens).strip()
    parts: List[str] = []
    for token in content.tokens:
        if token.kind == WORD:
            parts.append(typer.style(token.bold, bold=True) + token.normal)  # type: ignore[union-attr]
        else:
            parts.append(token.content)
    return "".join(parts).strip()


def _echo_content(content: Chunk | Paragraph | None, emphasis: bool) -> None:
    if content is not None:
        typer.echo(_render(content, emphasis))


if __name__ == "__main__":
    main()
