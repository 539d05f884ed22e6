from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, TypedDict

import typer
import yaml

from .config import BreatheConfig, OpenAISettings, load_config
from .llm import OpenAIScriptClient
from .models import PaceResult, Script, WordState
from .pace import classify, feedback, format_elapsed, words_per_minute
from .scheduling import ManualScheduler
from .session import MemorizationSession, begin_session
from .tokenization import TokenizedScript
from .writing import NoOpScriptWriter, OpenAIScriptWriter, ScriptWriter

app = typer.Typer(help="Breathe script memorizer CLI.", no_args_is_help=True)

logger = logging.getLogger(__name__)

BLACKOUT_CHAR = "█"

DRILL_HELP = (
    "Commands: n = black out next word, b = step back, r = reset, "
    "p N = peek word N, t = start/stop timer, q = quit"
)


class TokenPayload(TypedDict):
    index: int
    kind: str
    text: str
    rank: int | None


class PacePayload(TypedDict):
    total_words: int
    elapsed: str
    elapsed_seconds: float
    wpm: int
    band: str
    label: str
    description: str


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING...)."
    ),
) -> None:
    """Configure logging before any sub-command runs."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@app.command()
def tokenize(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
) -> None:
    """Print the word/whitespace tokens of a script as JSON."""
    tokenized = TokenizedScript.from_text(_read_script_text(input_path))
    tokens: List[TokenPayload] = [
        {
            "index": token.index,
            "kind": token.kind.value,
            "text": token.text,
            "rank": tokenized.word_rank(token.index),
        }
        for token in tokenized.tokens
    ]
    typer.echo(
        json.dumps({"total_words": tokenized.total_words, "tokens": tokens}, indent=2)
    )


@app.command()
def pace(
    seconds: float = typer.Option(..., min=0.0, help="Elapsed speaking time."),
    words: int | None = typer.Option(None, min=0, help="Total word count."),
    input_path: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        dir_okay=False,
        help="Script file to count words from.",
    ),
) -> None:
    """Report words per minute and the pace band for a timed run."""
    if words is None and input_path is None:
        raise typer.BadParameter("Provide --words or --input-path.")
    if words is None and input_path is not None:
        words = TokenizedScript.from_text(_read_script_text(input_path)).total_words
    total_words = words or 0
    wpm = words_per_minute(total_words, seconds)
    result = PaceResult(
        total_words=total_words, elapsed_seconds=seconds, wpm=wpm, band=classify(wpm)
    )
    typer.echo(json.dumps(_pace_dict(result), indent=2))


@app.command()
def drill(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    title: str | None = typer.Option(None, "--title", help="Title shown above the script."),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Memorize a script interactively by blacking out one word at a time."""
    cfg = load_config(config)
    scheduler = ManualScheduler()
    script = Script(
        id=input_path.stem,
        title=title or input_path.stem,
        content=_read_script_text(input_path),
    )
    session = begin_session(script, config=cfg, scheduler=scheduler)
    typer.echo(DRILL_HELP)
    try:
        while True:
            scheduler.run_pending()
            typer.echo(_render_session(session))
            raw = typer.prompt(">", default="", show_default=False).strip().lower()
            scheduler.run_pending()
            if not raw:
                continue
            command, _, argument = raw.partition(" ")
            if command in {"q", "quit", "exit"}:
                break
            if command in {"n", "next"}:
                session.advance()
            elif command in {"b", "back"}:
                session.retreat()
            elif command in {"r", "reset"}:
                if typer.confirm("Restart from the beginning?", default=False):
                    session.reset()
            elif command in {"p", "peek"}:
                _peek_command(session, argument)
            elif command in {"t", "timer"}:
                result = session.toggle_timer()
                if result is not None:
                    typer.echo(_format_pace_report(result))
                else:
                    typer.echo("Timer started.")
            else:
                typer.echo(DRILL_HELP)
    finally:
        session.end_session()


@app.command()
def refine(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    topic: str = typer.Option(..., "--topic", help="Interview question or topic."),
    output_path: Path | None = typer.Option(None, dir_okay=False),
    config: Path | None = typer.Option(None, "--config", "-c"),
    openai_model: str | None = typer.Option(
        None, "--openai-model", help="OpenAI model identifier (e.g., gpt-4.1-mini)."
    ),
    openai_api_key: str | None = typer.Option(
        None, "--openai-api-key", help="Explicit OpenAI API key (prefer env vars)."
    ),
) -> None:
    """Polish a draft script with the configured text-generation helper."""
    cfg = load_config(config)
    _apply_openai_overrides(cfg, openai_model, openai_api_key)
    writer = _build_writer(cfg)
    refined = writer.refine(topic, _read_script_text(input_path))
    if output_path is None:
        typer.echo(refined)
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(refined, encoding="utf-8")
    typer.echo(f"Wrote refined script to {output_path}")


@app.command()
def generate(
    question: str = typer.Option(..., "--question", help="Interview question to answer."),
    config: Path | None = typer.Option(None, "--config", "-c"),
    openai_model: str | None = typer.Option(
        None, "--openai-model", help="OpenAI model identifier (e.g., gpt-4.1-mini)."
    ),
    openai_api_key: str | None = typer.Option(
        None, "--openai-api-key", help="Explicit OpenAI API key (prefer env vars)."
    ),
) -> None:
    """Draft a new script answering an interview question."""
    cfg = load_config(config)
    _apply_openai_overrides(cfg, openai_model, openai_api_key)
    writer = _build_writer(cfg)
    typer.echo(writer.generate(question))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = BreatheConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


def _read_script_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise typer.BadParameter(f"{path} is not UTF-8 text.") from exc


def _peek_command(session: MemorizationSession, argument: str) -> None:
    try:
        # Words are numbered from 1 on screen.
        rank = int(argument) - 1
    except ValueError:
        typer.echo("Usage: p N (word number)")
        return
    if not session.peek(rank):
        typer.echo(f"Word {argument} is not hidden.")


def _render_session(session: MemorizationSession) -> str:
    """Render the script with hidden words replaced by same-width blocks."""
    parts: List[str] = []
    for token in session.tokens:
        rank = session.word_rank(token.index)
        if rank is None:
            parts.append(token.text)
            continue
        state = session.word_state(rank)
        if state is WordState.HIDDEN:
            parts.append(BLACKOUT_CHAR * len(token.text))
        elif state is WordState.PEEKING:
            parts.append(f"[{token.text}]")
        else:
            parts.append(token.text)
    status = f"{session.blacked_out_count} / {session.total_words} ({session.progress_percent}%)"
    if session.is_mastered:
        status += " - Script Mastered"
    if session.is_timing:
        status += f"  timer {session.formatted_elapsed}"
    return f"\n== {session.title} ==\n{''.join(parts)}\n{status}"


def _pace_dict(result: PaceResult) -> PacePayload:
    band_feedback = feedback(result.band)
    return {
        "total_words": result.total_words,
        "elapsed": format_elapsed(result.elapsed_seconds),
        "elapsed_seconds": result.elapsed_seconds,
        "wpm": result.wpm,
        "band": result.band.value,
        "label": band_feedback.label,
        "description": band_feedback.description,
    }


def _format_pace_report(result: PaceResult) -> str:
    band_feedback = feedback(result.band)
    return (
        f"{band_feedback.label}: {result.wpm} WPM "
        f"({result.total_words} words in {format_elapsed(result.elapsed_seconds)})\n"
        f"{band_feedback.description}"
    )


def _apply_openai_overrides(
    config: BreatheConfig, openai_model: str | None, openai_api_key: str | None
) -> None:
    """Override OpenAI settings from CLI flags; passing any flag enables the helper."""
    settings = config.openai
    if openai_model:
        settings.model = openai_model
        settings.enabled = True
    if openai_api_key:
        settings.api_key = openai_api_key
        settings.enabled = True


def _build_writer(config: BreatheConfig) -> ScriptWriter:
    """Instantiate the configured script writer."""
    if not config.openai.enabled:
        typer.echo(
            "Text generation is disabled (set openai.enabled or pass --openai-model); "
            "no request was sent.",
            err=True,
        )
        return NoOpScriptWriter()
    api_key = _resolve_openai_api_key(config.openai)
    client = OpenAIScriptClient(config.openai, api_key=api_key)
    return OpenAIScriptWriter(client)


def _resolve_openai_api_key(settings: OpenAISettings) -> str:
    """Resolve the API key from explicit config or the configured environment variable."""
    if settings.api_key:
        return settings.api_key
    env_name = settings.api_key_env or "OPENAI_API_KEY"
    value = os.environ.get(env_name, "").strip()
    if value:
        return value
    raise typer.BadParameter(
        f"OpenAI API key not provided. Use --openai-api-key or set {env_name}."
    )


if __name__ == "__main__":
    main()
