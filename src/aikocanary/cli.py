"""Command line interface for transcribing files with canary-mlx."""

import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from aikocanary import __app_name__, __version__
from aikocanary.core.asr import (
    CanaryEnvironment,
    TranscriptionError,
    TranscriptionService,
)
from aikocanary.core.formatting import FormattingStyle, format_text
from aikocanary.core.settings import Settings, get_settings
from aikocanary.utils.logger import get_logger

logger = get_logger(__name__)

STYLE_CHOICES = [style.value for style in FormattingStyle]


@click.group(name="aikocanary")
@click.version_option(__version__, prog_name=__app_name__)
def main() -> None:
    """Transcribe audio with the canary-mlx speech recognition tool."""


@main.command(name="transcribe")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--style",
    type=click.Choice(STYLE_CHOICES),
    default=None,
    help="Output formatting (default: from settings)",
)
@click.option("--raw", is_flag=True, help="Print the transcript without formatting")
@click.option("--source-lang", default=None, help="Spoken language code")
@click.option("--target-lang", default=None, help="Output language code")
@click.option("--task", default=None, help="Tool task, e.g. transcribe or translate")
@click.option("--pnc/--no-pnc", default=None, help="Restore punctuation and casing")
@click.option("--chunk-duration", type=click.FloatRange(min=0, min_open=True))
@click.option("--overlap-duration", type=click.FloatRange(min=0))
@click.option("--max-generation-delta", type=click.IntRange(min=1))
@click.option("--max-new-tokens", type=click.IntRange(min=1))
@click.option(
    "--model", "model_path", type=click.Path(path_type=Path), help="Model directory"
)
@click.option(
    "--python", "python_path", type=click.Path(path_type=Path), help="Interpreter"
)
@click.option(
    "--root", "canary_root", type=click.Path(path_type=Path), help="Tool directory"
)
def transcribe_command(
    path: Path,
    style: Optional[str],
    raw: bool,
    **overrides,
) -> None:
    """Transcribe PATH and print the transcript."""
    settings = get_settings()
    base = settings.to_transcription_config()
    updates = {key: value for key, value in overrides.items() if value is not None}
    config = base.model_copy(update=updates)

    service = TranscriptionService()
    try:
        text = service.transcribe(path, config)
    except TranscriptionError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        service.cancel()
        click.echo("Cancelled.", err=True)
        sys.exit(130)

    if raw:
        click.echo(text)
        return

    click.echo(
        format_text(
            text,
            style=FormattingStyle(style) if style else settings.formatting_style,
            paragraph_sentence_count=settings.paragraph_sentence_count,
            wrap_width=settings.wrap_width,
        )
    )


@main.command(name="env")
def env_command() -> None:
    """Show where the interpreter, model and tool root resolve to."""
    config = get_settings().to_transcription_config()
    environment = CanaryEnvironment()

    python_path = environment.resolve_interpreter_path(config.python_path)
    model_path = environment.resolve_model_path(config.model_path)
    root = environment.resolve_tool_root(config.canary_root)

    def status(p: Path) -> str:
        return "ok" if p.exists() else "missing"

    click.echo(f"python: {python_path} ({status(python_path)})")
    click.echo(f"model:  {model_path} ({status(model_path)})")
    if root is None:
        click.echo("root:   (current directory)")
    else:
        click.echo(f"root:   {root} ({status(root)})")


@main.group(name="settings")
def settings_group() -> None:
    """View or change saved settings."""


@settings_group.command(name="show")
def settings_show() -> None:
    for key, value in get_settings().model_dump(mode="json").items():
        click.echo(f"{key} = {value!r}")


@settings_group.command(name="set")
@click.argument("key")
@click.argument("value")
def settings_set(key: str, value: str) -> None:
    """Set KEY to VALUE. Use "none" to clear an optional value."""
    settings = get_settings()
    if key not in Settings.model_fields:
        raise click.BadParameter(f"Unknown setting: {key}", param_hint="KEY")

    new_value = None if value.lower() in ("none", "null") else value
    try:
        updated = Settings.model_validate(
            {**settings.model_dump(), key: new_value}
        )
    except ValidationError as e:
        message = e.errors()[0]["msg"]
        raise click.BadParameter(message, param_hint="VALUE") from e

    setattr(settings, key, getattr(updated, key))
    settings.save()
    logger.info(f"Setting {key} updated")
    click.echo(f"{key} = {updated.model_dump(mode='json')[key]!r}")


@settings_group.command(name="reset")
def settings_reset() -> None:
    settings = get_settings()
    settings.reset_to_defaults()
    settings.save()
    click.echo("Settings reset to defaults.")


if __name__ == "__main__":
    main()
