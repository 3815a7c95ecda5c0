"""CLI interface for the LUFS meter."""

import json
import logging
from pathlib import Path
from typing import NoReturn
from uuid import uuid4

import typer

from .audio_contract import AudioIngestError
from .guidance import resolve_preset, validate_target_lufs
from .interfaces.cli_handlers import analyze_path, format_presets, format_report, stream_pcm
from .utils.config import MeterSettings, load_settings, settings_from_env

app = typer.Typer(help="LUFS meter command line interface")


def _resolve_settings(config: Path | None, log_level: str | None) -> MeterSettings:
    settings = load_settings(config) if config is not None else settings_from_env()
    if log_level is not None:
        settings = MeterSettings.model_validate({**settings.model_dump(), "log_level": log_level})
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return settings


def _resolve_target(settings: MeterSettings, target_lufs: float | None, preset: str | None) -> float:
    if target_lufs is not None and preset is not None:
        raise ValueError("Use only one of --target-lufs or --preset.")
    if preset is not None:
        return resolve_preset(preset).value
    if target_lufs is not None:
        return validate_target_lufs(target_lufs)
    return settings.target_lufs


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=2)


@app.command("analyze")
def analyze_command(
    path: Path = typer.Argument(..., help="Path to the audio file to measure"),
    target_lufs: float | None = typer.Option(
        None, "--target-lufs", "-t", help="Target loudness in LUFS (-50 to 0)."
    ),
    preset: str | None = typer.Option(
        None, "--preset", "-p", help="Target preset name, e.g. spotify or broadcast."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    report_json: Path | None = typer.Option(
        None, "--report-json", help="Optional path to write the report JSON."
    ),
    reference: bool | None = typer.Option(
        None,
        "--reference/--no-reference",
        help="Include the pyloudnorm BS.1770 reading next to the in-house one.",
    ),
    config: Path | None = typer.Option(None, "--config", help="JSON or YAML settings file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level override."),
) -> None:
    """Measure the loudness of an audio file and compare it with a target."""

    try:
        settings = _resolve_settings(config, log_level)
        target = _resolve_target(settings, target_lufs, preset)
        if reference is not None:
            settings = settings.model_copy(update={"include_reference": reference})
        report = analyze_path(
            path,
            settings=settings,
            correlation_id=str(uuid4()),
            target_lufs=target,
            report_json=report_json,
        )
    except AudioIngestError as error:
        _fail(f"{error.message} ({error.code})")
    except (ValueError, OSError) as error:
        _fail(str(error))

    if as_json:
        typer.echo(json.dumps(report.as_dict(), indent=2))
        return
    for line in format_report(report):
        typer.echo(line)


@app.command("stream")
def stream_command(
    sample_rate: int = typer.Option(..., "--sample-rate", "-r", min=1, help="Sample rate of the PCM on stdin."),
    target_lufs: float | None = typer.Option(None, "--target-lufs", "-t", help="Target loudness in LUFS."),
    preset: str | None = typer.Option(None, "--preset", "-p", help="Target preset name."),
    frames_per_read: int = typer.Option(2048, "--frames-per-read", min=1, help="Samples read from stdin per call."),
    every: int = typer.Option(1, "--every", min=1, help="Print a reading every N blocks (100 ms each)."),
    config: Path | None = typer.Option(None, "--config", help="JSON or YAML settings file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level override."),
) -> None:
    """Meter raw little-endian float32 mono PCM read from stdin."""

    try:
        settings = _resolve_settings(config, log_level)
        target = _resolve_target(settings, target_lufs, preset)
        for line in stream_pcm(
            typer.get_binary_stream("stdin"),
            sample_rate=sample_rate,
            target_lufs=target,
            frames_per_read=frames_per_read,
            every=every,
            max_integrated_blocks=settings.max_integrated_blocks,
        ):
            typer.echo(line)
    except (ValueError, OSError) as error:
        _fail(str(error))


@app.command("presets")
def presets_command() -> None:
    """List the target loudness presets."""

    for line in format_presets():
        typer.echo(line)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
