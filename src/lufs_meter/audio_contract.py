"""Audio ingest contract shared by all external entry points.

Invariants
----------
* Ingest accepts audio uploads only (an ``audio/*`` MIME type or a known extension).
* Uploads larger than the configured limit are rejected before decoding.
* The loudness engine receives one channel of float64 PCM; channel 0 is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Supported source extensions (lower-case, with leading dot).
ACCEPTED_SOURCE_EXTENSIONS: tuple[str, ...] = (".wav", ".flac", ".aiff", ".aif", ".ogg", ".mp3")

ACCEPTED_MIME_PREFIX = "audio/"

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024

ANALYZED_CHANNEL_INDEX = 0


@dataclass(frozen=True, slots=True)
class AudioIngestError(ValueError):
    """Ingest failure with a stable machine-readable code."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


def ensure_supported_path(path: Path) -> None:
    """Validate a local file path against accepted ingest extensions."""

    if not path.exists() or not path.is_file():
        raise AudioIngestError("file_not_found", f"Audio file not found: {path}")
    if path.suffix.lower() not in ACCEPTED_SOURCE_EXTENSIONS:
        supported = ", ".join(ACCEPTED_SOURCE_EXTENSIONS)
        raise AudioIngestError(
            "unsupported_format",
            f"Unsupported audio format for '{path.name}'. Supported extensions: {supported}",
        )


def ensure_supported_upload(filename: str | None, content_type: str | None) -> None:
    """Validate upload metadata; either an audio MIME type or a known extension is enough."""

    if content_type and content_type.lower().startswith(ACCEPTED_MIME_PREFIX):
        return

    if filename and Path(filename).suffix.lower() in ACCEPTED_SOURCE_EXTENSIONS:
        return

    supported_ext = ", ".join(ACCEPTED_SOURCE_EXTENSIONS)
    raise AudioIngestError(
        "unsupported_format",
        f"Only audio files are allowed. Supported extensions: {supported_ext}.",
    )


def ensure_upload_size(size_bytes: int, max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    if size_bytes == 0:
        raise AudioIngestError("empty_file", "No audio data uploaded.")
    if size_bytes > max_upload_bytes:
        raise AudioIngestError(
            "file_too_large",
            f"Audio file exceeds max size limit of {max_upload_bytes} bytes.",
        )
