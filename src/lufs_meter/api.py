"""FastAPI interface for the LUFS meter."""

from uuid import uuid4

from fastapi import FastAPI, File, Header, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from .guidance import MAX_TARGET_LUFS, MIN_TARGET_LUFS, TARGET_PRESETS, InvalidTargetLoudnessError
from .interfaces import api_handlers
from .interfaces.api_handlers import AudioIngestError, ingest_error_status
from .meter import InvalidSampleRateError, NonFiniteSampleError, SampleLayoutError

app = FastAPI(title="LUFS Meter API", version="0.1.0")


@app.get("/api/health")
def health() -> dict[str, str]:
    """Health check endpoint."""

    return {"status": "ok", "message": "LUFS server is running"}


@app.get("/api/presets")
def presets() -> list[dict[str, object]]:
    """Target loudness presets for common delivery platforms."""

    return [
        {
            "name": preset.name,
            "label": preset.label,
            "value": preset.value,
            "description": preset.description,
        }
        for preset in TARGET_PRESETS
    ]


@app.post("/api/analyze")
async def analyze(
    audio: UploadFile = File(..., description="Audio file to measure"),
    target_lufs: float | None = Query(
        None,
        description=f"Target loudness in LUFS ({MIN_TARGET_LUFS:.0f} to {MAX_TARGET_LUFS:.0f}).",
    ),
    x_correlation_id: str | None = Header(default=None, alias="X-Correlation-Id"),
) -> JSONResponse:
    """Measure the loudness of an uploaded file and return the report as JSON."""

    correlation_id = x_correlation_id or str(uuid4())
    payload = await audio.read()

    try:
        report = api_handlers.analyze_uploaded_bytes(
            payload,
            filename=audio.filename,
            content_type=audio.content_type,
            target_lufs=target_lufs,
            correlation_id=correlation_id,
        )
    except InvalidTargetLoudnessError as error:
        raise HTTPException(
            status_code=400,
            detail={
                "code": "invalid_query_parameter",
                "message": str(error),
                "parameter": "target_lufs",
            },
        ) from error
    except AudioIngestError as error:
        raise HTTPException(status_code=ingest_error_status(error), detail=error.as_dict()) from error
    except (InvalidSampleRateError, NonFiniteSampleError, SampleLayoutError) as error:
        raise HTTPException(
            status_code=400, detail={"code": "invalid_audio", "message": str(error)}
        ) from error

    body = report.as_dict()
    body["filename"] = audio.filename
    body["size"] = len(payload)
    body["content_type"] = audio.content_type
    return JSONResponse(content=body, headers={"X-Correlation-Id": correlation_id})
