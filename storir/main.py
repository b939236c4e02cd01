from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import base64

from storir.core.io import AudioIO
from storir.core.types import ConfigurationError
from storir.export.exporter import Exporter
from storir.generator import ImpulseResponseEngine
from storir.params import PARAM_SCHEMA, clamp_params, resolve_params, spec_from_params
from storir.qc.qc import analyze

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("storir")

app = FastAPI(
    title="StoRIR Engine",
    version="1.0.0",
    description="Stochastic Room Impulse Response Generator"
)

# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # Allow any local port
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "storir-engine"}


@app.get("/schema")
def schema():
    return PARAM_SCHEMA


@app.post("/generate/rir")
def generate_rir(params: dict):
    """
    Generates one impulse response.
    Returns JSON with base64-encoded 16-bit WAV, resolved_params and a QC report.
    """
    # Extract render controls (don't mutate original params)
    params_copy = params.copy()
    seed = params_copy.pop("seed", 0)
    mode = params_copy.pop("mode", "default")

    try:
        resolved = resolve_params(params_copy)
        if mode == "realistic":
            resolved = clamp_params(resolved)
        spec = spec_from_params(resolved)
        seed = int(seed)
    except (ConfigurationError, TypeError, ValueError) as e:
        logger.warning("Rejected generation request: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    sample_rate = resolved["sample_rate"]
    engine = ImpulseResponseEngine(sample_rate=sample_rate)
    audio = engine.render(spec, seed=seed)
    wav_bytes = AudioIO.to_bytes(audio, sample_rate)

    return {
        "audio": base64.b64encode(wav_bytes).decode("utf-8"),
        "resolved_params": resolved,
        "seed": seed,
        "length_samples": int(audio.shape[-1]),
        "qc": analyze(audio, sample_rate, spec),
    }


@app.post("/export/batch")
def export_batch(batch_data: dict):
    """
    Generates a ZIP file with `count` impulse responses and a JSON manifest.
    """
    try:
        zip_bytes = Exporter.create_batch_zip(batch_data)
    except (ConfigurationError, TypeError, ValueError) as e:
        logger.warning("Rejected batch request: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    return Response(
        content=zip_bytes,
        media_type="application/zip",
        headers={"Content-Disposition": "attachment; filename=storir_batch.zip"}
    )


if __name__ == "__main__":
    uvicorn.run("storir.main:app", host="0.0.0.0", port=8000, reload=True)
