"""
Core rendering utilities with debug outputs, fingerprinting, and param tracing.
Used by the canonical render.py tool.
"""
import sys
import os
import json
import hashlib
import logging
import random
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch

from storir.core.io import AudioIO
from storir.core.types import GenerationSpec
from storir.export.exporter import batch_filename
from storir.generator import ImpulseResponseEngine
from storir.params.resolve import resolve_params, spec_from_params
from storir.params.clamp import clamp_params
from storir.qc.qc import analyze

logger = logging.getLogger(__name__)


def _get_git_hash() -> str:
    """Get short git commit hash."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            cwd=os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass
    return "unknown"


def _compute_audio_fingerprint(audio: torch.Tensor) -> Dict:
    """Compute fingerprint: SHA256, peak, RMS, nonzero count."""
    audio_1d = audio.view(-1).float()
    sha256 = hashlib.sha256(audio_1d.numpy().tobytes()).hexdigest()

    if audio_1d.numel() == 0:
        return {"sha256": sha256, "peak": 0.0, "rms": 0.0, "nonzero": 0}

    return {
        "sha256": sha256,
        "peak": float(torch.max(torch.abs(audio_1d))),
        "rms": float(torch.sqrt(torch.mean(audio_1d ** 2) + 1e-12)),
        "nonzero": int(torch.count_nonzero(audio_1d)),
    }


def prepare_params(params: dict, mode: str = "default") -> Tuple[dict, GenerationSpec]:
    """
    Resolve (and in realistic mode clamp) params, then build the spec.
    Raises ConfigurationError before anything is rendered.
    """
    resolved = resolve_params(params)
    if mode == "realistic":
        resolved = clamp_params(resolved)
    return resolved, spec_from_params(resolved)


def render_impulse(
    params: dict,
    output_dir: Path,
    index: int = 1,
    filename: Optional[str] = None,
    seed: Optional[int] = None,
    debug: bool = False,
    qc: bool = False,
    mode: str = "default",
    script_name: str = "unknown",
) -> Tuple[torch.Tensor, Dict]:
    """
    Render a single impulse response with full param tracing and fingerprinting.

    Args:
        params: Input params dict (may be partial; defaults fill the rest)
        output_dir: Directory to save WAV and debug JSON (created if absent)
        index: 1-based position in a batch, used in the default filename
        filename: Base filename without extension (default: derived from params and index)
        seed: Random seed (None = random)
        debug: Enable debug outputs (saves resolved.json)
        qc: Run QC analysis
        mode: "default" or "realistic" (applies clamps)
        script_name: Name of calling script (for debug JSON)

    Returns:
        Tuple of (audio_tensor, debug_info_dict)

    Raises:
        ConfigurationError for invalid params; OSError/RuntimeError when the WAV cannot be written.
    """
    if seed is None:
        seed = random.randint(0, 2**31 - 1)

    input_params = params.copy() if params else {}

    # Step 1: Resolve params and build the spec
    resolved_params, spec = prepare_params(input_params, mode)
    sample_rate = resolved_params["sample_rate"]

    # Step 2: Render audio
    engine = ImpulseResponseEngine(sample_rate=sample_rate)
    audio_1d = engine.render(spec, seed=seed).view(-1).float()

    # Step 3: Fingerprint + optional QC
    fingerprint = _compute_audio_fingerprint(audio_1d)
    qc_result = analyze(audio_1d, sample_rate, spec) if qc else None

    # Step 4: Save WAV
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    if filename:
        wav_path = output_dir / f"{filename}.wav"
    else:
        wav_path = output_dir / batch_filename(resolved_params, index)
    AudioIO.save_wav(audio_1d, sample_rate, wav_path)

    # Step 5: Save debug JSON if enabled
    debug_info = {
        "script_name": script_name,
        "timestamp": datetime.now().isoformat(),
        "git_hash": _get_git_hash(),
        "seed": seed,
        "mode": mode,
        "input_params": input_params,
        "resolved_params": resolved_params,
        "fingerprint": fingerprint,
        "qc_result": qc_result,
        "wav_path": str(wav_path),
    }

    if debug:
        json_path = wav_path.with_suffix(".resolved.json")
        with open(json_path, "w") as f:
            json.dump(debug_info, f, indent=2, default=str)

    return audio_1d, debug_info


def get_unique_output_dir(base_name: str) -> Path:
    """
    Generate unique output directory: renders/{base_name}/YYYYMMDD_HHMMSS_{gitshort}/
    """
    now = datetime.now()
    date_str = now.strftime("%Y%m%d")
    time_str = now.strftime("%H%M%S")
    git_hash = _get_git_hash()
    short_hash = git_hash[:8] if git_hash != "unknown" else "unknown"

    return Path("renders") / base_name / f"{date_str}_{time_str}_{short_hash}"
