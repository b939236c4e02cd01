"""
Quality Control analysis for generated impulse responses.
Measures the achieved DRR and decay against the requested GenerationSpec.
"""
import math
from typing import Dict, Optional

import numpy as np
import torch

from storir.core.types import GenerationSpec
from storir.dsp.reflections import drr_energy_ratio
from storir.qc.thresholds import QC_THRESHOLDS


def _dbfs(x: float) -> float:
    """Convert linear amplitude to dBFS (full scale)."""
    if x <= 0:
        return -np.inf
    return 20.0 * np.log10(abs(x))


def _schroeder_db(energy: torch.Tensor) -> torch.Tensor:
    """
    Schroeder backward integral in dB, 0 dB at the first sample.
    The generator's samples are already energy values, so they are integrated as is.
    """
    energy = energy.double()
    remaining = torch.flip(torch.cumsum(torch.flip(energy, dims=[0]), dim=0), dims=[0])
    total = remaining[0]
    return 10.0 * torch.log10(remaining / total + 1e-30)


def _edt_estimate_ms(energy: torch.Tensor, sample_rate: int, decay_db: float) -> Optional[float]:
    """Time to fall by decay_db on the Schroeder curve, extrapolated to 60 dB."""
    if float(energy.sum()) <= 0.0:
        return None
    edc = _schroeder_db(energy)
    below = torch.nonzero(edc <= -decay_db).flatten()
    if below.numel() == 0:
        return None
    t_ms = float(below[0]) / sample_rate * 1000.0
    return t_ms * (60.0 / decay_db)


def analyze(audio: torch.Tensor, sample_rate: int, spec: Optional[GenerationSpec] = None) -> Dict:
    """
    Analyze a generated impulse response.

    Args:
        audio: Response tensor (1D), starting at the direct sound
        sample_rate: Sample rate in Hz
        spec: The spec it was generated from; enables the DRR band check

    Returns:
        Dict with metrics, failures, warnings and status (PASS / WARN / FAIL)
    """
    audio = audio.reshape(-1).float()
    thresholds = QC_THRESHOLDS
    n = audio.shape[-1]

    failures = []
    warnings = []

    if n == 0:
        return {
            "status": "FAIL",
            "metrics": {"length_samples": 0},
            "failures": ["Empty impulse response"],
            "warnings": [],
        }

    peak = float(torch.max(torch.abs(audio)))
    rms = float(torch.sqrt(torch.mean(audio ** 2) + 1e-12))
    nonzero_ratio = float(torch.count_nonzero(audio)) / n
    drr_db = drr_energy_ratio(audio, 0)

    metrics = {
        "length_samples": n,
        "length_ms": n / sample_rate * 1000.0,
        "peak_linear": peak,
        "peak_dbfs": _dbfs(peak),
        "rms_linear": rms,
        "rms_dbfs": _dbfs(rms),
        "nonzero_ratio": nonzero_ratio,
        "drr_db": drr_db,
        "edt_ms_estimate": _edt_estimate_ms(audio, sample_rate, thresholds["edt_decay_db"]),
    }

    if peak <= 0.0:
        failures.append("Impulse response is silent")
    elif peak > thresholds["peak_linear_max"] + 1e-6:
        warnings.append(f"Peak above full scale (PCM clipping): {peak:.4f} > {thresholds['peak_linear_max']:.4f}")

    if 0.0 < nonzero_ratio < thresholds["nonzero_ratio_min"]:
        warnings.append(f"Very sparse response: {nonzero_ratio:.5f} nonzero ratio")

    if spec is not None and drr_db is not None and math.isfinite(drr_db):
        tol = thresholds["drr_tolerance_db"]
        low, high = spec.drr_db - tol, spec.drr_db + tol
        metrics["drr_target_db"] = spec.drr_db
        if drr_db < low:
            warnings.append(f"DRR below target band: {drr_db:.2f} dB < {low:.2f} dB (no reflections left to remove)")
        elif drr_db > high:
            warnings.append(f"DRR above target band: {drr_db:.2f} dB > {high:.2f} dB (envelope too dry for target)")

    status = "PASS"
    if failures:
        status = "FAIL"
    elif warnings:
        status = "WARN"

    return {
        "status": status,
        "metrics": metrics,
        "failures": failures,
        "warnings": warnings,
    }
