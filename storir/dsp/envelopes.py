import logging
import math
from typing import Union

import torch

from storir.core.types import GenerationSpec, WindowIndices

logger = logging.getLogger(__name__)

# Decay convention: the envelope falls 10 dB over the EDT window (the usual basis for
# extrapolating RT60), and the RT60 segment adds 50 dB more so the total reaches -60 dB.
EDT_DECAY_DB = 10.0
RT60_DECAY_DB = 50.0


# -----------------------------------------------------------------------------
# Helpers (shared by noise, envelope and reflection stages)
# -----------------------------------------------------------------------------

def db_to_lin(db: Union[float, torch.Tensor]) -> Union[float, torch.Tensor]:
    """Convert decibels to linear gain. 0 dB -> 1.0. Accepts scalar or tensor."""
    if isinstance(db, torch.Tensor):
        return torch.pow(10.0, db / 20.0)
    return 10.0 ** (db / 20.0)


def ms_to_s(ms: float) -> float:
    """Convert milliseconds to seconds."""
    return ms / 1000.0


def round_half_up(x: float) -> int:
    """Round to nearest integer, halves away from zero (x >= 0)."""
    return int(math.floor(x + 0.5))


def ms_to_samples(ms: float, sample_rate: int) -> int:
    """
    Number of samples covering `ms` milliseconds: round(ms / 1000 * sample_rate).
    Negative durations map to 0 samples.
    """
    return max(0, round_half_up(ms_to_s(float(ms)) * sample_rate))


# -----------------------------------------------------------------------------
# EDT / RT60 envelope shaping
# -----------------------------------------------------------------------------

def apply_edt_slope(data: torch.Tensor, edt_samples: int) -> None:
    """
    Linear dB ramp over the EDT window, held flat afterwards.
    Sample i loses min(i, edt_samples - 1), then the buffer is scaled by 10 / edt_samples,
    so the ramp bottoms out at -10 dB.
    """
    edt_samples = max(1, edt_samples)
    ramp = torch.arange(data.shape[-1], dtype=data.dtype).clamp_(max=float(edt_samples - 1))
    data.sub_(ramp)
    data.mul_(EDT_DECAY_DB / edt_samples)


def apply_rt60_slope(data: torch.Tensor, edt_samples: int, rt60_samples: int) -> None:
    """Continue the decay from the EDT endpoint towards -60 dB total at rt60_samples."""
    end = min(rt60_samples, data.shape[-1])
    if end <= edt_samples or rt60_samples <= 0:
        return
    i = torch.arange(edt_samples, end, dtype=data.dtype)
    data[edt_samples:end] -= (i - float(edt_samples + 1)) * RT60_DECAY_DB / rt60_samples


def db_to_energy(data: torch.Tensor) -> None:
    """Normalize so the peak reads 0 dB, then convert dB -> gain -> energy (gain squared)."""
    data.sub_(torch.max(data))
    data.copy_(db_to_lin(data))
    data.pow_(2)


def find_direct_sound(data: torch.Tensor) -> int:
    """Index of the global maximum; the earliest one wins on ties."""
    # torch.argmax returns the first maximal index.
    return int(torch.argmax(data))


class EnvelopeShaper:
    """
    Imposes the two-segment (EDT then RT60) decay on a noise buffer in the dB domain,
    converts it to energy and locates the direct sound and early reflection window.
    The buffer is mutated in place.
    """

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate

    def shape(self, data: torch.Tensor, spec: GenerationSpec) -> WindowIndices:
        sr = self.sample_rate
        n = data.shape[-1]
        if n == 0:
            raise ValueError("cannot shape an empty buffer")

        # Clamped to 1 sample so the EDT scale factor is always defined
        edt_samples = max(1, ms_to_samples(spec.edt_ms, sr))
        rt60_samples = ms_to_samples(spec.rt60_ms, sr)
        er_samples = ms_to_samples(spec.er_duration_ms, sr)

        apply_edt_slope(data, edt_samples)
        apply_rt60_slope(data, edt_samples, rt60_samples)
        db_to_energy(data)

        direct_sound_idx = find_direct_sound(data)

        # Windows reaching past the end of the buffer collapse onto the last index
        er_start_idx = min(direct_sound_idx + 1, n - 1)
        er_end_idx = min(er_start_idx + er_samples, n - 1)

        logger.debug(
            "envelope: n=%d edt=%d rt60=%d er=%d direct=%d er_window=[%d, %d]",
            n, edt_samples, rt60_samples, er_samples, direct_sound_idx, er_start_idx, er_end_idx,
        )
        return WindowIndices(direct_sound_idx, er_start_idx, er_end_idx)


def shape(
    data: torch.Tensor,
    spec: GenerationSpec,
    sample_rate: int,
) -> WindowIndices:
    """Functional wrapper around EnvelopeShaper.shape."""
    return EnvelopeShaper(sample_rate).shape(data, spec)
