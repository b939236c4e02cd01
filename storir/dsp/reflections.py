"""
Reflection thinning: initial time delay gap plus iterative removal of discrete reflections
until the direct to reverberant ratio reaches a target band.
Thinning zeroes whole samples ("rays"); it changes sparsity, never gain.
"""
import logging
import math
from typing import Optional

import torch

from storir.core.types import GenerationSpec, WindowIndices
from storir.dsp.envelopes import ms_to_samples, round_half_up

logger = logging.getLogger(__name__)

DRR_TOLERANCE_DB = 0.5
EARLY_REFLECTION_THIN_RATE = 1.0 / 8.0
TAIL_THIN_RATE = 1.0 / 10.0
# Smallest DRR change that still counts as progress (float32 machine epsilon).
DRR_EPSILON = float(torch.finfo(torch.float32).eps)


def create_initial_time_delay_gap(data: torch.Tensor, direct_sound_idx: int, itdg_samples: int) -> None:
    """Zero every sample in (direct_sound_idx, direct_sound_idx + 1 + itdg_samples], clamped to the buffer."""
    n = data.shape[-1]
    gap_end = min(direct_sound_idx + 1 + max(0, itdg_samples), n - 1)
    if gap_end > direct_sound_idx:
        data[direct_sound_idx + 1:gap_end + 1] = 0.0


def drr_energy_ratio(data: torch.Tensor, direct_sound_idx: int) -> Optional[float]:
    """
    Direct to reverberant energy ratio in dB: everything up to and including the direct
    sound against everything after it. Returns None when either side carries no energy.
    """
    direct = float(data[:direct_sound_idx + 1].sum(dtype=torch.float64))
    reverberant = float(data[direct_sound_idx + 1:].sum(dtype=torch.float64))
    if reverberant <= 0.0 or direct <= 0.0:
        return None
    return 10.0 * math.log10(direct / reverberant)


def thin_out_reflections(
    data: torch.Tensor,
    start_idx: int,
    end_idx: int,
    rate: float,
    generator: Optional[torch.Generator] = None,
) -> int:
    """
    Zero round(rate * k) randomly chosen samples among the k nonzero samples in
    [start_idx, end_idx] (inclusive). Returns how many samples were removed.
    """
    n = data.shape[-1]
    start_idx = max(0, start_idx)
    end_idx = min(end_idx, n - 1)
    if end_idx < start_idx:
        return 0

    ray_indices = torch.nonzero(data[start_idx:end_idx + 1]).flatten() + start_idx
    num_rays = min(round_half_up(ray_indices.numel() * rate), ray_indices.numel())
    if num_rays < 1:
        return 0

    subset = torch.randperm(ray_indices.numel(), generator=generator)[:num_rays]
    data[ray_indices[subset]] = 0.0
    return num_rays


class ReflectionThinner:
    def __init__(self, sample_rate: int, generator: Optional[torch.Generator] = None):
        self.sample_rate = sample_rate
        self.generator = generator

    def thin(self, data: torch.Tensor, indices: WindowIndices, spec: GenerationSpec) -> int:
        """
        Apply the initial time delay gap, then thin reflections until the DRR is inside
        [drr_db - 0.5, drr_db + 0.5]. Mutates data in place. Returns the number of thinning passes.
        """
        direct_idx = indices.direct_sound_idx
        er_start = indices.early_reflection_start_idx
        er_end = indices.early_reflection_end_idx
        n = data.shape[-1]

        itdg_samples = ms_to_samples(spec.itdg_ms, self.sample_rate)
        create_initial_time_delay_gap(data, direct_idx, itdg_samples)

        drr_low = spec.drr_db - DRR_TOLERANCE_DB
        drr_high = spec.drr_db + DRR_TOLERANCE_DB

        current_drr = drr_energy_ratio(data, direct_idx)
        if current_drr is None:
            logger.debug("thin: no reverberant energy after the gap, nothing to remove")
            return 0
        # Thinning only removes energy, so a DRR above the band is accepted as is
        if current_drr > drr_high:
            logger.debug("thin: drr %.2f dB already above target band [%.2f, %.2f]", current_drr, drr_low, drr_high)
            return 0

        passes = 0
        while current_drr < drr_low:
            thin_out_reflections(data, er_start, er_end, EARLY_REFLECTION_THIN_RATE, self.generator)
            thin_out_reflections(data, er_end, n - 1, TAIL_THIN_RATE, self.generator)
            passes += 1

            previous_drr = current_drr
            current_drr = drr_energy_ratio(data, direct_idx)
            if current_drr is None:
                break
            # No progress means the remaining reflections cannot be thinned further
            if abs(current_drr - previous_drr) < DRR_EPSILON:
                break

        logger.debug("thin: %d passes, drr=%s dB (target %.2f dB)", passes, current_drr, spec.drr_db)
        return passes


def thin(
    data: torch.Tensor,
    direct_sound_idx: int,
    early_reflection_start_idx: int,
    early_reflection_end_idx: int,
    spec: GenerationSpec,
    sample_rate: int,
    generator: Optional[torch.Generator] = None,
) -> int:
    """Functional wrapper around ReflectionThinner.thin."""
    indices = WindowIndices(direct_sound_idx, early_reflection_start_idx, early_reflection_end_idx)
    return ReflectionThinner(sample_rate, generator).thin(data, indices, spec)
