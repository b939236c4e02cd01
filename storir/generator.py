"""
Impulse response engine: noise -> EDT/RT60 envelope -> reflection thinning.
Each call owns its buffer and its random generator; a GenerationSpec may be shared freely.
"""
import logging
from typing import Optional

import torch

from storir.core.types import GenerationSpec
from storir.dsp.envelopes import EnvelopeShaper
from storir.dsp.noise import Noise
from storir.dsp.reflections import ReflectionThinner

logger = logging.getLogger(__name__)


def new_spec(
    rt60_ms: float,
    edt_ms: float,
    itdg_ms: float,
    er_duration_ms: float,
    drr_db: float,
) -> GenerationSpec:
    """Build a GenerationSpec. Raises ConfigurationError if rt60_ms <= edt_ms."""
    return GenerationSpec(rt60_ms, edt_ms, itdg_ms, er_duration_ms, drr_db)


def generate(
    spec: GenerationSpec,
    sample_rate: int,
    generator: Optional[torch.Generator] = None,
) -> torch.Tensor:
    """
    Generate one stochastic impulse response.

    Returns float32 energy-domain values starting at the direct sound. Values are not
    normalized; scale or clip before integer PCM encoding.
    If no generator is given, a fresh non-deterministically seeded one is used.
    """
    if generator is None:
        generator = torch.Generator()
        generator.seed()

    data = Noise.white_uniform(spec.rt60_ms, sample_rate, generator)
    indices = EnvelopeShaper(sample_rate).shape(data, spec)
    ReflectionThinner(sample_rate, generator).thin(data, indices, spec)
    # Samples before the direct sound are pre-roll
    return data[indices.direct_sound_idx:].clone()


class ImpulseResponseEngine:
    def __init__(self, sample_rate: int = 44100):
        self.sample_rate = sample_rate

    def render(self, spec: GenerationSpec, seed: int = 0) -> torch.Tensor:
        generator = torch.Generator()
        generator.manual_seed(seed)
        audio = generate(spec, self.sample_rate, generator)
        logger.debug("rendered %d samples (seed=%d, sr=%d)", audio.shape[-1], seed, self.sample_rate)
        return audio
