from typing import Optional

import torch

from storir.dsp.envelopes import ms_to_samples

NOISE_LOW = -5.0
NOISE_HIGH = 5.0


class Noise:
    @staticmethod
    def num_samples(rt60_ms: float, sample_rate: int) -> int:
        """Buffer length for a response of rt60_ms. Never shorter than one sample."""
        return max(1, ms_to_samples(rt60_ms, sample_rate))

    @staticmethod
    def white_uniform(
        rt60_ms: float,
        sample_rate: int,
        generator: Optional[torch.Generator] = None,
    ) -> torch.Tensor:
        """White noise, uniform in [-5, 5], one float32 sample per RT60 sample."""
        n = Noise.num_samples(rt60_ms, sample_rate)
        noise = torch.rand(n, generator=generator, dtype=torch.float32)
        return noise * (NOISE_HIGH - NOISE_LOW) + NOISE_LOW


def generate_noise(
    rt60_ms: float,
    sample_rate: int,
    generator: Optional[torch.Generator] = None,
) -> torch.Tensor:
    return Noise.white_uniform(rt60_ms, sample_rate, generator)
