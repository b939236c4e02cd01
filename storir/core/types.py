from dataclasses import dataclass
import math
from typing import Dict


class ConfigurationError(ValueError):
    """Raised when generation parameters cannot describe a valid impulse response."""


@dataclass(frozen=True)
class GenerationSpec:
    """
    Perceptual parameters of one stochastic impulse response.

    rt60_ms: reverberation time [ms]
    edt_ms: early decay time [ms]
    itdg_ms: initial time delay gap [ms]
    er_duration_ms: early reflections duration [ms]
    drr_db: direct to reverberant energy ratio [dB]
    """
    rt60_ms: float
    edt_ms: float
    itdg_ms: float
    er_duration_ms: float
    drr_db: float

    def __post_init__(self):
        for name in ("rt60_ms", "edt_ms", "itdg_ms", "er_duration_ms", "drr_db"):
            value = getattr(self, name)
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value!r}")
            object.__setattr__(self, name, value)
        if self.rt60_ms <= self.edt_ms:
            raise ConfigurationError(
                "Reverb time (rt60) can't be lower than Early decay time (edt): "
                f"rt60_ms={self.rt60_ms}, edt_ms={self.edt_ms}"
            )

    def to_dict(self) -> Dict[str, float]:
        return {
            "rt60_ms": self.rt60_ms,
            "edt_ms": self.edt_ms,
            "itdg_ms": self.itdg_ms,
            "er_duration_ms": self.er_duration_ms,
            "drr_db": self.drr_db,
        }


@dataclass(frozen=True)
class WindowIndices:
    direct_sound_idx: int
    early_reflection_start_idx: int
    early_reflection_end_idx: int

