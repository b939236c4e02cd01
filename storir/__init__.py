"""
Stochastic room impulse responses from perceptual parameters (RT60, EDT, ITDG, ER duration, DRR).
"""
from storir.core.types import ConfigurationError, GenerationSpec, WindowIndices
from storir.generator import ImpulseResponseEngine, generate, new_spec

__all__ = [
    "ConfigurationError",
    "GenerationSpec",
    "WindowIndices",
    "ImpulseResponseEngine",
    "generate",
    "new_spec",
]
