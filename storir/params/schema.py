"""
Parameter schema and defaults for stochastic impulse responses.
Consumed by resolve_params (defaults), clamp_params (bounds) and the service/CLI (documentation).
"""
from typing import Dict, Any, Literal

# Type definitions
ParamType = Literal["float", "int"]
ParamGroup = Literal["decay", "timing", "level", "render"]

# Schema entry structure: type, default, min, max, unit, group, description
ParamSchemaEntry = Dict[str, Any]


def _make_param(
    param_type: ParamType,
    default: Any,
    min_val: float,
    max_val: float,
    unit: str,
    group: ParamGroup,
    description: str,
) -> ParamSchemaEntry:
    """Helper to create a schema entry."""
    return {
        "type": param_type,
        "default": default,
        "min": min_val,
        "max": max_val,
        "unit": unit,
        "group": group,
        "description": description,
    }


# -----------------------------------------------------------------------------
# PARAM_SCHEMA: Metadata (type, default, min, max, unit, group, description)
# -----------------------------------------------------------------------------

PARAM_SCHEMA: Dict[str, ParamSchemaEntry] = {
    "rt60_ms": _make_param(
        "float", 500.0, 50.0, 10000.0, "ms", "decay", "Time for the response energy to decay by 60 dB"
    ),
    "edt_ms": _make_param(
        "float", 50.0, 1.0, 5000.0, "ms", "decay", "Early decay time; the envelope falls 10 dB over this window"
    ),
    "itdg_ms": _make_param(
        "float", 3.0, 0.0, 200.0, "ms", "timing", "Silence between direct sound and first reflection"
    ),
    "er_duration_ms": _make_param(
        "float", 80.0, 0.0, 500.0, "ms", "timing", "Length of the early reflections zone after the direct sound"
    ),
    "drr_db": _make_param(
        "float", -1.0, -60.0, 30.0, "dB", "level", "Target direct to reverberant energy ratio"
    ),
    "sample_rate": _make_param(
        "int", 44100, 8000, 192000, "Hz", "render", "Output sample rate"
    ),
}

# Keys that describe the GenerationSpec itself (sample_rate is a render setting).
SPEC_KEYS = ("rt60_ms", "edt_ms", "itdg_ms", "er_duration_ms", "drr_db")


# -----------------------------------------------------------------------------
# DEFAULT_PRESET: Actual default values
# -----------------------------------------------------------------------------

DEFAULT_PRESET: Dict[str, Any] = {
    name: entry["default"] for name, entry in PARAM_SCHEMA.items()
}
