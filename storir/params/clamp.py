"""
Parameter clamping for realistic mode: caps values outside the ranges found in real rooms.
Only applied when mode=realistic is requested.
"""
from storir.core.params import clamp_if_bounds
from storir.params.schema import PARAM_SCHEMA


def clamp_params(params: dict) -> dict:
    """
    Clamp resolved params to PARAM_SCHEMA bounds.
    Returns a new dict (does not mutate input). Keys without a schema entry pass through.
    """
    result = params.copy()
    for name, entry in PARAM_SCHEMA.items():
        if name in result:
            result[name] = clamp_if_bounds(result[name], entry["min"], entry["max"])
    if "sample_rate" in result:
        result["sample_rate"] = int(result["sample_rate"])
    return result
