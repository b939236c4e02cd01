"""
Param lookup utilities for generation params (plain dict contract).
Supports dotted keys; resolve_params uses them to read params nested under "rir".
"""
import math
from typing import Any, Optional

from storir.core.types import ConfigurationError


def get_param(params: dict, name: str, default: Any = None) -> Any:
    """
    Read a value from params, supporting dotted keys for nested dicts.
    E.g. get_param(p, "rir.rt60_ms", 500.0) -> p["rir"]["rt60_ms"] or default.
    If any intermediate key is missing or not a dict, returns default.
    """
    if not params or not name:
        return default
    keys = name.split(".")
    current = params
    for key in keys[:-1]:
        next_val = current.get(key)
        if next_val is None or not isinstance(next_val, dict):
            return default
        current = next_val
    return current.get(keys[-1], default)


def get_float(params: dict, name: str, default: float) -> float:
    """
    Read a param as a finite float. Missing -> default.
    Non-numeric or non-finite values are configuration errors, not silently defaulted.
    """
    raw = get_param(params, name, default)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {raw!r}")
    return value


def clamp_if_bounds(
    value: float,
    min: Optional[float] = None,
    max: Optional[float] = None,
) -> float:
    """
    Clamp value to [min, max] when bounds are not None.
    If both are None, returns value unchanged.
    """
    v = float(value)
    if min is not None and v < min:
        return min
    if max is not None and v > max:
        return max
    return v
