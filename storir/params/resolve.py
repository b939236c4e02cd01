"""
Parameter resolution: merge DEFAULT_PRESET with incoming params and coerce to floats.
Incoming params override defaults. Legacy/unknown keys are stripped before they reach the generator.
"""
from typing import Dict, Any
import os
import logging

from storir.core.params import get_float, get_param
from storir.core.types import ConfigurationError, GenerationSpec
from storir.params.schema import DEFAULT_PRESET, SPEC_KEYS

logger = logging.getLogger(__name__)

# Request bodies may group the params under this key, e.g. {"rir": {"rt60_ms": 800}}.
# Top-level values win over nested ones.
NESTED_KEY = "rir"

# Aliases accepted from older clients that used bare names.
LEGACY_PARAM_KEYS = {
    "rt60": "rt60_ms",
    "edt": "edt_ms",
    "itdg": "itdg_ms",
    "er_duration": "er_duration_ms",
    "drr": "drr_db",
}

DEV = os.environ.get("ENV", "development").lower() in ("development", "dev", "test")


def _rename_legacy(params: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of params with legacy keys renamed. Canonical keys win on conflict."""
    found_legacy = [k for k in LEGACY_PARAM_KEYS if k in params]
    if not found_legacy:
        return dict(params)
    if DEV:
        logger.warning("Legacy param names renamed before generation: %s", found_legacy)
    out = {}
    for key, value in params.items():
        canonical = LEGACY_PARAM_KEYS.get(key, key)
        if canonical != key and canonical in params:
            continue
        out[canonical] = value
    return out


def resolve_params(params: dict) -> dict:
    """
    Resolve params by:
    1. Starting from DEFAULT_PRESET
    2. Renaming legacy keys, reading params nested under "rir" and dropping keys the schema does not know
    3. Merging incoming params onto the defaults (user params override defaults)
    4. Coercing every value to a finite float (sample_rate to int)

    Raises ConfigurationError for non-numeric or non-finite values and for a sample_rate below 1 Hz.
    """
    incoming = _rename_legacy(params or {})
    nested = incoming.get(NESTED_KEY)
    if isinstance(nested, dict):
        incoming[NESTED_KEY] = _rename_legacy(nested)
    unknown = sorted(k for k in incoming if k not in DEFAULT_PRESET and k != NESTED_KEY)
    if unknown:
        logger.debug("Ignoring unknown params: %s", unknown)

    resolved = {}
    for name, default in DEFAULT_PRESET.items():
        fallback = get_param(incoming, f"{NESTED_KEY}.{name}", default)
        resolved[name] = get_float(incoming, name, fallback)
    resolved["sample_rate"] = int(resolved["sample_rate"])
    if resolved["sample_rate"] < 1:
        raise ConfigurationError(f"sample_rate must be at least 1 Hz, got {resolved['sample_rate']}")
    return resolved


def spec_from_params(params: dict) -> GenerationSpec:
    """Build a GenerationSpec from a (possibly partial) params dict."""
    resolved = resolve_params(params)
    return GenerationSpec(**{k: resolved[k] for k in SPEC_KEYS})
