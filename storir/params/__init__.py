"""
Parameter schema, defaults and resolution.
Default values: single source is schema.DEFAULT_PRESET; use resolve_params({}) for resolved defaults.
"""
from storir.params.schema import PARAM_SCHEMA, DEFAULT_PRESET
from storir.params.resolve import resolve_params, spec_from_params
from storir.params.clamp import clamp_params

__all__ = ["PARAM_SCHEMA", "DEFAULT_PRESET", "resolve_params", "spec_from_params", "clamp_params"]
