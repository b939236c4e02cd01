"""
Defaults snapshot and param resolution tests: single source is schema.DEFAULT_PRESET.
Resolved defaults = resolve_params({}). Snapshots detect drift.
Run from project root: python -m pytest tests/test_defaults_snapshot.py -v
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from storir.core.params import get_param, clamp_if_bounds
from storir.core.types import ConfigurationError
from storir.params import PARAM_SCHEMA, clamp_params, resolve_params, spec_from_params


def test_resolved_defaults_snapshot():
    resolved = resolve_params({})
    assert resolved == {
        "rt60_ms": 500.0,
        "edt_ms": 50.0,
        "itdg_ms": 3.0,
        "er_duration_ms": 80.0,
        "drr_db": -1.0,
        "sample_rate": 44100,
    }
    assert isinstance(resolved["sample_rate"], int)


def test_schema_defaults_inside_bounds():
    for name, entry in PARAM_SCHEMA.items():
        assert entry["min"] <= entry["default"] <= entry["max"], name


def test_user_params_override_defaults():
    resolved = resolve_params({"rt60_ms": 900, "drr_db": "3.5"})
    assert resolved["rt60_ms"] == 900.0
    assert resolved["drr_db"] == 3.5
    assert resolved["edt_ms"] == 50.0


def test_legacy_names_are_renamed():
    resolved = resolve_params({"rt60": 800.0, "edt": 70.0})
    assert resolved["rt60_ms"] == 800.0
    assert resolved["edt_ms"] == 70.0


def test_canonical_name_wins_over_legacy():
    assert resolve_params({"rt60": 800.0, "rt60_ms": 600.0})["rt60_ms"] == 600.0


def test_unknown_keys_are_dropped():
    assert "room_size" not in resolve_params({"room_size": 12})


@pytest.mark.parametrize("bad", ["loud", None, float("inf"), float("nan"), [1]])
def test_invalid_values_are_configuration_errors(bad):
    with pytest.raises(ConfigurationError):
        resolve_params({"drr_db": bad})


def test_spec_from_params_enforces_rt60_above_edt():
    with pytest.raises(ConfigurationError):
        spec_from_params({"rt60_ms": 40.0, "edt_ms": 50.0})
    spec = spec_from_params({"rt60_ms": 700.0})
    assert spec.rt60_ms == 700.0 and spec.edt_ms == 50.0


def test_clamp_params_realistic_mode():
    clamped = clamp_params(resolve_params({"drr_db": -100.0, "itdg_ms": 900.0}))
    assert clamped["drr_db"] == -60.0
    assert clamped["itdg_ms"] == 200.0
    assert clamped["rt60_ms"] == 500.0


def test_get_param_dotted_keys():
    params = {"rir": {"rt60_ms": 800.0}, "edt_ms": 60.0}
    assert get_param(params, "rir.rt60_ms") == 800.0
    assert get_param(params, "edt_ms") == 60.0
    assert get_param(params, "rir.missing", 1.0) == 1.0
    assert get_param(params, "edt_ms.nested", 2.0) == 2.0
    assert get_param({}, "rt60_ms", 3.0) == 3.0


def test_clamp_if_bounds():
    assert clamp_if_bounds(5.0, 0.0, 1.0) == 1.0
    assert clamp_if_bounds(-5.0, 0.0, None) == 0.0
    assert clamp_if_bounds(0.5) == 0.5


def test_nested_rir_params_are_read():
    resolved = resolve_params({"rir": {"rt60_ms": 800.0, "edt": 70.0}})
    assert resolved["rt60_ms"] == 800.0
    assert resolved["edt_ms"] == 70.0
    assert resolved["itdg_ms"] == 3.0


def test_top_level_wins_over_nested():
    assert resolve_params({"rt60_ms": 600.0, "rir": {"rt60_ms": 800.0}})["rt60_ms"] == 600.0


def test_invalid_nested_value_is_configuration_error():
    with pytest.raises(ConfigurationError):
        resolve_params({"rir": {"drr_db": "loud"}})


@pytest.mark.parametrize("rate", [0, -44100, 0.5])
def test_sample_rate_below_one_hz_is_rejected(rate):
    with pytest.raises(ConfigurationError):
        resolve_params({"sample_rate": rate})
