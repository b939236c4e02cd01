"""
Unit tests for storir/dsp/envelopes: helpers, EDT/RT60 slopes, direct sound detection.
Run from project root: python -m pytest tests/test_envelopes.py -v
Or: python tests/test_envelopes.py
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch
from storir.core.types import GenerationSpec
from storir.dsp.envelopes import (
    db_to_lin,
    ms_to_s,
    ms_to_samples,
    apply_edt_slope,
    apply_rt60_slope,
    db_to_energy,
    find_direct_sound,
    EnvelopeShaper,
    shape,
)
from storir.dsp.noise import Noise

SR = 16000


def _shaped(spec: GenerationSpec, seed: int = 0):
    g = torch.Generator()
    g.manual_seed(seed)
    data = Noise.white_uniform(spec.rt60_ms, SR, g)
    indices = EnvelopeShaper(SR).shape(data, spec)
    return data, indices


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def test_db_to_lin():
    assert db_to_lin(0.0) == 1.0
    assert abs(db_to_lin(-20.0) - 0.1) < 1e-9
    assert abs(db_to_lin(-60.0) - 0.001) < 1e-9
    assert abs(db_to_lin(60.0) - 1000.0) < 1e-6
    t = db_to_lin(torch.tensor([0.0, -20.0]))
    assert torch.allclose(t, torch.tensor([1.0, 0.1]))


def test_ms_to_s():
    assert ms_to_s(0) == 0.0
    assert ms_to_s(1000) == 1.0
    assert ms_to_s(50) == 0.05


def test_ms_to_samples_rounds_half_up():
    assert ms_to_samples(500, SR) == 8000
    assert ms_to_samples(50, SR) == 800
    # Exact halves at 1 Hz: 0.5 -> 1 and 2.5 -> 3 (not banker's rounding)
    assert ms_to_samples(500, 1) == 1
    assert ms_to_samples(2500, 1) == 3
    assert ms_to_samples(0.0, SR) == 0


def test_ms_to_samples_negative_is_zero():
    assert ms_to_samples(-3.0, SR) == 0


# -----------------------------------------------------------------------------
# Slopes
# -----------------------------------------------------------------------------

def test_edt_slope_ramp_then_hold():
    data = torch.zeros(10)
    apply_edt_slope(data, 4)
    expected = torch.tensor([0.0, -2.5, -5.0, -7.5, -7.5, -7.5, -7.5, -7.5, -7.5, -7.5])
    assert torch.allclose(data, expected)


def test_edt_slope_zero_samples_is_clamped():
    data = torch.zeros(5)
    apply_edt_slope(data, 0)
    assert torch.isfinite(data).all()
    assert torch.equal(data, torch.zeros(5))


def test_rt60_slope_continues_after_edt():
    data = torch.zeros(10)
    apply_rt60_slope(data, 4, 10)
    assert torch.equal(data[:4], torch.zeros(4))
    # (i - (edt + 1)) * 50 / rt60 with edt=4, rt60=10
    assert abs(data[4].item() - 5.0) < 1e-6
    assert abs(data[5].item()) < 1e-6
    assert abs(data[9].item() + 20.0) < 1e-6


def test_rt60_slope_stops_at_buffer_end():
    data = torch.zeros(6)
    apply_rt60_slope(data, 2, 100)
    assert torch.isfinite(data).all()


def test_db_to_energy_normalizes_peak():
    data = torch.tensor([10.0, -10.0, -30.0])
    db_to_energy(data)
    assert torch.allclose(data, torch.tensor([1.0, 0.01, 0.0001]), rtol=1e-4)


def test_find_direct_sound_first_of_ties():
    data = torch.tensor([0.5, 1.0, 1.0, 0.2])
    assert find_direct_sound(data) == 1


# -----------------------------------------------------------------------------
# EnvelopeShaper
# -----------------------------------------------------------------------------

def test_shape_energy_is_non_negative_and_peaks_at_one():
    spec = GenerationSpec(500.0, 50.0, 5.0, 50.0, -1.0)
    data, _ = _shaped(spec)
    assert (data >= 0).all()
    assert torch.max(data).item() == 1.0
    assert torch.isfinite(data).all()


def test_shape_direct_sound_matches_brute_force_scan():
    spec = GenerationSpec(300.0, 20.0, 3.0, 40.0, 0.0)
    for seed in range(5):
        data, indices = _shaped(spec, seed)
        values = data.tolist()
        peak = max(values)
        first = next(i for i, v in enumerate(values) if v == peak)
        assert indices.direct_sound_idx == first


def test_shape_early_reflection_window():
    spec = GenerationSpec(500.0, 50.0, 5.0, 50.0, -1.0)
    data, indices = _shaped(spec)
    n = data.shape[-1]
    assert indices.early_reflection_start_idx == min(indices.direct_sound_idx + 1, n - 1)
    assert indices.early_reflection_end_idx == min(indices.early_reflection_start_idx + 800, n - 1)


def test_shape_oversized_er_window_clamps_to_last_index():
    spec = GenerationSpec(100.0, 10.0, 2.0, 10000.0, -1.0)
    data, indices = _shaped(spec)
    assert indices.early_reflection_end_idx == data.shape[-1] - 1


def test_shape_tiny_edt_does_not_divide_by_zero():
    spec = GenerationSpec(100.0, 0.01, 0.0, 10.0, 0.0)
    data, indices = _shaped(spec)
    assert torch.isfinite(data).all()
    assert 0 <= indices.direct_sound_idx < data.shape[-1]


def test_shape_single_sample_buffer():
    spec = GenerationSpec(0.05, 0.01, 1.0, 1.0, 0.0)
    data = torch.tensor([3.0])
    indices = shape(data, spec, SR)
    assert indices.direct_sound_idx == 0
    assert indices.early_reflection_start_idx == 0
    assert indices.early_reflection_end_idx == 0
    assert data.item() == 1.0


if __name__ == "__main__":
    test_db_to_lin()
    test_ms_to_s()
    test_ms_to_samples_rounds_half_up()
    test_ms_to_samples_negative_is_zero()
    test_edt_slope_ramp_then_hold()
    test_edt_slope_zero_samples_is_clamped()
    test_rt60_slope_continues_after_edt()
    test_rt60_slope_stops_at_buffer_end()
    test_db_to_energy_normalizes_peak()
    test_find_direct_sound_first_of_ties()
    test_shape_energy_is_non_negative_and_peaks_at_one()
    test_shape_direct_sound_matches_brute_force_scan()
    test_shape_early_reflection_window()
    test_shape_oversized_er_window_clamps_to_last_index()
    test_shape_tiny_edt_does_not_divide_by_zero()
    test_shape_single_sample_buffer()
    print("All envelope tests passed.")
