"""
PCM encoder tests: 32767 scale, rounding, int16 clamping and the WAV container.
Run from project root: python -m pytest tests/test_io.py -v
"""
import sys
import os
import io

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import numpy as np
import soundfile as sf
import torch

from storir.core.io import AudioIO


def test_to_pcm16_scale_and_clamp():
    pcm = AudioIO.to_pcm16(torch.tensor([0.0, 0.5, 1.0, 2.0, -2.0, -1.0, -0.5]))
    assert pcm.dtype == np.int16
    assert pcm.tolist() == [0, 16384, 32767, 32767, -32768, -32767, -16384]


def test_to_pcm16_accepts_lists():
    assert AudioIO.to_pcm16([0.25]).tolist() == [8192]


def test_save_wav_round_trip(tmp_path):
    samples = torch.tensor([1.0, 0.25, 0.0, 0.001, 3.0])
    path = tmp_path / "ir.wav"
    AudioIO.save_wav(samples, 16000, path)

    info = sf.info(str(path))
    assert info.samplerate == 16000
    assert info.channels == 1
    assert info.subtype == "PCM_16"

    data, sr = sf.read(str(path), dtype="int16")
    assert sr == 16000
    assert data.tolist() == AudioIO.to_pcm16(samples).tolist()


def test_to_bytes_is_wav():
    wav = AudioIO.to_bytes(torch.ones(32) * 0.5, 8000)
    assert wav[:4] == b"RIFF"
    data, sr = sf.read(io.BytesIO(wav), dtype="int16")
    assert sr == 8000
    assert len(data) == 32
