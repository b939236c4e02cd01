import io
import os

import numpy as np
import soundfile as sf
import torch

PCM16_SCALE = 32767


class AudioIO:
    @staticmethod
    def to_pcm16(waveform) -> np.ndarray:
        """round(sample * 32767) with halves away from zero, clamped to the int16 range."""
        if isinstance(waveform, torch.Tensor):
            data = waveform.detach().cpu().numpy()
        else:
            data = np.asarray(waveform)
        data = np.asarray(data, dtype=np.float64).reshape(-1)
        scaled = data * PCM16_SCALE
        scaled = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)
        return np.clip(scaled, np.iinfo(np.int16).min, np.iinfo(np.int16).max).astype(np.int16)

    @staticmethod
    def save_wav(waveform, sample_rate: int, path):
        """Writes a mono 16-bit PCM WAV file. `path` may be a str, Path or file-like object."""
        if isinstance(path, os.PathLike):
            path = os.fspath(path)
        pcm = AudioIO.to_pcm16(waveform)
        sf.write(path, pcm, sample_rate, subtype="PCM_16", format="WAV")

    @staticmethod
    def to_bytes(waveform, sample_rate: int) -> bytes:
        """Returns the mono 16-bit PCM WAV file as bytes (for API responses)."""
        buffer = io.BytesIO()
        AudioIO.save_wav(waveform, sample_rate, buffer)
        return buffer.getvalue()
