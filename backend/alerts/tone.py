"""Sonar cue synthesis: a short sine ping with an exponential fade."""
from __future__ import annotations

import io
import wave

import numpy as np

from common.config import CUE_DURATION_MS, CUE_END_GAIN, CUE_SAMPLE_RATE, CUE_START_GAIN


def render_cue(
    frequency_hz: float,
    duration_ms: int = CUE_DURATION_MS,
    sample_rate: int = CUE_SAMPLE_RATE,
) -> np.ndarray:
    """Render one cue as float32 samples in [-1, 1]."""
    n_samples = max(1, int(sample_rate * duration_ms / 1000))
    t = np.arange(n_samples, dtype=np.float64) / sample_rate
    duration_s = n_samples / sample_rate
    envelope = CUE_START_GAIN * (CUE_END_GAIN / CUE_START_GAIN) ** (t / duration_s)
    return (envelope * np.sin(2 * np.pi * frequency_hz * t)).astype(np.float32)


def cue_to_wav_bytes(samples: np.ndarray, sample_rate: int = CUE_SAMPLE_RATE) -> bytes:
    """Encode samples as 16-bit mono PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm.tobytes())
    return buffer.getvalue()
