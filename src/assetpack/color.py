"""sRGB <-> linear transfer functions (IEC 61966-2-1 piecewise curve)."""

from __future__ import annotations

import numpy as np

__all__ = ["srgb_to_linear", "linear_to_srgb", "saturate"]


def srgb_to_linear(values) -> np.ndarray:
    c = np.asarray(values, dtype=np.float32)
    low = c / np.float32(12.92)
    high = np.power((c + np.float32(0.055)) / np.float32(1.055), np.float32(2.4))
    return np.where(c <= np.float32(0.04045), low, high).astype(np.float32)


def linear_to_srgb(values) -> np.ndarray:
    c = np.maximum(np.asarray(values, dtype=np.float32), np.float32(0.0))
    low = c * np.float32(12.92)
    high = np.float32(1.055) * np.power(c, np.float32(1.0 / 2.4)) - np.float32(0.055)
    return np.where(c <= np.float32(0.0031308), low, high).astype(np.float32)


def saturate(values) -> np.ndarray:
    return np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)
