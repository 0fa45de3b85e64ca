# palette.py

import math

import numpy as np

import constants


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float):
    """
    Converts an HSL color to an 8-bit RGB tuple.
    All inputs are in 0-1; hue wraps.
    """
    h = h % 1.0
    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)
    return (round(r * 255), round(g * 255), round(b * 255))


def hsl_to_rgb_array(h: np.ndarray, s: float, l: float) -> np.ndarray:
    """
    Vectorized HSL to RGB for pixel fields.

    Uses the closed form f(n) = l - a*max(-1, min(k-3, 9-k, 1)), k = (n + 12h) mod 12,
    which matches hsl_to_rgb channel for channel.
    Returns a uint8 array of shape h.shape + (3,).
    """
    h = np.mod(h, 1.0)
    a = s * min(l, 1 - l)
    out = np.empty(h.shape + (3,), dtype=np.uint8)
    for channel, n in enumerate((0, 8, 4)):
        k = np.mod(n + h * 12, 12)
        value = l - a * np.clip(np.minimum(k - 3, 9 - k), -1, 1)
        out[..., channel] = np.round(value * 255).astype(np.uint8)
    return out


def hex_to_rgb(value: str):
    value = value.lstrip('#')
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


AGGRESSIVE_RGB = [hex_to_rgb(c) for c in constants.AGGRESSIVE_PALETTE]


def cycle_color(clock: float, offset: float = 0.0):
    """Steps through the aggressive palette as the clock advances."""
    index = math.floor((clock * constants.COLOR_SWAP_SPEED + offset) % len(AGGRESSIVE_RGB))
    return AGGRESSIVE_RGB[index]


def hue_color(hue_degrees: float, alpha: float = 1.0, lightness: float = 0.5):
    """Fully saturated color for a hue in degrees, as an RGBA tuple."""
    r, g, b = hsl_to_rgb(hue_degrees / 360.0, 1.0, lightness)
    return (r, g, b, max(0, min(255, int(alpha * 255))))
