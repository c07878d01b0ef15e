"""
Compositor - Two-Field Blend Algebra

Combines the primary and secondary patterns. Values and colours use two
different formulas that share the same BlendConfig:

- Values: the secondary value is first pulled toward 0.5 by `amount`,
  then combined with the primary value by the mode formula.
- Colours: a per-cell factor local = v1 * v2 * amount lerps the primary
  colour toward the mode's result.

The two must stay separate; unifying them changes the picture.

All functions take scalars or numpy arrays.
"""

import numpy as np

from .config import BlendMode, coerce_enum


SECONDARY_RAMP_THRESHOLD = 0.5


def _lerp(a, b, t):
    return a + (b - a) * t


def _clamp_amount(amount):
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        return 0.0
    if not np.isfinite(amount):
        return 0.0
    return max(0.0, min(1.0, amount))


# --- Value blends: (v1, damped v2) -> value ---

def _value_add(v1, v2):
    return np.clip(v1 + v2 - 0.5, 0.0, 1.0)


def _value_multiply(v1, v2):
    return v1 * v2


def _value_overlay(v1, v2):
    return np.where(v1 < 0.5, 2 * v1 * v2, 1 - 2 * (1 - v1) * (1 - v2))


def _value_difference(v1, v2):
    return np.abs(v1 - v2)


def _value_screen(v1, v2):
    return 1 - (1 - v1) * (1 - v2)


VALUE_BLENDS = {
    BlendMode.add: _value_add,
    BlendMode.multiply: _value_multiply,
    BlendMode.overlay: _value_overlay,
    BlendMode.difference: _value_difference,
    BlendMode.screen: _value_screen,
}


def blend_values(v1, v2, mode, amount):
    """Blend two normalized values. Unknown/normal mode returns v1."""
    mode = coerce_enum(BlendMode, mode, BlendMode.normal)
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = _lerp(0.5, np.asarray(v2, dtype=np.float64), _clamp_amount(amount))
    fn = VALUE_BLENDS.get(mode)
    if fn is None:
        return v1
    return fn(v1, v2)


# --- Colour blends: (c1, c2) -> mode target, lerped by local factor ---

def _color_multiply(c1, c2):
    return c1 * c2 / 255


def _color_overlay(c1, c2):
    return np.where(c1 < 128, 2 * c1 * c2 / 255, 255 - 2 * (255 - c1) * (255 - c2) / 255)


def _color_difference(c1, c2):
    return np.abs(c1 - c2)


def _color_screen(c1, c2):
    return 255 - (255 - c1) * (255 - c2) / 255


COLOR_TARGETS = {
    BlendMode.multiply: _color_multiply,
    BlendMode.overlay: _color_overlay,
    BlendMode.difference: _color_difference,
    BlendMode.screen: _color_screen,
}


def blend_colors(c1, c2, mode, v1, v2, amount):
    """Blend two RGB colours weighted by local = v1 * v2 * amount.

    Returns float channels with shape broadcast(v1, v2) + (3,). `add`
    adds the scaled secondary colour and clamps; other modes lerp from
    c1 toward their target; unknown/normal lerps straight to c2.
    """
    mode = coerce_enum(BlendMode, mode, BlendMode.normal)
    c1 = np.asarray(c1, dtype=np.float64)
    c2 = np.asarray(c2, dtype=np.float64)
    local = (np.asarray(v1, dtype=np.float64) * np.asarray(v2, dtype=np.float64) *
             _clamp_amount(amount))[..., np.newaxis]

    if mode == BlendMode.add:
        return np.clip(c1 + c2 * local, 0.0, 255.0)
    target = COLOR_TARGETS.get(mode)
    if target is None:
        return _lerp(c1, c2, local)
    return _lerp(c1, target(c1, c2), local)


def blend_strength(v1, v2, amount):
    return np.asarray(v1, dtype=np.float64) * np.asarray(v2, dtype=np.float64) * _clamp_amount(amount)


def use_secondary_ramp(v1, v2, amount):
    """True where the secondary character ramp should be used."""
    return blend_strength(v1, v2, amount) >= SECONDARY_RAMP_THRESHOLD
