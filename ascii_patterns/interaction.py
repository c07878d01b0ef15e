"""
Interaction Overlay - Pointer Hover and Click Ripples

Perturbs the blended field value around the pointer, and around every
live click effect. Click effects fade linearly: each frame removes
frame_delta from their life, and they are dropped at life <= 0.

Contributions from the pointer and all clicks simply add up; the only
limit is the final clamp to [0, 1].
"""

import numpy as np

from .config import InteractionKind


CLICK_LIFE = 3.0


class ClickEffect:
    """A decaying ripple anchored where the pointer went down."""

    def __init__(self, x, y, strength, radius, life=CLICK_LIFE, max_life=None):
        self.x = float(x)
        self.y = float(y)
        self.strength = float(strength)
        self.radius = max(float(radius), 1e-6)
        self.life = float(life)
        self.max_life = float(max_life if max_life is not None else life)

    @property
    def alive(self):
        return self.life > 0

    @property
    def age(self):
        return self.max_life - self.life

    def decay(self, dt):
        self.life -= dt
        return self.alive

    def contribution(self, nx, ny):
        """Ripple term at (nx, ny), fading as the effect ages."""
        dist = np.sqrt((nx - self.x) ** 2 + (ny - self.y) ** 2)
        fade = self.life / self.max_life if self.max_life > 0 else 0.0
        strength = (1 - dist / self.radius) * self.strength * fade
        ripple = np.sin(dist * 15 - self.age * 3) * strength
        return np.where(dist < self.radius, ripple, 0.0)

    def __repr__(self):
        return (f"ClickEffect(x={self.x:.3f}, y={self.y:.3f}, "
                f"life={self.life:.3f}/{self.max_life:.3f})")


def _pointer_effect(kind, dist, angle, strength, t):
    if kind == InteractionKind.ripple:
        return np.sin(dist * 20 - t * 5) * strength * 0.3
    if kind == InteractionKind.attract:
        return strength * 0.5
    if kind == InteractionKind.repel:
        return -strength * 0.5
    if kind == InteractionKind.trail:
        return strength * 0.4 * np.sin(t * 2)
    if kind == InteractionKind.distort:
        return np.sin(angle * 4 + t * 3) * strength * 0.3
    return np.zeros_like(dist)


class InteractionOverlay:
    """Pointer position plus the set of live click effects."""

    def __init__(self):
        self.pointer = (0.5, 0.5)
        self.effects = []

    def pointer_moved(self, x, y, config):
        """Track the pointer (normalized coords) while interaction is on."""
        if config.enabled:
            self.pointer = (float(x), float(y))

    def pointer_pressed(self, x, y, config):
        """Spawn a click effect if clicks are enabled. Returns it or None."""
        if not (config.enabled and config.click_enabled):
            return None
        effect = ClickEffect(x, y, strength=config.strength, radius=config.radius)
        self.effects.append(effect)
        return effect

    def update(self, dt):
        """Age every click effect by dt and drop the expired ones."""
        self.effects = [e for e in self.effects if e.decay(dt)]

    def clear(self):
        self.effects = []

    def apply(self, nx, ny, base, t, config):
        """Return base + all perturbations, clamped to [0, 1]."""
        nx = np.asarray(nx, dtype=np.float64)
        ny = np.asarray(ny, dtype=np.float64)
        px, py = self.pointer
        dx = nx - px
        dy = ny - py
        dist = np.sqrt(dx * dx + dy * dy)

        with np.errstate(all="ignore"):
            inside = dist < config.radius
            strength = (1 - dist / config.radius) * config.strength
            angle = np.arctan2(dy, dx)
            effect = np.where(
                inside, _pointer_effect(config.kind, dist, angle, strength, t), 0.0)

            for click in self.effects:
                effect = effect + click.contribution(nx, ny)

            result = np.nan_to_num(np.asarray(base, dtype=np.float64) + effect, nan=0.5)
        return np.clip(result, 0.0, 1.0)
