"""
Scalar Field Library

One generator per PatternKind. Each maps normalized grid coordinates
(cell corners: nx = col / cols, ny = row / rows), a time value and a
PatternConfig to a raw value in [-1, 1]. Generators are vectorised over
whole coordinate arrays, so a frame is a handful of numpy expressions
rather than cols * rows Python calls.

cellular and voronoi read their state from a sources object exposing
`.cellular` and `.voronoi` (see renderer.RenderState); they never
advance it here.
"""

import math

import numpy as np

from .config import NoiseVariant, PatternKind
from . import noise as _noise


TWO_PI = 2.0 * math.pi
FRACTAL_ITERATIONS = 20
RADIUS_EPSILON = 0.1
NOISE_SEED = 0


def normalized_coords(grid):
    """(rows, cols) arrays of cell-corner coordinates in [0, 1)."""
    xs = np.arange(grid.cols, dtype=np.float64) / grid.cols
    ys = np.arange(grid.rows, dtype=np.float64) / grid.rows
    return np.meshgrid(xs, ys)


def _polar(nx, ny):
    dx = nx - 0.5
    dy = ny - 0.5
    return np.arctan2(dy, dx), np.sqrt(dx * dx + dy * dy)


def escape_time(zx, zy, cx, cy, max_iter=FRACTAL_ITERATIONS):
    """Iterations of z <- z^2 + c before |z|^2 exceeds 4 (max_iter if never)."""
    zx, zy, cx, cy = np.broadcast_arrays(
        *(np.asarray(a, dtype=np.float64) for a in (zx, zy, cx, cy)))
    zx = zx.copy()
    zy = zy.copy()
    counts = np.full(zx.shape, max_iter, dtype=np.int64)
    active = np.ones(zx.shape, dtype=bool)
    for i in range(max_iter):
        escaped = active & (zx * zx + zy * zy > 4.0)
        counts[escaped] = i
        active &= ~escaped
        if not active.any():
            break
        new_zx = zx * zx - zy * zy + cx
        new_zy = 2.0 * zx * zy + cy
        zx = np.where(active, new_zx, zx)
        zy = np.where(active, new_zy, zy)
    return counts


# --- Stateless generators ---

def waves(nx, ny, t, cfg, sources=None):
    return (np.sin(nx * TWO_PI * 5 + t * cfg.speed * 100) +
            np.sin(ny * TWO_PI * 3 + t * cfg.speed * 80)) / 2


def ripples(nx, ny, t, cfg, sources=None):
    _, radius = _polar(nx, ny)
    return np.sin(radius * TWO_PI * 10 - t * cfg.speed * 200)


def noise(nx, ny, t, cfg, sources=None):
    x = nx * cfg.scale * 100
    y = ny * cfg.scale * 100
    z = t * cfg.speed * 10
    if cfg.noise_variant == NoiseVariant.turbulence:
        n = _noise.turbulence(x, y, z, seed=NOISE_SEED)
    elif cfg.noise_variant == NoiseVariant.ridged:
        n = _noise.ridged(x, y, z, seed=NOISE_SEED)
    else:
        n = _noise.noise01(x, y, z, seed=NOISE_SEED)
    return n * 2 - 1


def spiral(nx, ny, t, cfg, sources=None):
    angle, radius = _polar(nx, ny)
    return np.sin(angle * 3 + radius * 20 + t * cfg.speed * 100)


def checkerboard(nx, ny, t, cfg, sources=None):
    check = (np.floor(nx * cfg.scale * 100) + np.floor(ny * cfg.scale * 100) +
             np.floor(t * cfg.speed * 100))
    return np.mod(check, 2) * 2 - 1


def stripes(nx, ny, t, cfg, sources=None):
    return np.sin((nx + ny) * cfg.scale * 200 + t * cfg.speed * 100)


def plasma(nx, ny, t, cfg, sources=None):
    s = cfg.speed
    return (np.sin(nx * 16 + t * s * 80) +
            np.sin(ny * 8 + t * s * 60) +
            np.sin((nx + ny) * 16 + t * s * 40) +
            np.sin(np.sqrt(nx * nx + ny * ny) * 8 + t * s * 120)) / 4


def mandelbrot(nx, ny, t, cfg, sources=None):
    zx = (nx - 0.5) * 4
    zy = (ny - 0.5) * 4
    cx = zx + np.sin(t * cfg.speed * 50) * 0.3
    cy = zy + np.cos(t * cfg.speed * 30) * 0.3
    return escape_time(0.0, 0.0, cx, cy) / FRACTAL_ITERATIONS


def julia(nx, ny, t, cfg, sources=None):
    jx = (nx - 0.5) * 4
    jy = (ny - 0.5) * 4
    cx = np.sin(t * cfg.speed * 100) * 0.8
    cy = np.cos(t * cfg.speed * 70) * 0.8
    return escape_time(jx, jy, cx, cy) / FRACTAL_ITERATIONS


def tunnel(nx, ny, t, cfg, sources=None):
    angle, radius = _polar(nx, ny)
    return (np.sin(angle * 8 + t * cfg.speed * 100) *
            np.sin(1 / (radius + RADIUS_EPSILON) + t * cfg.speed * 50))


def mosaic(nx, ny, t, cfg, sources=None):
    mx = np.floor(nx * cfg.scale * 200).astype(np.int64)
    my = np.floor(ny * cfg.scale * 200).astype(np.int64)
    # Each product wraps to int32 before the XOR; fmod keeps the sign
    tile_hash = np.fmod((mx * 73856093).astype(np.int32) ^ (my * 19349663).astype(np.int32),
                        1000000)
    return (tile_hash / 500000 - 1) + np.sin(t * cfg.speed * 100) * 0.3


# --- Stateful generators (read-only access to frame state) ---

def cellular(nx, ny, t, cfg, sources=None):
    if sources is None or sources.cellular is None:
        return np.full(np.shape(nx), -1.0)
    return sources.cellular.query(nx, ny)


def voronoi(nx, ny, t, cfg, sources=None):
    if sources is None or sources.voronoi is None:
        return np.zeros(np.shape(nx))
    return sources.voronoi.query(nx, ny, t * cfg.speed)


# Registry: one generator per kind
GENERATORS = {
    PatternKind.waves: waves,
    PatternKind.ripples: ripples,
    PatternKind.noise: noise,
    PatternKind.spiral: spiral,
    PatternKind.checkerboard: checkerboard,
    PatternKind.stripes: stripes,
    PatternKind.plasma: plasma,
    PatternKind.mandelbrot: mandelbrot,
    PatternKind.julia: julia,
    PatternKind.cellular: cellular,
    PatternKind.voronoi: voronoi,
    PatternKind.tunnel: tunnel,
    PatternKind.mosaic: mosaic,
}


def evaluate_raw(nx, ny, t, cfg, sources=None):
    """Raw generator output (nominally [-1, 1], may overshoot)."""
    nx = np.asarray(nx, dtype=np.float64)
    ny = np.asarray(ny, dtype=np.float64)
    with np.errstate(all="ignore"):
        raw = GENERATORS[cfg.kind](nx, ny, float(t), cfg, sources)
    return np.broadcast_to(np.asarray(raw, dtype=np.float64), np.broadcast(nx, ny).shape)


def evaluate_field(nx, ny, t, cfg, sources=None):
    """Normalized field value in [0, 1]: (raw + 1) / 2, clamped.

    Non-finite results (huge times, degenerate configs) collapse to the
    midpoint so one cell can never poison the frame.
    """
    raw = evaluate_raw(nx, ny, t, cfg, sources)
    value = np.nan_to_num((raw + 1.0) / 2.0, nan=0.5, posinf=1.0, neginf=0.0)
    return np.clip(value, 0.0, 1.0)


def evaluate_pattern(col, row, grid, t, cfg, sources=None):
    """Field value for integer cell (col, row) of `grid`, in [0, 1].

    Accepts scalars (returns float) or index arrays (returns array).
    """
    nx = np.asarray(col, dtype=np.float64) / grid.cols
    ny = np.asarray(row, dtype=np.float64) / grid.rows
    value = evaluate_field(nx, ny, t, cfg, sources)
    if value.ndim == 0:
        return float(value)
    return value


def evaluate_grid(grid, t, cfg, sources=None):
    """(rows, cols) array of normalized values for every cell."""
    nx, ny = normalized_coords(grid)
    return evaluate_field(nx, ny, t, cfg, sources)
