"""
Coherent Noise

Vectorised 3D Perlin gradient noise with uint32 integer hashing, plus
the fractal variants used by the noise pattern. All functions accept
scalars or numpy arrays and return values in [0, 1].
"""

import numpy as np


OCTAVES = 4
FALLOFF = 0.5


def _hash_wang(key):
    """Wang hash -- vectorised uint32."""
    k = np.asarray(key, dtype=np.uint32)
    k = (k ^ np.uint32(61)) ^ (k >> np.uint32(16))
    k = k * np.uint32(9)
    k = k ^ (k >> np.uint32(4))
    k = k * np.uint32(0x27D4EB2D)
    k = k ^ (k >> np.uint32(15))
    return k


def _hash3d(x, y, z, seed):
    """Cascaded hash: hash(x ^ hash(y ^ hash(z ^ hash(seed))))."""
    s = _hash_wang(np.uint32(seed))
    return _hash_wang(x ^ _hash_wang(y ^ _hash_wang(z ^ s)))


def _fade(t):
    """Perlin's quintic fade curve."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _grad3(h, x, y, z):
    """Dot product with one of the 12 cube-edge gradients."""
    h = h & np.uint32(15)
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, z))
    return (np.where(h & np.uint32(1), -u, u) +
            np.where(h & np.uint32(2), -v, v))


def _lattice(coord):
    floor = np.floor(coord)
    return floor.astype(np.int64).astype(np.uint32), coord - floor


def perlin3d(x, y, z, seed=0):
    """Raw 3D Perlin noise, roughly in [-1, 1]."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    x, y, z = np.broadcast_arrays(x, y, z)

    with np.errstate(over="ignore"):
        ix, fx = _lattice(x)
        iy, fy = _lattice(y)
        iz, fz = _lattice(z)
        u, v, w = _fade(fx), _fade(fy), _fade(fz)
        one = np.uint32(1)

        def corner(dx, dy, dz):
            h = _hash3d(ix + one * dx, iy + one * dy, iz + one * dz, seed)
            return _grad3(h, fx - dx, fy - dy, fz - dz)

        x00 = corner(0, 0, 0) + u * (corner(1, 0, 0) - corner(0, 0, 0))
        x10 = corner(0, 1, 0) + u * (corner(1, 1, 0) - corner(0, 1, 0))
        x01 = corner(0, 0, 1) + u * (corner(1, 0, 1) - corner(0, 0, 1))
        x11 = corner(0, 1, 1) + u * (corner(1, 1, 1) - corner(0, 1, 1))
        y0 = x00 + v * (x10 - x00)
        y1 = x01 + v * (x11 - x01)
        return y0 + w * (y1 - y0)


def noise01(x, y, z, seed=0):
    """Perlin noise rescaled to [0, 1]."""
    return np.clip((perlin3d(x, y, z, seed) + 1.0) * 0.5, 0.0, 1.0)


def turbulence(x, y, z, seed=0, octaves=OCTAVES, falloff=FALLOFF):
    """Fractal sum: amplitude halves and frequency doubles per octave,
    normalised by the amplitude total so the result stays in [0, 1]."""
    x, y, z = np.broadcast_arrays(np.asarray(x, dtype=np.float64),
                                  np.asarray(y, dtype=np.float64),
                                  np.asarray(z, dtype=np.float64))
    total = np.zeros(x.shape, dtype=np.float64)
    amplitude = 1.0
    frequency = 1.0
    max_amp = 0.0
    for i in range(octaves):
        total += amplitude * noise01(x * frequency, y * frequency,
                                     z * frequency, seed + i)
        max_amp += amplitude
        frequency *= 2.0
        amplitude *= falloff
    return total / max_amp


def ridged(x, y, z, seed=0):
    """Sharp ridges where the base noise crosses its midpoint."""
    return 1.0 - np.abs(2.0 * noise01(x, y, z, seed) - 1.0)
