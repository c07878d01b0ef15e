"""
Character Ramps for ASCII Pattern Rendering

Maps float values [0, 1] to glyphs. Each ramp is an ordered string from
emptiest to densest character and serves as a lookup table, the same way
a colormap LUT maps intensity to colour.
"""

import numpy as np


DEFAULT_RAMP = " .:-=+*#%@"

# Registry of built-in ramps
RAMPS = {
    "blocks": " ░▒▓▌▍▎▏▊▋█",
    "ascii": " .:-=+*#%@",
    "hex": " 0123456789ABCDEF",
    "numbers": " 0123456789",
    "letters": " ABCDEFGHIJ",
    "symbols": " !@#$%^&*().",
    "braille": " ⠀⠁⠃⠇⠏⠟⠿⡿⣿",
    "custom": DEFAULT_RAMP,
}

RAMP_ORDER = list(RAMPS.keys())


def get_ramp(name, custom=None):
    """Resolve a ramp by name.

    "custom" returns the user string, falling back to DEFAULT_RAMP when it
    is empty. Unknown names also fall back to DEFAULT_RAMP.
    """
    if name == "custom":
        return custom or DEFAULT_RAMP
    return RAMPS.get(name) or DEFAULT_RAMP


def char_indices(values, length):
    """Quantize values in [0, 1] to ramp indices in [0, length - 1]."""
    length = max(1, int(length))
    v = np.nan_to_num(np.asarray(values, dtype=np.float64),
                      nan=0.0, posinf=1.0, neginf=0.0)
    v = np.clip(v, 0.0, 1.0)
    idx = np.floor(v * (length - 1)).astype(np.int64)
    return np.clip(idx, 0, length - 1)


def map_to_char(value, ramp):
    """Pick the glyph for a single value."""
    ramp = ramp or DEFAULT_RAMP
    return ramp[int(char_indices(value, len(ramp)))]


def map_to_chars(values, ramp):
    """Vectorised map_to_char: returns an array of single-char strings."""
    ramp = ramp or DEFAULT_RAMP
    lut = np.array(list(ramp))
    return lut[char_indices(values, len(ramp))]
