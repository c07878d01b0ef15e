"""
ASCII Pattern Presets

Each preset bundles one or two pattern slots, a blend, optional pointer
interaction and the character ramps known to look good together. Keys
not given fall back to RenderSettings defaults.
"""

from .config import RenderSettings


PRESETS = {
    # =====================================================================
    # SINGLE PATTERN
    # =====================================================================
    "classic_waves": {
        "name": "Classic Waves",
        "description": "Interfering sine waves in block characters",
        "pattern1": {"kind": "waves", "speed": 0.01, "scale": 0.05, "color": "#ffffff"},
        "ramp1": "blocks",
    },
    "ripple_pond": {
        "name": "Ripple Pond",
        "description": "Concentric rings; move the pointer to disturb them",
        "pattern1": {"kind": "ripples", "speed": 0.01, "color": "#66ccff"},
        "interactive": {"enabled": True, "kind": "ripple", "strength": 1.0, "radius": 0.2},
        "ramp1": "ascii",
    },
    "game_of_life": {
        "name": "Game of Life",
        "description": "Conway's B3/S23 on a 40x30 board",
        "pattern1": {"kind": "cellular", "speed": 0.01, "color": "#33ff66"},
        "ramp1": "blocks",
    },
    "highlife": {
        "name": "HighLife",
        "description": "B36/S23 variant where replicators appear",
        "pattern1": {"kind": "cellular", "speed": 0.01, "color": "#ffcc33", "glow": True},
        "cellular_rule": "B36/S23",
        "ramp1": "symbols",
    },
    "fractal_dive": {
        "name": "Fractal Dive",
        "description": "Drifting Mandelbrot escape-time field",
        "pattern1": {"kind": "mandelbrot", "speed": 0.005, "color": "#ffaa33", "glow": True},
        "ramp1": "braille",
    },
    "tunnel_vision": {
        "name": "Tunnel Vision",
        "description": "Radial depth tunnel with glow",
        "pattern1": {"kind": "tunnel", "speed": 0.02, "color": "#ff33cc", "glow": True},
        "ramp1": "symbols",
    },
    "terrain": {
        "name": "Ridged Terrain",
        "description": "Ridged coherent noise contour lines",
        "pattern1": {"kind": "noise", "noise_variant": "ridged", "speed": 0.01,
                     "scale": 0.05, "color": "#ccffcc"},
        "ramp1": "ascii",
    },

    # =====================================================================
    # BLENDED
    # =====================================================================
    "plasma_storm": {
        "name": "Plasma Storm",
        "description": "Plasma screened over turbulent noise",
        "pattern1": {"kind": "plasma", "speed": 0.01, "color": "#ff5533"},
        "pattern2": {"enabled": True, "kind": "noise", "noise_variant": "turbulence",
                     "speed": 0.02, "scale": 0.08, "color": "#3355ff"},
        "blend": {"mode": "screen", "amount": 0.6},
        "ramp1": "blocks", "ramp2": "ascii",
    },
    "julia_mirror": {
        "name": "Julia Mirror",
        "description": "Mandelbrot differenced against a Julia set",
        "pattern1": {"kind": "mandelbrot", "speed": 0.004, "color": "#ffffff"},
        "pattern2": {"enabled": True, "kind": "julia", "speed": 0.003, "color": "#00ffee"},
        "blend": {"mode": "difference", "amount": 0.8},
        "ramp1": "hex", "ramp2": "numbers",
    },
    "voronoi_glass": {
        "name": "Voronoi Glass",
        "description": "Drifting cell borders multiplied with diagonal stripes",
        "pattern1": {"kind": "voronoi", "speed": 0.01, "color": "#aaddff", "glow": True},
        "pattern2": {"enabled": True, "kind": "stripes", "speed": 0.01, "scale": 0.05,
                     "color": "#ffffff"},
        "blend": {"mode": "multiply", "amount": 0.5},
        "ramp1": "blocks", "ramp2": "letters",
    },
    "mosaic_board": {
        "name": "Mosaic Board",
        "description": "Hashed tiles overlaid on a checkerboard",
        "pattern1": {"kind": "mosaic", "speed": 0.01, "scale": 0.05, "color": "#ffdd55"},
        "pattern2": {"enabled": True, "kind": "checkerboard", "speed": 0.005, "scale": 0.1,
                     "color": "#5533ff"},
        "blend": {"mode": "overlay", "amount": 0.7},
        "ramp1": "ascii", "ramp2": "symbols",
    },
    "spiral_galaxy": {
        "name": "Spiral Galaxy",
        "description": "Rotating spiral arms added to ripples, glyphs spin",
        "pattern1": {"kind": "spiral", "speed": 0.01, "color": "#ddccff", "rotation": True},
        "pattern2": {"enabled": True, "kind": "ripples", "speed": 0.02, "color": "#ff66aa"},
        "blend": {"mode": "add", "amount": 0.5},
        "interactive": {"enabled": True, "kind": "distort", "strength": 1.0, "radius": 0.25},
        "ramp1": "braille", "ramp2": "blocks",
    },
}

PRESET_ORDER = [
    "classic_waves", "ripple_pond", "game_of_life", "highlife", "fractal_dive",
    "tunnel_vision", "terrain", "plasma_storm", "julia_mirror",
    "voronoi_glass", "mosaic_board", "spiral_galaxy",
]

_SETTINGS_KEYS = ("pattern1", "pattern2", "blend", "interactive",
                  "ramp1", "ramp2", "custom_ramp1", "custom_ramp2",
                  "cellular_rule")


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def list_presets():
    """Return list of (key, name, description) for all presets."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER if k in PRESETS]


def settings_from_preset(preset, base=None):
    """Build RenderSettings from a preset dict.

    Display geometry (grid, canvas, char size, clock) is carried over
    from `base`; pattern, blend, interaction and ramp settings come from
    the preset or their defaults.
    """
    defaults = RenderSettings()
    data = {}
    if base is not None:
        data = base.model_dump(exclude=set(_SETTINGS_KEYS))
    for key in _SETTINGS_KEYS:
        if key in preset:
            data[key] = preset[key]
        else:
            data[key] = getattr(defaults, key)
    return RenderSettings(**data)
