"""
Render Configuration

Typed settings structs handed to the renderer by the host UI. Every
struct is a pydantic model so the host can build it from plain dicts
(presets, CLI flags, UI widgets) and get the same clamping everywhere.

Out-of-range values are clamped or substituted with a safe default
rather than rejected -- a bad slider value must never stop the frame
loop. The one exception is GridSpec: a non-positive grid raises
immediately, before anything is rendered.
"""

import enum
import math
import re
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


WHITE = (255, 255, 255)
MIN_FRAME_DELTA = 0.001
DEFAULT_RULE = "B3/S23"

_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)
_RGB_RE = re.compile(r"^rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$", re.IGNORECASE)
_RULE_RE = re.compile(r"^B[0-8]*/S[0-8]*$", re.IGNORECASE)


class PatternKind(str, enum.Enum):
    """Scalar field generators. cellular and voronoi carry frame state."""
    waves = "waves"
    ripples = "ripples"
    noise = "noise"
    spiral = "spiral"
    checkerboard = "checkerboard"
    stripes = "stripes"
    plasma = "plasma"
    mandelbrot = "mandelbrot"
    julia = "julia"
    cellular = "cellular"
    voronoi = "voronoi"
    tunnel = "tunnel"
    mosaic = "mosaic"


STATEFUL_KINDS = frozenset({PatternKind.cellular, PatternKind.voronoi})


class NoiseVariant(str, enum.Enum):
    simplex = "simplex"
    turbulence = "turbulence"
    ridged = "ridged"


class BlendMode(str, enum.Enum):
    """Blend algebra selector. `normal` is the pass-through branch."""
    add = "add"
    multiply = "multiply"
    overlay = "overlay"
    difference = "difference"
    screen = "screen"
    normal = "normal"


class InteractionKind(str, enum.Enum):
    ripple = "ripple"
    attract = "attract"
    repel = "repel"
    trail = "trail"
    distort = "distort"


def coerce_enum(enum_cls, value, default):
    """Return `value` as a member of `enum_cls`, or `default` if unknown."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        print(f"[ascii] Unknown {enum_cls.__name__} {value!r}, using {default.value!r}")
        return default


def parse_color(value):
    """Parse '#rrggbb', 'rrggbb', 'rgb(r, g, b)' or an (r, g, b) sequence.

    Anything malformed becomes white.
    """
    if isinstance(value, str):
        text = value.strip()
        match = _HEX_RE.match(text)
        if match:
            return tuple(int(part, 16) for part in match.groups())
        match = _RGB_RE.match(text)
        if match:
            return tuple(min(255, int(part)) for part in match.groups())
        return WHITE
    try:
        channels = [float(c) for c in value]
    except (TypeError, ValueError):
        return WHITE
    if len(channels) != 3 or not all(math.isfinite(c) for c in channels):
        return WHITE
    return tuple(int(max(0.0, min(255.0, c))) for c in channels)


def color_to_hex(color):
    return "#{:02x}{:02x}{:02x}".format(*color)


def finite_float(value, default):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def clamp_int(value, default, low=1):
    return max(low, int(round(finite_float(value, default))))


class GridSpec(BaseModel):
    """Character grid dimensions. Non-positive sizes fail fast."""

    model_config = ConfigDict(frozen=True)

    cols: int = Field(default=80, gt=0)
    rows: int = Field(default=50, gt=0)

    @classmethod
    def parse(cls, text):
        """Build from a 'COLSxROWS' string such as '80x50'."""
        cols, rows = str(text).lower().split("x")
        return cls(cols=int(cols), rows=int(rows))

    @property
    def size(self):
        return self.cols * self.rows


class PatternConfig(BaseModel):
    """One pattern slot (primary or secondary)."""

    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = True
    kind: PatternKind = PatternKind.waves
    speed: float = 0.01
    scale: float = 0.05
    color: Tuple[int, int, int] = WHITE
    glow: bool = False
    rotation: bool = False
    noise_variant: NoiseVariant = NoiseVariant.simplex

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value):
        return coerce_enum(PatternKind, value, PatternKind.waves)

    @field_validator("noise_variant", mode="before")
    @classmethod
    def _coerce_variant(cls, value):
        return coerce_enum(NoiseVariant, value, NoiseVariant.simplex)

    @field_validator("speed", mode="before")
    @classmethod
    def _coerce_speed(cls, value):
        return finite_float(value, 0.01)

    @field_validator("scale", mode="before")
    @classmethod
    def _coerce_scale(cls, value):
        return finite_float(value, 0.05)

    @field_validator("color", mode="before")
    @classmethod
    def _coerce_color(cls, value):
        return parse_color(value)


class BlendConfig(BaseModel):
    """Shared parameters for the scalar and colour blend algebras."""

    model_config = ConfigDict(validate_assignment=True)

    mode: BlendMode = BlendMode.multiply
    amount: float = Field(default=0.5, ge=0.0, le=1.0)

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, value):
        return coerce_enum(BlendMode, value, BlendMode.normal)

    @field_validator("amount", mode="before")
    @classmethod
    def _clamp_amount(cls, value):
        return max(0.0, min(1.0, finite_float(value, 0.5)))


class InteractiveConfig(BaseModel):
    """Pointer hover and click-ripple settings."""

    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = False
    kind: InteractionKind = InteractionKind.ripple
    strength: float = 1.0
    radius: float = Field(default=0.2, gt=0.0, le=1.0)
    click_enabled: bool = True

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value):
        return coerce_enum(InteractionKind, value, InteractionKind.ripple)

    @field_validator("strength", mode="before")
    @classmethod
    def _coerce_strength(cls, value):
        return finite_float(value, 1.0)

    @field_validator("radius", mode="before")
    @classmethod
    def _clamp_radius(cls, value):
        return max(1e-3, min(1.0, finite_float(value, 0.2)))


def _default_secondary():
    return PatternConfig(enabled=False, kind=PatternKind.ripples,
                         speed=0.02, scale=0.08, color=(0, 255, 0))


class RenderSettings(BaseModel):
    """Everything the renderer needs for one frame, owned by the host."""

    model_config = ConfigDict(validate_assignment=True)

    grid: GridSpec = Field(default_factory=GridSpec)
    char_size: int = Field(default=12, gt=0)
    canvas_width: int = Field(default=800, gt=0)
    canvas_height: int = Field(default=500, gt=0)
    pattern1: PatternConfig = Field(default_factory=PatternConfig)
    pattern2: PatternConfig = Field(default_factory=_default_secondary)
    blend: BlendConfig = Field(default_factory=BlendConfig)
    interactive: InteractiveConfig = Field(default_factory=InteractiveConfig)
    ramp1: str = "blocks"
    ramp2: str = "blocks"
    custom_ramp1: str = ""
    custom_ramp2: str = ""
    cellular_rule: str = DEFAULT_RULE
    frame_delta: float = Field(default=0.016, gt=0.0)
    speed_multiplier: float = 1.0
    fps_cap: float = Field(default=60.0, ge=0.0)

    @field_validator("char_size", mode="before")
    @classmethod
    def _clamp_char_size(cls, value):
        return clamp_int(value, 12)

    @field_validator("canvas_width", "canvas_height", mode="before")
    @classmethod
    def _clamp_canvas(cls, value, info):
        return clamp_int(value, 800 if info.field_name == "canvas_width" else 500)

    @field_validator("frame_delta", mode="before")
    @classmethod
    def _clamp_frame_delta(cls, value):
        return max(MIN_FRAME_DELTA, finite_float(value, 0.016))

    @field_validator("fps_cap", mode="before")
    @classmethod
    def _clamp_fps_cap(cls, value):
        return max(0.0, finite_float(value, 60.0))

    @field_validator("cellular_rule", mode="before")
    @classmethod
    def _coerce_rule(cls, value):
        text = str(value).replace(" ", "")
        if _RULE_RE.match(text):
            return text.upper()
        print(f"[ascii] Bad cellular rule {value!r}, using {DEFAULT_RULE!r}")
        return DEFAULT_RULE

    @field_validator("speed_multiplier", mode="before")
    @classmethod
    def _coerce_multiplier(cls, value):
        return finite_float(value, 1.0)

    @property
    def cell_width(self):
        return self.canvas_width / self.grid.cols

    @property
    def cell_height(self):
        return self.canvas_height / self.grid.rows
