"""
PatternRenderer -- Headless frame core

Owns all mutable render state (time accumulator, click effects, the
cellular board, the Voronoi swarm) and turns RenderSettings into Frames.
No display dependency: the pygame viewer, the CLI snap mode and the
export helpers all drive the same object.

Per frame:
    time += frame_delta * speed_multiplier
    click effects decay; stateful sources advance (once per frame)
    composite_frame(): pattern 1 -> [pattern 2, blend values & colours,
    pick ramp] -> [pointer overlay] -> glyphs -> glow / rotation hints

Usage:
    from ascii_patterns.renderer import PatternRenderer
    renderer = PatternRenderer(preset_key="plasma_storm")
    frame = renderer.step()
    print(frame.to_text())
"""

import math
import time as _time
from collections import namedtuple

import numpy as np

from .cellular import CellularSource, step_gate_open
from .compositor import blend_colors, blend_values, use_secondary_ramp
from .config import STATEFUL_KINDS, GridSpec, PatternKind, RenderSettings
from .fields import evaluate_field, normalized_coords
from .interaction import InteractionOverlay
from .presets import get_preset, settings_from_preset
from .ramps import DEFAULT_RAMP, get_ramp, map_to_chars
from .voronoi import VoronoiSwarm


GLOW_GAMMA = 0.7
GLOW_SIZE_FACTOR = 3.0
GLOW_ALPHA_FACTOR = 1.5

Cell = namedtuple("Cell", ["col", "row", "char", "color", "glow", "rotation"])


class Frame:
    """One composited character grid.

    Attributes:
        chars: (rows, cols) array of single-character strings
        colors: (rows, cols, 3) uint8 RGB
        glow: (rows, cols) float glow intensity, 0 where glow is off
        rotation: (rows, cols) float glyph rotation in radians
        values: (rows, cols) float final field value in [0, 1]
    """

    def __init__(self, grid, time, chars, colors, glow, rotation, values):
        self.grid = grid
        self.time = time
        self.chars = chars
        self.colors = colors
        self.glow = glow
        self.rotation = rotation
        self.values = values

    @property
    def shape(self):
        return self.chars.shape

    def rows_text(self):
        return ["".join(row) for row in self.chars]

    def to_text(self):
        return "\n".join(self.rows_text())

    def cells(self):
        """Flat row-major list of Cell tuples."""
        out = []
        for row in range(self.grid.rows):
            for col in range(self.grid.cols):
                out.append(Cell(col, row, str(self.chars[row, col]),
                                tuple(int(c) for c in self.colors[row, col]),
                                float(self.glow[row, col]),
                                float(self.rotation[row, col])))
        return out

    def cell_centers(self, width, height):
        """Pixel centres (x, y) of every cell on a width x height canvas."""
        cols = (np.arange(self.grid.cols) + 0.5) * (width / self.grid.cols)
        rows = (np.arange(self.grid.rows) + 0.5) * (height / self.grid.rows)
        return np.meshgrid(cols, rows)

    def glow_hints(self, char_size):
        """Blur radius and opacity of each cell's halo (0 where no glow)."""
        size = self.glow * char_size * GLOW_SIZE_FACTOR
        alpha = np.minimum(self.glow * GLOW_ALPHA_FACTOR, 1.0)
        return size, alpha


def composite_frame(grid, time, pattern1, pattern2=None, blend=None,
                    interactive=None, overlay=None, sources=None,
                    ramp1=None, ramp2=None):
    """Evaluate every cell of `grid` at `time` and return a Frame.

    Reads (never advances) the stateful sources and the click effects,
    so exports can call it freely against a live renderer.
    """
    nx, ny = normalized_coords(grid)
    ramp1 = DEFAULT_RAMP if ramp1 is None else ramp1
    ramp2 = ramp1 if ramp2 is None else ramp2

    v1 = evaluate_field(nx, ny, time, pattern1, sources)
    value = v1
    color = np.broadcast_to(np.asarray(pattern1.color, dtype=np.float64), v1.shape + (3,))
    glow = v1 if pattern1.glow else np.zeros_like(v1)
    secondary = np.zeros(v1.shape, dtype=bool)
    rotate = np.full(v1.shape, bool(pattern1.rotation))

    if pattern2 is not None and pattern2.enabled and blend is not None:
        v2 = evaluate_field(nx, ny, time, pattern2, sources)
        value = blend_values(v1, v2, blend.mode, blend.amount)
        color = blend_colors(pattern1.color, pattern2.color, blend.mode, v1, v2, blend.amount)
        if pattern2.glow:
            glow = np.maximum(glow, v2)
        secondary = use_secondary_ramp(v1, v2, blend.amount)
        rotate = np.where(secondary, bool(pattern2.rotation), rotate)

    if interactive is not None and interactive.enabled and overlay is not None:
        value = overlay.apply(nx, ny, value, time, interactive)

    value = np.clip(np.nan_to_num(value, nan=0.5), 0.0, 1.0)
    chars = np.where(secondary, map_to_chars(value, ramp2), map_to_chars(value, ramp1))

    intensity = np.where(glow > 0, np.power(np.clip(glow, 0.0, 1.0), GLOW_GAMMA), 0.0)

    cols_idx, rows_idx = np.meshgrid(np.arange(grid.cols), np.arange(grid.rows))
    angle = value * 2 * math.pi + (cols_idx + rows_idx) * 0.1 + time * 2
    rotation = np.where(rotate, angle, 0.0)

    colors = np.floor(np.clip(np.nan_to_num(color, nan=255.0), 0, 255)).astype(np.uint8)
    return Frame(grid, time, chars, colors, intensity, rotation, value)


class RenderState:
    """Mutable state shared across frames, owned by one renderer."""

    def __init__(self, seed=None):
        self.time = 0.0
        self.frame_count = 0
        self.overlay = InteractionOverlay()
        self.cellular = CellularSource(seed=seed)
        self.voronoi = VoronoiSwarm(seed=None if seed is None else seed + 1)


class PatternRenderer:
    """Headless render loop -- zero display dependency.

    Two states: running and paused. While paused, time, click effects
    and sources are frozen and tick() schedules nothing.

    Args:
        settings: RenderSettings (defaults if None)
        preset_key: Optional preset applied on top of settings
        seed: RNG seed for the cellular board and Voronoi swarm
    """

    def __init__(self, settings=None, preset_key=None, seed=None):
        self.settings = settings if settings is not None else RenderSettings()
        self.state = RenderState(seed)
        self.paused = False
        self.preset_key = None
        self._last_tick = None
        self._active_kinds = set()
        self._sync_sources(reseed=True)
        if preset_key is not None:
            self.apply_preset(preset_key)

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    @property
    def time(self):
        return self.state.time

    @property
    def running(self):
        return not self.paused

    @property
    def ramps(self):
        s = self.settings
        return get_ramp(s.ramp1, s.custom_ramp1), get_ramp(s.ramp2, s.custom_ramp2)

    def apply_preset(self, key):
        """Switch to a named preset, keeping grid and canvas geometry."""
        preset = get_preset(key)
        if preset is None:
            raise ValueError(f"Unknown preset: {key!r}")
        self.settings = settings_from_preset(preset, base=self.settings)
        self.preset_key = key
        self.state.overlay.clear()
        self._sync_sources()
        print(f"[ascii] Preset: {key} ({preset['name']})")

    def set_runtime_params(self, **kwargs):
        """Apply UI changes between frames.

        Supported keys:
            preset: Switch to named preset
            grid: GridSpec, "CxR" string or (cols, rows)
            char_size, canvas_width, canvas_height, speed_multiplier, fps_cap
            ramp1, ramp2, custom_ramp1, custom_ramp2
            cellular_rule: B/S notation for the Game of Life board
            blend_mode, blend_amount
            interactive, interactive_kind, interactive_strength,
            interactive_radius, click_enabled
            pattern1_<field>, pattern2_<field>: any PatternConfig field
            reseed: Any truthy value reseeds the stateful sources
        """
        s = self.settings
        try:
            for key, val in kwargs.items():
                if key == "preset":
                    self.apply_preset(val)
                    s = self.settings
                elif key == "grid":
                    s.grid = self._coerce_grid(val)
                elif key in ("char_size", "canvas_width", "canvas_height",
                             "speed_multiplier", "fps_cap", "ramp1", "ramp2",
                             "custom_ramp1", "custom_ramp2", "cellular_rule"):
                    setattr(s, key, val)
                elif key == "blend_mode":
                    s.blend.mode = val
                elif key == "blend_amount":
                    s.blend.amount = val
                elif key == "interactive":
                    s.interactive.enabled = bool(val)
                elif key == "interactive_kind":
                    s.interactive.kind = val
                elif key == "interactive_strength":
                    s.interactive.strength = val
                elif key == "interactive_radius":
                    s.interactive.radius = val
                elif key == "click_enabled":
                    s.interactive.click_enabled = bool(val)
                elif key.startswith("pattern1_") or key.startswith("pattern2_"):
                    slot = s.pattern1 if key.startswith("pattern1_") else s.pattern2
                    field = key[len("pattern1_"):]
                    if field in type(slot).model_fields:
                        setattr(slot, field, val)
                elif key == "reseed":
                    if val:
                        self.reseed()
        finally:
            self._sync_sources()

    def reseed(self):
        self.state.cellular.reseed()
        self.state.voronoi.reseed()
        print("[ascii] Reseeded cellular board and voronoi swarm")

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False
        self._last_tick = None

    def toggle_pause(self):
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused

    def pointer_moved(self, x, y):
        """Pointer moved to normalized (x, y)."""
        self.state.overlay.pointer_moved(x, y, self.settings.interactive)

    def pointer_pressed(self, x, y):
        """Pointer went down at normalized (x, y)."""
        return self.state.overlay.pointer_pressed(x, y, self.settings.interactive)

    def pointer_moved_px(self, px, py):
        self.pointer_moved(px / self.settings.canvas_width, py / self.settings.canvas_height)

    def pointer_pressed_px(self, px, py):
        return self.pointer_pressed(px / self.settings.canvas_width,
                                    py / self.settings.canvas_height)

    def tick(self, now=None):
        """Host per-frame callback with frame-rate limiting.

        Returns a new Frame, or None when paused or when too little wall
        time has passed since the last accepted tick.
        """
        if self.paused:
            return None
        now = _time.perf_counter() if now is None else now
        cap = self.settings.fps_cap
        if cap > 0 and self._last_tick is not None and now - self._last_tick < 1.0 / cap:
            return None
        self._last_tick = now
        return self.step()

    def step(self, dt=None):
        """Advance one frame (unless paused) and return the composited Frame."""
        if not self.paused:
            dt = self.settings.frame_delta if dt is None else dt
            self.state.time += dt * self.settings.speed_multiplier
            self.state.overlay.update(dt)
            self._advance_sources(dt)
            self.state.frame_count += 1
        return self.composite()

    def run_frames(self, n, dt=None):
        """Advance n frames, returning the last Frame."""
        frame = None
        for _ in range(n):
            frame = self.step(dt)
        return frame

    def composite(self, time=None, grid=None):
        """Composite at the current (or given) time without advancing."""
        s = self.settings
        ramp1, ramp2 = self.ramps
        return composite_frame(
            grid or s.grid,
            self.state.time if time is None else time,
            s.pattern1, s.pattern2, s.blend, s.interactive,
            overlay=self.state.overlay, sources=self.state,
            ramp1=ramp1, ramp2=ramp2,
        )

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    @staticmethod
    def _coerce_grid(val):
        if isinstance(val, GridSpec):
            return val
        if isinstance(val, str):
            return GridSpec.parse(val)
        cols, rows = val
        return GridSpec(cols=cols, rows=rows)

    def _active_patterns(self):
        s = self.settings
        slots = [s.pattern1]
        if s.pattern2.enabled:
            slots.append(s.pattern2)
        return slots

    def _sync_sources(self, reseed=False):
        """Reseed a stateful source when its kind becomes active."""
        rule = self.settings.cellular_rule
        if self.state.cellular.rule_str != rule:
            self.state.cellular.set_rule(rule)
            print(f"[ascii] Cellular rule: {rule}")
        kinds = {p.kind for p in self._active_patterns()}
        newly = kinds - self._active_kinds if not reseed else kinds
        # RenderState names each source after its kind
        for kind in newly & STATEFUL_KINDS:
            getattr(self.state, kind.value).reseed()
        self._active_kinds = kinds

    def _advance_sources(self, dt):
        t = self.state.time
        stepped_cellular = False
        advanced_voronoi = False
        for pattern in self._active_patterns():
            if pattern.kind == PatternKind.cellular and not stepped_cellular:
                if step_gate_open(t, pattern.speed):
                    self.state.cellular.step()
                    stepped_cellular = True
            elif pattern.kind == PatternKind.voronoi and not advanced_voronoi:
                self.state.voronoi.advance(dt)
                advanced_voronoi = True
