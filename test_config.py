#!/usr/bin/env python3
"""
Test script for render configuration and presets.

Verifies:
1. Clamping and safe substitution of bad values
2. Grid validation fails fast
3. Colour parsing
4. Every preset builds valid settings and renders
"""

import numpy as np

from ascii_patterns.config import (
    BlendConfig, BlendMode, GridSpec, InteractiveConfig, MIN_FRAME_DELTA, NoiseVariant,
    PatternConfig, PatternKind, RenderSettings, color_to_hex, parse_color,
)
from ascii_patterns.presets import (
    PRESET_ORDER, PRESETS, get_preset, list_presets, settings_from_preset,
)
from ascii_patterns.renderer import PatternRenderer


def test_defaults():
    print("Testing defaults...")
    s = RenderSettings()
    assert (s.grid.cols, s.grid.rows) == (80, 50)
    assert (s.canvas_width, s.canvas_height, s.char_size) == (800, 500, 12)
    assert s.cell_width == 10.0 and s.cell_height == 10.0
    assert s.pattern1.kind == PatternKind.waves and s.pattern1.color == (255, 255, 255)
    assert s.pattern2.kind == PatternKind.ripples and not s.pattern2.enabled
    assert s.pattern2.color == (0, 255, 0)
    assert s.blend.mode == BlendMode.multiply and s.blend.amount == 0.5
    assert not s.interactive.enabled and s.interactive.radius == 0.2
    assert s.frame_delta == 0.016
    print("  ✓ Defaults match the classic layout")


def test_clamping():
    print("Testing clamping...")
    assert BlendConfig(amount=5).amount == 1.0
    assert BlendConfig(amount=-1).amount == 0.0
    assert BlendConfig(amount="nan").amount == 0.5
    assert BlendConfig(mode="sparkle").mode == BlendMode.normal
    assert BlendConfig(mode="SCREEN").mode == BlendMode.screen

    cfg = PatternConfig(kind="bogus", speed=float("inf"), scale="x", noise_variant="weird")
    assert cfg.kind == PatternKind.waves
    assert cfg.speed == 0.01 and cfg.scale == 0.05
    assert cfg.noise_variant == NoiseVariant.simplex

    ic = InteractiveConfig(radius=0, strength=None, kind="swirl")
    assert ic.radius == 1e-3 and ic.strength == 1.0
    assert InteractiveConfig(radius=9).radius == 1.0

    # Assignment is validated too
    cfg.color = "rgb(300, 10, 20)"
    assert cfg.color == (255, 10, 20)
    print("  ✓ Out-of-range values clamped or replaced")


def test_geometry_and_clock_clamped():
    print("Testing geometry / clock clamping...")
    s = RenderSettings(char_size=0, canvas_width=-20, canvas_height="tall",
                       frame_delta=0.0, fps_cap=-1)
    assert (s.char_size, s.canvas_width, s.canvas_height) == (1, 1, 500)
    assert s.frame_delta == MIN_FRAME_DELTA and s.fps_cap == 0.0
    assert RenderSettings(frame_delta=float("nan")).frame_delta == 0.016
    assert RenderSettings(char_size=13.6).char_size == 14

    s.canvas_width = 0
    assert s.canvas_width == 1, "assignment clamps too"
    print("  ✓ Canvas, char size and clock never reject a value")


def test_cellular_rule_coercion():
    print("Testing cellular rule setting...")
    assert RenderSettings().cellular_rule == "B3/S23"
    assert RenderSettings(cellular_rule="b36/s23").cellular_rule == "B36/S23"
    assert RenderSettings(cellular_rule="B 2 / S").cellular_rule == "B2/S"
    assert RenderSettings(cellular_rule="life").cellular_rule == "B3/S23"
    assert RenderSettings(cellular_rule="B9/S23").cellular_rule == "B3/S23"
    print("  ✓ B/S strings normalised, junk replaced by Conway")


def test_grid_fail_fast():
    print("Testing grid validation...")
    for bad in ({"cols": 0, "rows": 10}, {"cols": 10, "rows": -1}):
        try:
            GridSpec(**bad)
        except ValueError:
            pass
        else:
            raise AssertionError(f"{bad} should be rejected")
    assert GridSpec.parse("120x40") == GridSpec(cols=120, rows=40)
    assert GridSpec.parse("3X2").size == 6
    for text in ("80", "axb", "0x5"):
        try:
            GridSpec.parse(text)
        except ValueError:
            pass
        else:
            raise AssertionError(f"{text!r} should not parse")
    print("  ✓ Non-positive grids raise before rendering")


def test_colors():
    print("Testing colour parsing...")
    assert parse_color("#00ff00") == (0, 255, 0)
    assert parse_color("FF8000") == (255, 128, 0)
    assert parse_color("rgb(1, 2, 3)") == (1, 2, 3)
    assert parse_color((300, -5, 12.7)) == (255, 0, 12)
    assert parse_color("#12") == (255, 255, 255)
    assert parse_color(None) == (255, 255, 255)
    assert parse_color((1, 2)) == (255, 255, 255)
    assert color_to_hex((255, 128, 0)) == "#ff8000"
    print("  ✓ hex / rgb() / tuples accepted, junk becomes white")


def test_preset_registry():
    print("Testing preset registry...")
    assert set(PRESET_ORDER) == set(PRESETS)
    listed = list_presets()
    assert [k for k, _, _ in listed] == PRESET_ORDER
    assert get_preset("missing") is None
    kinds = set()
    for key in PRESET_ORDER:
        p = get_preset(key)
        assert p["name"] and p["description"], key
        s = settings_from_preset(p)
        kinds.add(s.pattern1.kind)
        if s.pattern2.enabled:
            kinds.add(s.pattern2.kind)
    assert len(kinds) >= 12, f"presets should exercise most kinds: {kinds}"
    print(f"  ✓ {len(PRESET_ORDER)} presets, {len(kinds)} pattern kinds covered")


def test_settings_from_preset_keeps_geometry():
    print("Testing preset geometry carry-over...")
    base = RenderSettings(grid=GridSpec(cols=33, rows=11), canvas_width=660,
                          speed_multiplier=3.0, ramp1="hex")
    s = settings_from_preset(get_preset("julia_mirror"), base=base)
    assert s.grid == base.grid and s.canvas_width == 660 and s.speed_multiplier == 3.0
    assert s.pattern1.kind == PatternKind.mandelbrot
    assert s.pattern2.kind == PatternKind.julia and s.pattern2.enabled
    assert s.blend.mode == BlendMode.difference

    s = settings_from_preset(get_preset("classic_waves"), base=base)
    assert not s.pattern2.enabled, "slots the preset omits reset to defaults"
    assert s.ramp1 == "blocks"
    print("  ✓ Grid and canvas survive preset switches")


def test_every_preset_renders():
    print("Testing every preset renders...")
    for key in PRESET_ORDER:
        r = PatternRenderer(RenderSettings(grid=GridSpec(cols=20, rows=8)), preset_key=key, seed=0)
        frame = r.run_frames(3)
        assert frame.shape == (8, 20), key
        assert frame.values.min() >= 0.0 and frame.values.max() <= 1.0, key
        assert np.all(frame.colors <= 255)
    print(f"  ✓ All {len(PRESET_ORDER)} presets render")


if __name__ == "__main__":
    print("\n=== Testing Configuration and Presets ===\n")

    test_defaults()
    test_clamping()
    test_geometry_and_clock_clamped()
    test_cellular_rule_coercion()
    test_grid_fail_fast()
    test_colors()
    test_preset_registry()
    test_settings_from_preset_keeps_geometry()
    test_every_preset_renders()

    print("\n=== All config tests passed ===\n")
