#!/usr/bin/env python3
"""
Test script for the render loop.

Verifies:
1. Frame geometry, glyph text and per-cell hints
2. Time accumulation, pause / resume and the fps limiter
3. Stateful sources advance once per frame and reseed on activation
4. Runtime parameter updates and presets
5. Click effects expire through the renderer clock
"""

import numpy as np

from ascii_patterns.compositor import blend_values
from ascii_patterns.config import (
    BlendConfig, GridSpec, InteractiveConfig, PatternConfig, PatternKind, RenderSettings,
)
from ascii_patterns.fields import evaluate_field, normalized_coords
from ascii_patterns.ramps import RAMPS, map_to_chars
from ascii_patterns.renderer import Cell, PatternRenderer, composite_frame


def _renderer(**settings):
    return PatternRenderer(RenderSettings(**settings), seed=1)


def test_frame_geometry():
    print("Testing frame geometry...")
    r = _renderer(grid=GridSpec(cols=8, rows=5))
    frame = r.step()
    assert frame.shape == (5, 8)
    assert frame.colors.shape == (5, 8, 3) and frame.colors.dtype == np.uint8
    assert len(frame.rows_text()) == 5 and all(len(row) == 8 for row in frame.rows_text())
    assert frame.to_text().count("\n") == 4

    cells = frame.cells()
    assert len(cells) == 40
    assert isinstance(cells[0], Cell)
    assert (cells[9].col, cells[9].row) == (1, 1), "row-major order"
    assert cells[0].color == (255, 255, 255), "default primary colour is white"
    print("  ✓ Frame is rows x cols with one glyph per cell")


def test_cell_centers_and_glow_hints():
    print("Testing pixel geometry and glow hints...")
    grid = GridSpec(cols=80, rows=50)
    frame = composite_frame(grid, 0.3, PatternConfig(kind="plasma", glow=True))
    xs, ys = frame.cell_centers(800, 500)
    assert xs[0, 0] == 5.0 and ys[0, 0] == 5.0
    assert xs[0, 79] == 795.0 and ys[49, 0] == 495.0

    size, alpha = frame.glow_hints(12)
    assert np.allclose(size, frame.glow * 36)
    assert np.allclose(alpha, np.minimum(frame.glow * 1.5, 1.0))
    lit = frame.glow > 0
    assert np.allclose(frame.glow[lit], frame.values[lit] ** 0.7)

    plain = composite_frame(grid, 0.3, PatternConfig(kind="plasma"))
    assert not plain.glow.any()
    print("  ✓ Centres at (x + 0.5) * w / cols, glow = v ** 0.7")


def test_rotation_hints():
    print("Testing rotation hints...")
    grid = GridSpec(cols=6, rows=4)
    t = 0.5
    frame = composite_frame(grid, t, PatternConfig(kind="waves", rotation=True))
    cols, rows = np.meshgrid(np.arange(6), np.arange(4))
    expected = frame.values * 2 * np.pi + (cols + rows) * 0.1 + t * 2
    assert np.allclose(frame.rotation, expected)
    assert not composite_frame(grid, t, PatternConfig(kind="waves")).rotation.any()
    print("  ✓ Angle = v * 2pi + (x + y) * 0.1 + t * 2")


def test_blend_uses_secondary_ramp():
    print("Testing secondary ramp selection...")
    grid = GridSpec(cols=10, rows=10)
    p1 = PatternConfig(kind="checkerboard", scale=0.1, color="#ff0000")
    p2 = PatternConfig(kind="checkerboard", scale=0.1, color="#0000ff")
    frame = composite_frame(grid, 0.0, p1, p2, BlendConfig(mode="normal", amount=1.0),
                            ramp1="ab", ramp2="xy")
    # Where both are 1 the strength is 1 -> secondary ramp, value passes through
    both = (frame.values == 1.0)
    assert both.any() and (~both).any()
    assert set(frame.chars[both].tolist()) == {"y"}
    assert set(frame.chars[~both].tolist()) == {"a"}
    assert (frame.colors[both] == [0, 0, 255]).all(), "normal blend lerps to c2"
    assert (frame.colors[~both] == [255, 0, 0]).all()
    print("  ✓ Secondary ramp where v1 * v2 * amount >= 0.5")


def test_disabled_secondary_ignored():
    print("Testing disabled secondary...")
    grid = GridSpec(cols=10, rows=10)
    p1 = PatternConfig(kind="waves")
    p2 = PatternConfig(kind="noise", enabled=False)
    a = composite_frame(grid, 0.0, p1, p2, BlendConfig(), ramp1=RAMPS["ascii"])
    b = composite_frame(grid, 0.0, p1, ramp1=RAMPS["ascii"])
    assert a.rows_text() == b.rows_text()
    print("  ✓ Disabled pattern 2 has no effect")


def test_time_and_pause():
    print("Testing time accumulation and pause...")
    r = _renderer()
    assert r.time == 0.0 and r.running
    r.run_frames(10)
    assert np.isclose(r.time, 10 * 0.016)
    assert r.state.frame_count == 10

    r.set_runtime_params(speed_multiplier=2.0)
    r.step()
    assert np.isclose(r.time, 12 * 0.016)

    assert r.toggle_pause() is True
    t = r.time
    frame = r.step()
    assert r.time == t and frame.time == t, "paused frames do not advance"
    assert r.tick(now=100.0) is None
    r.resume()
    r.step()
    assert r.time > t
    print("  ✓ Time advances by frame_delta * multiplier, frozen while paused")


def test_fps_limiter():
    print("Testing fps limiter...")
    r = _renderer(fps_cap=60)
    assert r.tick(now=10.0) is not None
    assert r.tick(now=10.005) is None, "faster than 60 fps is skipped"
    assert r.tick(now=10.02) is not None
    assert r.state.frame_count == 2

    uncapped = _renderer(fps_cap=0)
    assert uncapped.tick(now=1.0) is not None
    assert uncapped.tick(now=1.0) is not None
    print("  ✓ tick() skips frames above the cap")


def test_cellular_steps_on_gate():
    print("Testing cellular stepping...")
    r = _renderer(pattern1=PatternConfig(kind="cellular", speed=0.01))
    board = r.state.cellular
    assert board.generation == 0
    # speed 0.01: the gate is open while floor(time) % 30 == 0
    r.run_frames(5)
    assert board.generation == 5, "one generation per frame while the gate is open"
    r.step(dt=2.0)
    gen = board.generation
    r.run_frames(3)
    assert board.generation == gen, "gate closed between multiples of 30"
    print("  ✓ At most one generation per frame, gated by time")


def test_voronoi_advances_once_per_frame():
    print("Testing voronoi stepping...")
    r = _renderer(grid=GridSpec(cols=40, rows=25), pattern1=PatternConfig(kind="voronoi"))
    r.step()
    assert r.state.voronoi.generation == 1, "grid size must not change swarm speed"

    # Both slots voronoi: still a single advance per frame, no reseed
    r.set_runtime_params(pattern2_enabled=True, pattern2_kind="voronoi")
    r.step()
    assert r.state.voronoi.generation == 2
    print("  ✓ Swarm advances once per frame")


def test_reseed_on_activation():
    print("Testing reseed on activation...")
    r = _renderer()
    swarm = r.state.voronoi
    before = swarm.positions.copy()
    r.step()
    assert np.array_equal(before, swarm.positions), "inactive swarm stays put"

    r.set_runtime_params(pattern2_enabled=True, pattern2_kind="voronoi")
    assert not np.array_equal(before, swarm.positions), "activating voronoi reseeds"

    board = r.state.cellular
    board.step()
    r.set_runtime_params(pattern1_kind="cellular")
    assert board.generation == 0, "activating cellular reseeds"
    print("  ✓ Stateful sources reseed when their kind becomes active")


def test_runtime_params():
    print("Testing runtime params...")
    r = _renderer()
    r.set_runtime_params(
        grid="20x10", blend_mode="screen", blend_amount=3.0,
        interactive=True, interactive_kind="repel", interactive_radius=0.4,
        pattern1_kind="spiral", pattern1_color="#00ff00", ramp1="hex",
    )
    s = r.settings
    assert s.grid == GridSpec(cols=20, rows=10)
    assert s.blend.mode.value == "screen" and s.blend.amount == 1.0
    assert s.interactive.enabled and s.interactive.kind.value == "repel"
    assert s.interactive.radius == 0.4
    assert s.pattern1.kind.value == "spiral" and s.pattern1.color == (0, 255, 0)
    assert r.ramps[0] == RAMPS["hex"]
    assert r.step().shape == (10, 20)

    try:
        r.set_runtime_params(grid="0x10")
    except ValueError:
        pass
    else:
        raise AssertionError("zero-width grid should fail fast")
    print("  ✓ UI changes land between frames")


def test_presets_apply():
    print("Testing presets through the renderer...")
    r = PatternRenderer(RenderSettings(grid=GridSpec(cols=30, rows=12)),
                        preset_key="plasma_storm", seed=2)
    assert r.preset_key == "plasma_storm"
    assert r.settings.grid == GridSpec(cols=30, rows=12), "grid survives preset switch"
    assert r.settings.pattern2.enabled
    assert r.step().shape == (12, 30)

    try:
        r.apply_preset("not_a_preset")
    except ValueError:
        pass
    else:
        raise AssertionError("unknown preset should raise ValueError")
    print("  ✓ Presets keep grid and reject unknown keys")


def test_clicks_through_renderer():
    print("Testing clicks through the renderer...")
    r = _renderer(frame_delta=0.25, interactive=InteractiveConfig(enabled=True))
    assert r.pointer_pressed_px(400, 250) is not None
    effect = r.state.overlay.effects[0]
    assert (effect.x, effect.y) == (0.5, 0.5)
    r.run_frames(11)
    assert len(r.state.overlay.effects) == 1
    r.step()
    assert r.state.overlay.effects == []

    r.pause()
    r.pointer_pressed(0.2, 0.2)
    r.run_frames(50)
    assert len(r.state.overlay.effects) == 1, "paused clicks do not decay"
    print("  ✓ Click effects live for 3.0 time units")


def test_composite_does_not_advance():
    print("Testing composite purity...")
    r = _renderer(pattern1=PatternConfig(kind="voronoi"),
                  pattern2=PatternConfig(kind="cellular", enabled=True))
    r.step()
    gen = (r.state.voronoi.generation, r.state.cellular.generation)
    a = r.composite()
    b = r.composite(time=r.time)
    assert a.rows_text() == b.rows_text()
    assert (r.state.voronoi.generation, r.state.cellular.generation) == gen
    print("  ✓ composite() only reads state")


def test_overlay_applied_after_blend():
    print("Testing pointer overlay in the frame...")
    r = _renderer(
        grid=GridSpec(cols=10, rows=10),
        pattern1=PatternConfig(kind="waves"),
        pattern2=PatternConfig(kind="plasma", enabled=True),
        blend=BlendConfig(mode="multiply", amount=0.5),
        interactive=InteractiveConfig(enabled=True, kind="attract", strength=1.0, radius=0.3),
        ramp1="ascii", ramp2="ascii",
    )
    r.pointer_moved(0.5, 0.5)
    frame = r.run_frames(3)
    s = r.settings

    nx, ny = normalized_coords(s.grid)
    v1 = evaluate_field(nx, ny, frame.time, s.pattern1)
    v2 = evaluate_field(nx, ny, frame.time, s.pattern2)
    blended = blend_values(v1, v2, s.blend.mode, s.blend.amount)
    dist = np.sqrt((nx - 0.5) ** 2 + (ny - 0.5) ** 2)
    pull = np.where(dist < 0.3, (1 - dist / 0.3) * 0.5, 0.0)
    expected = np.clip(blended + pull, 0.0, 1.0)

    assert pull.any() and not pull.all(), "radius covers part of the grid"
    assert np.allclose(frame.values, expected)
    assert frame.rows_text() == ["".join(row) for row in map_to_chars(expected, RAMPS["ascii"])]

    r.set_runtime_params(interactive=False)
    plain = r.composite()
    assert np.allclose(plain.values, np.clip(blended, 0.0, 1.0)), "no overlay while disabled"
    print("  ✓ Pointer term added to the blended value before glyph lookup")


def test_runtime_params_sync_on_error():
    print("Testing runtime params with bad values...")
    r = _renderer()
    r.set_runtime_params(pattern1_kind="cellular", char_size=0, ramp1="hex",
                         fps_cap=-5, frame_delta=0.0)
    s = r.settings
    assert s.char_size == 1 and s.fps_cap == 0.0 and s.frame_delta > 0.0
    assert s.ramp1 == "hex", "later keys still applied"
    assert PatternKind.cellular in r._active_kinds

    swarm = r.state.voronoi
    before = swarm.positions.copy()
    try:
        r.set_runtime_params(pattern2_enabled=True, pattern2_kind="voronoi", grid="0x10")
    except ValueError:
        pass
    else:
        raise AssertionError("zero-width grid should fail fast")
    assert not np.array_equal(before, swarm.positions), "swarm reseeded despite the error"
    assert PatternKind.voronoi in r._active_kinds
    print("  ✓ Bad geometry clamped; sources still sync when a key raises")


def test_cellular_rule_from_preset():
    print("Testing cellular rule wiring...")
    r = PatternRenderer(RenderSettings(grid=GridSpec(cols=12, rows=6)),
                        preset_key="highlife", seed=3)
    board = r.state.cellular
    assert board.rule_str == "B36/S23" and board.birth == {3, 6}

    r.set_runtime_params(cellular_rule="b2/s")
    assert (board.birth, board.survive) == ({2}, set())

    r.apply_preset("game_of_life")
    assert board.rule_str == "B3/S23", "presets without a rule restore Conway"
    print("  ✓ Rule follows settings and presets")


if __name__ == "__main__":
    print("\n=== Testing Render Loop ===\n")

    test_frame_geometry()
    test_cell_centers_and_glow_hints()
    test_rotation_hints()
    test_blend_uses_secondary_ramp()
    test_disabled_secondary_ignored()
    test_time_and_pause()
    test_fps_limiter()
    test_cellular_steps_on_gate()
    test_voronoi_advances_once_per_frame()
    test_reseed_on_activation()
    test_runtime_params()
    test_presets_apply()
    test_clicks_through_renderer()
    test_composite_does_not_advance()
    test_overlay_applied_after_blend()
    test_runtime_params_sync_on_error()
    test_cellular_rule_from_preset()

    print("\n=== All render loop tests passed ===\n")
