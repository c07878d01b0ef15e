"""
ASCII Pattern Renderer - Entry Point

Usage:
    python -m ascii_patterns [preset] [--grid CxR] [--window WxH]
                             [--snap N] [--text] [--gif N] [--scale K]
                             [--seed S]

Examples:
    python -m ascii_patterns
    python -m ascii_patterns plasma_storm
    python -m ascii_patterns game_of_life --grid 120x60
    python -m ascii_patterns julia_mirror --snap 200 --text
    python -m ascii_patterns all --snap 60 --gif 48 --scale 2

Snap mode runs headless (no pygame window): N frames are advanced, then
the last frame is written to ./screenshots/ as PNG (plus .txt with
--text, plus an animated GIF of the following frames with --gif).

Use --list to see all available presets.
"""

import os
import sys

from .config import GridSpec
from .presets import PRESET_ORDER, list_presets


def snap(preset, grid, frames, text=False, gif_frames=0, scale=1, seed=None):
    """Headless mode: run N frames, save the last one, exit."""
    from .export import render_settings_image, save_gif, save_png, save_text, screenshots_dir
    from .renderer import PatternRenderer

    out_dir = screenshots_dir()
    presets_to_snap = [preset] if preset != "all" else PRESET_ORDER

    for pkey in presets_to_snap:
        renderer = PatternRenderer(preset_key=pkey, seed=seed)
        if grid is not None:
            renderer.set_runtime_params(grid=grid)

        print(f"  {pkey}: running {frames} frames...", end="", flush=True)
        frame = renderer.run_frames(frames)
        if frame is None:
            frame = renderer.composite()

        img = render_settings_image(frame, renderer.settings, scale)
        path = os.path.join(out_dir, f"ascii_{pkey}.png")
        save_png(img, path)
        save_png(img, os.path.join(out_dir, "latest.png"))
        print(f" saved: {path}")

        if text:
            txt_path = os.path.join(out_dir, f"ascii_{pkey}.txt")
            save_text(frame, txt_path)
            print(f"  {pkey}: text saved: {txt_path}")

        if gif_frames > 0:
            images = [render_settings_image(renderer.step(), renderer.settings, scale)
                      for _ in range(gif_frames)]
            gif_path = os.path.join(out_dir, f"ascii_{pkey}.gif")
            duration = int(renderer.settings.frame_delta * 1000)
            save_gif(images, gif_path, duration_ms=duration)
            print(f"  {pkey}: gif saved: {gif_path} ({gif_frames} frames)")


def main():
    preset = "classic_waves"
    grid = None
    win_w, win_h = 800, 500
    snap_frames = 0
    text = False
    gif_frames = 0
    scale = 1
    seed = None

    args = sys.argv[1:]
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--grid" and i + 1 < len(args):
            try:
                grid = GridSpec.parse(args[i + 1])
            except ValueError:
                print(f"Invalid grid {args[i + 1]!r}: expected COLSxROWS with positive sizes")
                return
            i += 2
        elif arg == "--window" and i + 1 < len(args):
            parts = args[i + 1].split("x")
            win_w, win_h = int(parts[0]), int(parts[1])
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_frames = int(args[i + 1])
            i += 2
        elif arg == "--gif" and i + 1 < len(args):
            gif_frames = int(args[i + 1])
            i += 2
        elif arg == "--scale" and i + 1 < len(args):
            scale = max(1, int(args[i + 1]))
            i += 2
        elif arg == "--seed" and i + 1 < len(args):
            seed = int(args[i + 1])
            i += 2
        elif arg == "--text":
            text = True
            i += 1
        elif arg == "--list":
            print("\nAvailable presets:\n")
            for key, name, desc in list_presets():
                print(f"    {key:16s} {name:20s} {desc}")
            print()
            return
        elif arg in ("--help", "-h"):
            print(__doc__)
            return
        elif arg in PRESET_ORDER or arg == "all":
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print(f"Use --list to see available presets")
            return

    if snap_frames > 0 or (preset == "all"):
        snap_frames = max(snap_frames, 1)
        size = f"{grid.cols}x{grid.rows}" if grid else "preset grid"
        print(f"Headless snap mode: {preset} @ {size}, {snap_frames} frames")
        snap(preset, grid, snap_frames, text=text, gif_frames=gif_frames,
             scale=scale, seed=seed)
        return

    try:
        from .viewer import Viewer
    except ImportError as exc:
        print(f"Viewer unavailable ({exc}). Install the `viewer` extra or use --snap.")
        return

    print(f"Starting ASCII Pattern Viewer")
    print(f"  Preset: {preset}")
    if grid is not None:
        print(f"  Grid: {grid.cols}x{grid.rows}")
    print(f"  Window: {win_w}x{win_h}")
    print()

    viewer = Viewer(
        width=win_w,
        height=win_h,
        grid=grid,
        start_preset=preset,
        seed=seed,
    )
    viewer.run()


if __name__ == "__main__":
    main()
