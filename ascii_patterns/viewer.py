"""
Interactive Pygame Viewer for ASCII Patterns

Draws the PatternRenderer's frames as coloured glyphs, with soft halos
for glowing cells and per-glyph rotation where a pattern asks for it.

Controls:
  SPACE       Pause / Resume
  I           Toggle pointer interaction
  B           Toggle secondary pattern
  R           Reseed cellular board and voronoi swarm
  H           Toggle HUD overlay
  S           Save screenshot (PNG via Pillow)
  T           Dump current frame as text
  1-9         Presets
  Q / ESC     Quit
  Mouse move  Pointer effect (when interaction is on)
  Mouse L     Click ripple
"""

import os
import time

import numpy as np
import pygame

from .export import frame_to_text, render_settings_image, save_png, save_text, screenshots_dir
from .presets import PRESET_ORDER, get_preset
from .renderer import PatternRenderer


HUD_HEIGHT = 24
BG_COLOR = (0, 0, 0)


class Viewer:
    def __init__(self, width=800, height=500, grid=None, start_preset="classic_waves", seed=None):
        self.renderer = PatternRenderer(preset_key=start_preset, seed=seed)
        self.renderer.set_runtime_params(canvas_width=width, canvas_height=height)
        if grid is not None:
            self.renderer.set_runtime_params(grid=grid)
        self.running = True
        self.show_hud = True
        self.fps_history = []
        self.frame = self.renderer.composite()

        # (char, size) -> white glyph surface, tinted per cell
        self._glyph_cache = {}
        self.font = None
        self.hud_font = None

    @property
    def settings(self):
        return self.renderer.settings

    def _glyph(self, ch):
        surf = self._glyph_cache.get(ch)
        if surf is None:
            surf = self.font.render(ch, True, (255, 255, 255))
            self._glyph_cache[ch] = surf
        return surf

    def _draw_frame(self, screen, frame):
        s = self.settings
        xs, ys = frame.cell_centers(s.canvas_width, s.canvas_height)
        sizes, alphas = frame.glow_hints(s.char_size)

        if frame.glow.any():
            halo = pygame.Surface((s.canvas_width, s.canvas_height), pygame.SRCALPHA)
            for row, col in zip(*np.nonzero(frame.glow)):
                radius = max(1, int(sizes[row, col] / 2))
                r, g, b = (int(c) for c in frame.colors[row, col])
                a = int(alphas[row, col] * 60)
                pygame.draw.circle(halo, (r, g, b, a),
                                   (int(xs[row, col]), int(ys[row, col])), radius)
            screen.blit(halo, (0, 0))

        rows, cols = frame.shape
        for row in range(rows):
            for col in range(cols):
                ch = str(frame.chars[row, col])
                if ch == " ":
                    continue
                glyph = self._glyph(ch).copy()
                glyph.fill(tuple(int(c) for c in frame.colors[row, col]),
                           special_flags=pygame.BLEND_RGB_MULT)
                angle = float(frame.rotation[row, col])
                if angle:
                    glyph = pygame.transform.rotate(glyph, -np.degrees(angle))
                rect = glyph.get_rect(center=(int(xs[row, col]), int(ys[row, col])))
                screen.blit(glyph, rect)

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return

        r = self.renderer
        preset = get_preset(r.preset_key) if r.preset_key else None
        name = preset["name"] if preset else "custom"
        p1, p2 = self.settings.pattern1, self.settings.pattern2
        patterns = p1.kind.value
        if p2.enabled:
            patterns += f" {self.settings.blend.mode.value} {p2.kind.value}"
        line = (f"{name}  |  {patterns}  |  t={r.time:.2f}  |  "
                f"{self.settings.grid.cols}x{self.settings.grid.rows}  |  "
                f"clicks: {len(r.state.overlay.effects)}  |  FPS: {fps:.0f}")
        if self.settings.interactive.enabled:
            line += f"  |  {self.settings.interactive.kind.value}"
        if r.paused:
            line = "[PAUSED]  " + line

        padding = 6
        bg_surface = pygame.Surface((self.settings.canvas_width, HUD_HEIGHT), pygame.SRCALPHA)
        bg_surface.fill((0, 0, 0, 140))
        screen.blit(bg_surface, (0, 0))

        text_surface = self.hud_font.render(line, True, (210, 215, 225))
        screen.blit(text_surface, (padding + 4, padding))

    def _save_screenshot(self):
        out_dir = screenshots_dir()
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        key = self.renderer.preset_key or "custom"
        path = os.path.join(out_dir, f"ascii_{key}_{timestamp}.png")

        # Re-render the current frame at full quality, no state advance
        img = render_settings_image(self.renderer.composite(), self.settings)
        save_png(img, path)
        save_png(img, os.path.join(out_dir, "latest.png"))
        print(f"Screenshot saved: {path}")

    def _dump_text(self):
        out_dir = screenshots_dir()
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        key = self.renderer.preset_key or "custom"
        path = os.path.join(out_dir, f"ascii_{key}_{timestamp}.txt")
        save_text(self.renderer.composite(), path)
        print(frame_to_text(self.frame))
        print(f"Text saved: {path}")

    def run(self):
        """Main viewer loop."""
        pygame.init()

        s = self.settings
        screen = pygame.display.set_mode((s.canvas_width, s.canvas_height))
        pygame.display.set_caption("ASCII Patterns")
        clock = pygame.time.Clock()

        self.font = pygame.font.SysFont("menlo,dejavusansmono,couriernew,monospace",
                                        s.char_size)
        self.hud_font = pygame.font.SysFont("menlo", 13)

        while self.running:
            frame_start = time.time()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN:
                    self._handle_keydown(event)
                elif event.type == pygame.MOUSEMOTION:
                    self.renderer.pointer_moved_px(*event.pos)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self.renderer.pointer_pressed_px(*event.pos)

            frame = self.renderer.tick()
            if frame is not None:
                self.frame = frame

            screen.fill(BG_COLOR)
            self._draw_frame(screen, self.frame)

            frame_time = time.time() - frame_start
            self.fps_history.append(frame_time)
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            avg_fps = 1.0 / max(np.mean(self.fps_history), 0.001)

            self._draw_hud(screen, avg_fps)

            pygame.display.flip()
            clock.tick(self.settings.fps_cap or 0)

        pygame.quit()

    def _handle_keydown(self, event):
        key = event.key
        s = self.settings

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_SPACE:
            self.renderer.toggle_pause()

        elif key == pygame.K_i:
            self.renderer.set_runtime_params(interactive=not s.interactive.enabled)

        elif key == pygame.K_b:
            self.renderer.set_runtime_params(pattern2_enabled=not s.pattern2.enabled)

        elif key == pygame.K_r:
            self.renderer.reseed()

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_s:
            self._save_screenshot()

        elif key == pygame.K_t:
            self._dump_text()

        # Preset selection (1-9)
        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            if idx < len(PRESET_ORDER):
                self.renderer.apply_preset(PRESET_ORDER[idx])
                self.frame = self.renderer.composite()
