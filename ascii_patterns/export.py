"""
Frame Export - Text, PNG and GIF

Text export is plain rows of glyphs. Image export draws every glyph
centred in its cell with Pillow, rotating the glyphs that carry a
rotation hint, then adds a soft bloom built from the per-cell glow
intensities (downsampled grid -> gaussian -> upsample -> additive).

Exports only read a Frame; they never advance the renderer.
"""

import os

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from scipy.ndimage import gaussian_filter, zoom


GLOW_STRENGTH = 0.6
FONT_CANDIDATES = ("DejaVuSansMono.ttf", "DejaVuSansMono-Bold.ttf", "Menlo.ttc",
                   "consola.ttf", "Courier New.ttf")
FORMATS = ("png", "gif", "txt")


def screenshots_dir(base=None):
    """./screenshots (or base/screenshots), created on demand."""
    path = os.path.join(base or os.getcwd(), "screenshots")
    os.makedirs(path, exist_ok=True)
    return path


def frame_to_text(frame):
    """Glyph rows joined by newlines, no colour."""
    return "\n".join(frame.rows_text())


def text_to_matrix(text):
    """Split exported text back into its list of row strings."""
    if not text:
        return []
    return text.split("\n")


def load_font(size):
    """Monospace TrueType font at `size` px, or Pillow's built-in font."""
    size = max(1, int(round(size)))
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _glow_layer(frame, cell_w, cell_h, char_size):
    """Additive (H, W, 3) bloom from per-cell glow intensity and colour."""
    size, alpha = frame.glow_hints(char_size)
    small = frame.colors.astype(np.float32) * alpha[..., np.newaxis]
    # Halo size is in pixels; blur on the cell grid, so convert to cells
    sigma = max(float(size.max()) / (2.0 * max(cell_w, cell_h)), 0.5)
    glow = gaussian_filter(small, [sigma, sigma, 0])
    # Bilinear upsample avoids the blocky look of np.repeat
    rows, cols = frame.shape
    return zoom(glow, (cell_h, cell_w, 1), order=1)[:rows * cell_h, :cols * cell_w]


def render_image(frame, cell_w, cell_h, font=None, background=(0, 0, 0), char_size=None):
    """Rasterize a Frame into a PIL RGB image of cols*cell_w x rows*cell_h.

    Args:
        frame: Frame from PatternRenderer / composite_frame
        cell_w, cell_h: Integer pixel size of one cell
        font: PIL font (default: monospace sized to the cell)
        background: RGB background colour
        char_size: Nominal glyph size for glow geometry (default cell height)
    """
    cell_w = max(1, int(round(cell_w)))
    cell_h = max(1, int(round(cell_h)))
    char_size = cell_h if char_size is None else char_size
    if font is None:
        font = load_font(min(cell_w, cell_h) * 0.9)

    rows, cols = frame.shape
    width, height = cols * cell_w, rows * cell_h
    img = Image.new("RGB", (width, height), tuple(background))
    draw = ImageDraw.Draw(img)

    xs, ys = frame.cell_centers(width, height)
    for row in range(rows):
        for col in range(cols):
            ch = str(frame.chars[row, col])
            if ch == " ":
                continue
            color = tuple(int(c) for c in frame.colors[row, col])
            cx, cy = float(xs[row, col]), float(ys[row, col])
            angle = float(frame.rotation[row, col])
            if angle == 0.0:
                draw.text((cx, cy), ch, fill=color, font=font, anchor="mm")
                continue
            # Rotated glyph: draw into a square tile, rotate, paste through its own mask
            side = 2 * max(cell_w, cell_h)
            tile = Image.new("L", (side, side), 0)
            ImageDraw.Draw(tile).text((side / 2, side / 2), ch, fill=255, font=font, anchor="mm")
            tile = tile.rotate(-np.degrees(angle), resample=Image.Resampling.BILINEAR)
            solid = Image.new("RGB", (side, side), color)
            img.paste(solid, (int(cx - side / 2), int(cy - side / 2)), tile)

    if frame.glow.any():
        glow = _glow_layer(frame, cell_w, cell_h, char_size)
        result = np.asarray(img, dtype=np.float32) + glow * GLOW_STRENGTH
        np.clip(result, 0, 255, out=result)
        img = Image.fromarray(result.astype(np.uint8))
    return img


def render_settings_image(frame, settings, scale=1):
    """render_image with cell size taken from RenderSettings (times scale)."""
    return render_image(frame,
                        settings.cell_width * scale,
                        settings.cell_height * scale,
                        char_size=settings.char_size * scale)


def save_png(image, path):
    image.save(path, format="PNG")
    return path


def save_gif(frames, path, duration_ms=16):
    """Write a looping animated GIF from a list of PIL images."""
    if not frames:
        raise ValueError("save_gif needs at least one frame")
    first, rest = frames[0], list(frames[1:])
    first.save(path, format="GIF", save_all=True, append_images=rest,
               duration=max(1, int(duration_ms)), loop=0)
    return path


def save_text(frame, path):
    with open(path, "w", encoding="utf-8") as f:
        f.write(frame_to_text(frame))
        f.write("\n")
    return path


def export_frame(frame, path, settings=None, fmt=None, scale=1):
    """Save one frame, picking the format from `fmt` or the file extension."""
    fmt = (fmt or os.path.splitext(path)[1].lstrip(".")).lower()
    if fmt == "txt":
        return save_text(frame, path)
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format: {fmt!r} (choose from {', '.join(FORMATS)})")
    if settings is not None:
        img = render_settings_image(frame, settings, scale)
    else:
        img = render_image(frame, 12 * scale, 12 * scale)
    if fmt == "gif":
        return save_gif([img], path)
    return save_png(img, path)
