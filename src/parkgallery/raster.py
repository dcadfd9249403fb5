# Copyright (c) Syntropy Systems
"""Pillow rendering of a park with its remaining trees."""
from __future__ import annotations

import io
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw, ImageFont

from parkgallery.render_requests import caption_lines

if TYPE_CHECKING:
    from parkgallery.models.render import RenderRequest
    from parkgallery.models.scenario import ParkLayout

BORDER_METERS = 2
BAND_METERS = 2
SHADOW_SCALE = 1.6

BACKGROUND = (128, 128, 128)
DARK_BAND = (136, 136, 136)
LIGHT_BAND = (170, 170, 170)
PARK_GREEN = (144, 238, 144)
TREE_GREEN = (0, 100, 0)
SHADOW = (0, 0, 0, 102)
LABEL = (255, 255, 255)
CAPTION_BACKGROUND = (250, 250, 250)
CAPTION_TEXT = (20, 20, 20)
CAPTION_LINE_HEIGHT = 14
CAPTION_MARGIN = 8


def _skip_label(meter: int) -> bool:
    # Only the 0-10, 20 and 30 m marks are labelled.
    return 10 < meter < 20 or 20 < meter < 30  # noqa: PLR2004


def draw_park(
    layout: ParkLayout,
    removal_ids: list[int],
    size: int = 1360,
) -> Image.Image:
    """Draw the park with every tree in ``removal_ids`` left out.

    The park sits inside a banded scale border; y grows upwards.
    """
    width = float(layout.width)
    height = float(layout.height)
    total_w = width + BORDER_METERS * 2
    total_h = height + BORDER_METERS * 2
    scale = size / max(total_w, total_h)
    canvas_w = round(total_w * scale)
    canvas_h = round(total_h * scale)
    border_px = BORDER_METERS * scale

    image = Image.new("RGB", (canvas_w, canvas_h), BACKGROUND)
    draw = ImageDraw.Draw(image)

    for i in range(int(max(total_w, total_h))):
        color = DARK_BAND if (i // BAND_METERS) % 2 == 0 else LIGHT_BAND
        start = i * scale
        end = start + scale
        draw.rectangle([start, 0, end, border_px], fill=color)
        draw.rectangle([start, canvas_h - border_px, end, canvas_h], fill=color)
        draw.rectangle([0, start, border_px, end], fill=color)
        draw.rectangle([canvas_w - border_px, start, canvas_w, end], fill=color)

    font = ImageFont.load_default()
    for meter in range(0, int(width) + 1, BAND_METERS):
        if _skip_label(meter):
            continue
        text = f"{meter}m"
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        x = (meter + BORDER_METERS) * scale - (right - left) / 2
        y = canvas_h - border_px / 2 - (bottom - top) / 2
        draw.text((x, y), text, fill=LABEL, font=font)

    draw.rectangle(
        [border_px, border_px, border_px + width * scale, border_px + height * scale],
        fill=PARK_GREEN,
    )

    radius = float(layout.tree_radius) * scale
    trees = layout.remaining_trees(removal_ids)
    if radius > 0 and trees:
        shadow_layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
        shadow_draw = ImageDraw.Draw(shadow_layer)
        shadow_radius = radius * SHADOW_SCALE
        centers = [
            ((t.x + BORDER_METERS) * scale, canvas_h - (t.y + BORDER_METERS) * scale)
            for t in trees
        ]
        for cx, cy in centers:
            box = [
                cx - shadow_radius,
                cy - shadow_radius,
                cx + shadow_radius,
                cy + shadow_radius,
            ]
            shadow_draw.ellipse(box, fill=SHADOW)
        image = Image.alpha_composite(image.convert("RGBA"), shadow_layer).convert("RGB")
        draw = ImageDraw.Draw(image)
        for cx, cy in centers:
            draw.ellipse(
                [cx - radius, cy - radius, cx + radius, cy + radius], fill=TREE_GREEN
            )

    return image


def add_caption(image: Image.Image, lines: list[str]) -> Image.Image:
    """Return ``image`` with a light strip below it holding one text line per entry."""
    if not lines:
        return image
    strip_h = CAPTION_MARGIN * 2 + CAPTION_LINE_HEIGHT * len(lines)
    canvas = Image.new("RGB", (image.width, image.height + strip_h), CAPTION_BACKGROUND)
    canvas.paste(image, (0, 0))
    d = ImageDraw.Draw(canvas)
    for i, line in enumerate(lines):
        y = image.height + CAPTION_MARGIN + i * CAPTION_LINE_HEIGHT
        d.text((CAPTION_MARGIN, y), line, fill=CAPTION_TEXT)
    return canvas


def render_request(request: RenderRequest, size: int = 1360) -> Image.Image:
    """Draw a render request with its caption underneath."""
    image = draw_park(request.layout, request.removal_ids, size=size)
    return add_caption(image, caption_lines(request))


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
