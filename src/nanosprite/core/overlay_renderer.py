# core/overlay_renderer.py

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageEnhance, ImageOps

from .config import (
    OverlayToggles, CANVAS_HEIGHT_FACTOR,
    BACKDROP_COLOR, BACKDROP_GRID_COLOR, BACKDROP_GRID_SPACING,
    ONION_OPACITY, ONION_BRIGHTNESS, OUTLINE_COLOR, OUTLINE_OFFSETS,
    HITBOX_OUTLINE_COLOR, HITBOX_FILL_COLOR, GUIDE_COLOR,
    ANCHOR_GROUND_COLOR, ANCHOR_VERTICAL_COLOR, ANCHOR_GROUND_FRACTION, LABEL_COLOR,
)
from .frame_compositor import FrameLayout, compose, image_aspect_ratio, render_layout


@dataclass(frozen=True)
class GuideLine:
    """A line in fractional canvas coordinates (0-1 on both axes)."""
    start: Tuple[float, float]
    end: Tuple[float, float]
    color: Tuple[int, int, int, int]
    width: int = 1

    def pixels(self, canvas_width, canvas_height):
        return [
            (self.start[0] * canvas_width, self.start[1] * canvas_height),
            (self.end[0] * canvas_width, self.end[1] * canvas_height),
        ]


@dataclass(frozen=True)
class HitboxBox:
    """Collision box centred on the canvas, in pixels."""
    width: int
    height: int
    outline: Tuple[int, int, int, int] = HITBOX_OUTLINE_COLOR
    fill: Tuple[int, int, int, int] = HITBOX_FILL_COLOR

    def bounds(self, canvas_width, canvas_height):
        left = (canvas_width - self.width) / 2
        top = (canvas_height - self.height) / 2
        return [left, top, left + self.width - 1, top + self.height - 1]


@dataclass(frozen=True)
class OutlineStyle:
    color: Tuple[int, int, int, int] = OUTLINE_COLOR
    offsets: Tuple[Tuple[int, int], ...] = OUTLINE_OFFSETS


@dataclass(frozen=True)
class OverlayPlan:
    """Everything needed to draw one preview frame; recomputed on every frame change."""
    index: int
    frame: FrameLayout
    onion: Optional[FrameLayout]
    onion_index: Optional[int]
    guides: Tuple[GuideLine, ...]
    anchor_lines: Tuple[GuideLine, ...]
    hitbox: Optional[HitboxBox]
    outline: Optional[OutlineStyle]

    @property
    def label(self):
        return f"Frame {self.index + 1:02d}"


def onion_skin_index(current_index, frame_count):
    return (current_index - 1 + frame_count) % frame_count


def onion_skin_layout(frame_sequence, current_index, source_aspect_ratio, display_height):
    """Layout of the preceding pose, drawn as a ghost under the current frame."""
    previous = onion_skin_index(current_index, len(frame_sequence))
    return compose(frame_sequence[previous], source_aspect_ratio, display_height)


def guide_lines():
    return (
        GuideLine((0.0, 0.5), (1.0, 0.5), GUIDE_COLOR),
        GuideLine((0.5, 0.0), (0.5, 1.0), GUIDE_COLOR),
    )


def anchor_lines():
    ground_y = 1.0 - ANCHOR_GROUND_FRACTION
    return (
        GuideLine((0.0, ground_y), (1.0, ground_y), ANCHOR_GROUND_COLOR, width=2),
        GuideLine((0.5, 0.0), (0.5, 1.0), ANCHOR_VERTICAL_COLOR),
    )


def hitbox_box(frame_sequence, current_index, source_aspect_ratio, display_height):
    """Box with the current rect's visual aspect ratio at the display height."""
    layout = compose(frame_sequence[current_index], source_aspect_ratio, display_height)
    width, height = layout.size
    return HitboxBox(width=width, height=height)


def plan_overlays(frame_sequence, current_index, source_aspect_ratio, display_height, toggles=None):
    toggles = toggles or OverlayToggles()
    frame = compose(frame_sequence[current_index], source_aspect_ratio, display_height)

    onion = onion_index = None
    if toggles.onion_skin:
        onion_index = onion_skin_index(current_index, len(frame_sequence))
        onion = onion_skin_layout(frame_sequence, current_index, source_aspect_ratio, display_height)

    return OverlayPlan(
        index=current_index,
        frame=frame,
        onion=onion,
        onion_index=onion_index,
        guides=guide_lines() if toggles.guides else (),
        anchor_lines=anchor_lines() if toggles.anchor_line else (),
        hitbox=hitbox_box(frame_sequence, current_index, source_aspect_ratio, display_height) if toggles.hitbox else None,
        outline=OutlineStyle() if toggles.outline else None,
    )


# --- Raster helpers ---

def ghost_image(frame, opacity=ONION_OPACITY, brightness=ONION_BRIGHTNESS):
    """Desaturated, brightened, faded copy of a frame."""
    frame = frame.convert("RGBA")
    toned = ImageEnhance.Brightness(ImageOps.grayscale(frame).convert("RGB")).enhance(brightness)
    ghost = toned.convert("RGBA")
    ghost.putalpha(frame.getchannel("A").point(lambda a: int(a * opacity)))
    return ghost


def outline_image(frame, style=None):
    """
    Adds a stroke around the opaque silhouette by stamping the alpha mask at each offset.
    The result is padded so the stroke is not clipped.
    :return: (image, pad) where pad is how far the frame moved right/down.
    """
    style = style or OutlineStyle()
    frame = frame.convert("RGBA")
    pad = max(max(abs(dx), abs(dy)) for dx, dy in style.offsets)

    alpha = np.pad(np.array(frame.getchannel("A")), pad)
    stroke = np.zeros_like(alpha)
    for dx, dy in style.offsets:
        stroke = np.maximum(stroke, np.roll(np.roll(alpha, dy, axis=0), dx, axis=1))

    r, g, b, a = style.color
    stroke_alpha = (stroke.astype(np.uint16) * a // 255).astype(np.uint8)
    layer = np.zeros(stroke.shape + (4,), dtype=np.uint8)
    layer[..., 0], layer[..., 1], layer[..., 2] = r, g, b
    layer[..., 3] = stroke_alpha

    outlined = Image.fromarray(layer, "RGBA")
    padded = Image.new("RGBA", outlined.size, (0, 0, 0, 0))
    padded.paste(frame, (pad, pad))
    return Image.alpha_composite(outlined, padded), pad


def _paste_centered(canvas, image):
    x = (canvas.width - image.width) // 2
    y = (canvas.height - image.height) // 2
    # Frames larger than the canvas overflow on every side
    canvas.alpha_composite(image, (max(0, x), max(0, y)), (max(0, -x), max(0, -y)))


def draw_backdrop(size):
    canvas = Image.new("RGBA", size, BACKDROP_COLOR)
    grid = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(grid)
    for x in range(0, size[0], BACKDROP_GRID_SPACING):
        draw.line([(x, 0), (x, size[1])], fill=BACKDROP_GRID_COLOR)
    for y in range(0, size[1], BACKDROP_GRID_SPACING):
        draw.line([(0, y), (size[0], y)], fill=BACKDROP_GRID_COLOR)
    return Image.alpha_composite(canvas, grid)


def render_preview(image, frame_sequence, current_index, display_height, toggles=None, canvas_size=None):
    """
    Composites the current frame and its enabled overlays onto a preview canvas.
    :param image: PIL image of the sprite sheet.
    :param frame_sequence: FrameSequence.
    :param current_index: Frame to show.
    :param display_height: Frame height in pixels.
    :param toggles: OverlayToggles; defaults to guides and anchor line on.
    :param canvas_size: (width, height); defaults to a square 1.4x the display height.
    """
    aspect = image_aspect_ratio(image)
    plan = plan_overlays(frame_sequence, current_index, aspect, display_height, toggles)
    if canvas_size is None:
        side = round(display_height * CANVAS_HEIGHT_FACTOR)
        canvas_size = (side, side)

    canvas = draw_backdrop(canvas_size)

    if plan.onion is not None:
        _paste_centered(canvas, ghost_image(render_layout(image, plan.onion)))

    frame = render_layout(image, plan.frame)
    if plan.outline is not None:
        frame, _ = outline_image(frame, plan.outline)
    _paste_centered(canvas, frame)

    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    if plan.hitbox is not None:
        draw.rectangle(plan.hitbox.bounds(*canvas.size), outline=plan.hitbox.outline, fill=plan.hitbox.fill)
    for line in plan.anchor_lines + plan.guides:
        draw.line(line.pixels(*canvas.size), fill=line.color, width=line.width)
    draw.text((12, 12), plan.label, fill=LABEL_COLOR)

    return Image.alpha_composite(canvas, overlay)
