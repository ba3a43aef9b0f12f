# core/frame_compositor.py

import math
from dataclasses import dataclass
from functools import lru_cache

from PIL import Image, ImageOps

from .errors import InvalidGeometry

# Float slack when snapping the source box to whole pixels
_PIXEL_EPSILON = 1e-6


@dataclass(frozen=True)
class FrameLayout:
    """
    How to render one frame undistorted.
    render_width/render_height: target size in pixels.
    scale_x/scale_y: magnification of the whole sheet so the rect fills the target.
    offset_x/offset_y: pan anchor in percent (0 = left/top edge, 100 = right/bottom edge).
    mirrored: draw the frame flipped horizontally.
    """
    render_width: float
    render_height: float
    scale_x: float
    scale_y: float
    offset_x: float
    offset_y: float
    mirrored: bool

    @property
    def size(self):
        return max(1, round(self.render_width)), max(1, round(self.render_height))

    def source_box(self, image_width, image_height):
        """
        The region of the sheet, in pixels, that ends up visible in the render target.
        The pan anchor positions the visible window within its travel range, so a
        rect covering the full width always starts at the left edge.
        """
        visible_w = 1 / self.scale_x
        visible_h = 1 / self.scale_y
        left = (self.offset_x / 100) * (1 - visible_w)
        top = (self.offset_y / 100) * (1 - visible_h)
        return (
            left * image_width,
            top * image_height,
            (left + visible_w) * image_width,
            (top + visible_h) * image_height,
        )


def _pan_offset(position, extent):
    if extent == 100:
        return 0
    return (position / (100 - extent)) * 100


@lru_cache(maxsize=512)
def compose(rect, source_aspect_ratio, display_height):
    """
    Maps a frame rect onto a render target of the given height.
    :param rect: FrameRect in sheet percentages.
    :param source_aspect_ratio: Sheet width / height in pixels.
    :param display_height: Target height in pixels.
    :return: FrameLayout
    """
    rect.validate()
    if source_aspect_ratio <= 0 or display_height <= 0:
        raise InvalidGeometry(
            f"Aspect ratio and display height must be positive, got {source_aspect_ratio}, {display_height}"
        )

    # The rect's own ratio is in percent space; projecting it onto the sheet's
    # pixel geometry gives the ratio of the cropped region on screen.
    visual_aspect_ratio = (rect.w / rect.h) * source_aspect_ratio

    return FrameLayout(
        render_width=display_height * visual_aspect_ratio,
        render_height=display_height,
        scale_x=100 / rect.w,
        scale_y=100 / rect.h,
        offset_x=_pan_offset(rect.x, rect.w),
        offset_y=_pan_offset(rect.y, rect.h),
        mirrored=bool(rect.flipped),
    )


def image_aspect_ratio(image):
    width, height = image.size
    if width <= 0 or height <= 0:
        raise InvalidGeometry(f"Sheet image has no area: {image.size}")
    return width / height


def render_layout(image, layout):
    """Renders a computed layout from the sheet, with nearest-neighbour scaling so pixel art stays crisp."""
    left, top, right, bottom = layout.source_box(*image.size)
    if not right > left or not bottom > top:
        raise InvalidGeometry(f"Frame covers no area of the sheet: {(left, top, right, bottom)}")
    # Widen to whole pixels; a sub-pixel rect still samples the pixel it falls in
    left, top = math.floor(left + _PIXEL_EPSILON), math.floor(top + _PIXEL_EPSILON)
    right, bottom = math.ceil(right - _PIXEL_EPSILON), math.ceil(bottom - _PIXEL_EPSILON)
    box = (left, top, max(right, left + 1), max(bottom, top + 1))

    # Crop outside the sheet yields transparent pixels for RGBA sources
    frame = image.convert("RGBA").crop(box).resize(layout.size, Image.NEAREST)
    if layout.mirrored:
        frame = ImageOps.mirror(frame)
    return frame


def render_frame(image, rect, display_height):
    """
    Crops, scales and mirrors one frame of the sheet.
    :param image: PIL image of the whole sprite sheet.
    :param rect: FrameRect to render.
    :param display_height: Target height in pixels.
    :return: RGBA PIL image of the frame.
    """
    layout = compose(rect, image_aspect_ratio(image), display_height)
    return render_layout(image, layout)
