# core/config.py

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# --- Grid topology ---
# Shared by the default frame tiling and the reference grid image.
GRID_COLUMNS = 4
GRID_ROWS = 2
FRAME_COUNT = GRID_COLUMNS * GRID_ROWS

# --- Preview ---
BASE_PREVIEW_HEIGHT = 280
CANVAS_HEIGHT_FACTOR = 1.4
DEFAULT_FPS = 12
FPS_RANGE = (1, 60)
DEFAULT_ZOOM = 1.2
ZOOM_RANGE = (0.5, 3.0)
# Roughly one display refresh at 60 Hz.
TICK_INTERVAL_MS = 16

# --- Overlay visuals ---
BACKDROP_COLOR = (15, 23, 42, 204)
BACKDROP_GRID_COLOR = (79, 70, 229, 51)
BACKDROP_GRID_SPACING = 40
ONION_OPACITY = 0.2
ONION_BRIGHTNESS = 2.0
OUTLINE_COLOR = (99, 102, 241, 255)
OUTLINE_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))
HITBOX_OUTLINE_COLOR = (239, 68, 68, 128)
HITBOX_FILL_COLOR = (239, 68, 68, 26)
GUIDE_COLOR = (255, 255, 255, 13)
ANCHOR_GROUND_COLOR = (16, 185, 129, 102)
ANCHOR_VERTICAL_COLOR = (99, 102, 241, 102)
# Ground line sits this fraction of the canvas height above the bottom edge.
ANCHOR_GROUND_FRACTION = 0.2
LABEL_COLOR = (129, 140, 248, 255)

# --- Reference grid image ---
ANCHOR_WIDTH = 1024
ANCHOR_HEIGHT = 576
ANCHOR_LINE_COLOR = (200, 200, 200, 77)
ANCHOR_LINE_WIDTH = 2
ANCHOR_LABEL_COLOR = (150, 150, 150, 128)
ANCHOR_FONT_SIZE = 24
ANCHOR_LABEL_OFFSET = (20, 40)


def clamp(value, low, high):
    return max(low, min(high, value))


@dataclass
class EditBounds:
    """
    Clamp ranges the editing surface applies to per-frame rect edits.
    Each field is a (low, high) pair in percent; None leaves that field unclamped.
    """
    x: tuple = None
    y: tuple = None
    w: tuple = None
    h: tuple = None

    @classmethod
    def slider_defaults(cls):
        """The per-frame slider ranges of the preview editor (one 4x2 cell at most)."""
        return cls(x=(0, 75), y=(0, 50), w=(5, 25), h=(10, 50))

    def apply(self, changes):
        """
        Clamp a dict of rect field changes.
        :param changes: Mapping of field name to new value.
        :return: A new dict with bounded fields clamped.
        """
        bounded = dict(changes)
        for name in ("x", "y", "w", "h"):
            limits = getattr(self, name)
            if limits is not None and name in bounded:
                bounded[name] = clamp(bounded[name], *limits)
        return bounded


@dataclass
class OverlayToggles:
    onion_skin: bool = False
    guides: bool = True
    anchor_line: bool = True
    outline: bool = False
    hitbox: bool = False

    def names(self):
        return ("onion_skin", "guides", "anchor_line", "outline", "hitbox")


@dataclass
class PreviewSettings:
    """Display parameters accepted by the preview: fps, zoom and overlay toggles."""
    fps: float = DEFAULT_FPS
    zoom: float = DEFAULT_ZOOM
    overlays: OverlayToggles = field(default_factory=OverlayToggles)

    @property
    def display_height(self):
        return BASE_PREVIEW_HEIGHT * self.zoom

    @property
    def canvas_height(self):
        return round(self.display_height * CANVAS_HEIGHT_FACTOR)

    def set_fps(self, fps):
        clamped = clamp(fps, *FPS_RANGE)
        if clamped != fps:
            logger.warning("fps %s outside %s, using %s", fps, FPS_RANGE, clamped)
        self.fps = clamped
        return clamped

    def set_zoom(self, zoom):
        clamped = clamp(zoom, *ZOOM_RANGE)
        if clamped != zoom:
            logger.warning("zoom %s outside %s, using %s", zoom, ZOOM_RANGE, clamped)
        self.zoom = clamped
        return clamped

    def set_overlay(self, name, enabled):
        if name not in self.overlays.names():
            raise KeyError(f"Unknown overlay: {name}")
        setattr(self.overlays, name, bool(enabled))
