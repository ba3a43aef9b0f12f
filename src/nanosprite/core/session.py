# core/session.py

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Optional

from PIL import Image

from .animation_scheduler import AnimationCursor, AnimationScheduler
from .config import FRAME_COUNT, GRID_COLUMNS, PreviewSettings
from .errors import DecodeFailure, InvalidGeometry
from .frame_compositor import compose, image_aspect_ratio, render_frame
from .frame_rects import FrameSequence
from .overlay_renderer import plan_overlays, render_preview
from .payload import decode_image, encode_image

logger = logging.getLogger(__name__)


@dataclass
class DisplayMetadata:
    label: str = ""
    source: str = "generated"


@dataclass
class SpriteSheet:
    image: Image.Image
    frame_sequence: FrameSequence
    metadata: DisplayMetadata = field(default_factory=DisplayMetadata)
    created_at: float = field(default_factory=time.time)

    @property
    def aspect_ratio(self):
        return image_aspect_ratio(self.image)

    @property
    def payload(self):
        return encode_image(self.image)


class SpriteSheetSession:
    """
    Owns the active sprite sheet, the animation cursor and the preview settings.
    All edits go through the methods below; each validates first and only then swaps
    in the new state, so a rejected edit leaves the previous sheet and cursor intact.
    """

    def __init__(self, tick_source=None, settings=None, edit_bounds=None,
                 frame_count=FRAME_COUNT, columns=GRID_COLUMNS):
        self.settings = settings or PreviewSettings()
        self.edit_bounds = edit_bounds
        self.frame_count = frame_count
        self.columns = columns
        self.sheet: Optional[SpriteSheet] = None
        self.active_frame_index = 0
        self.cursor = AnimationCursor()
        self.scheduler = AnimationScheduler(tick_source, self.cursor) if tick_source is not None else None
        self.listeners = []

    # --- Sheet replacement ---

    def load_sheet(self, image, frame_sequence=None, label="", source="generated"):
        """Replaces image and frame rects together. Rects default to the even grid tiling."""
        if frame_sequence is None:
            frame_sequence = FrameSequence.default(self.frame_count, self.columns)
        elif len(frame_sequence) != self.frame_count:
            raise InvalidGeometry(f"Expected {self.frame_count} frame rects, got {len(frame_sequence)}")
        image_aspect_ratio(image)

        self.sheet = SpriteSheet(image, frame_sequence, DisplayMetadata(label, source))
        self.active_frame_index = 0
        self._reset_cursor()
        logger.info("Loaded %s sheet %sx%s", source, *image.size)
        self._notify()
        return self.sheet

    def import_sheet(self, source):
        """
        Loads a sheet from a file path or an image payload (data URL or bare base64).
        :raises DecodeFailure: if the source holds no readable image.
        """
        if isinstance(source, os.PathLike) and not os.path.isfile(source):
            raise DecodeFailure(f"Sprite sheet file not found: {os.fspath(source)}")
        if isinstance(source, (str, os.PathLike)) and os.path.isfile(source):
            try:
                image = Image.open(source)
                image.load()
            except OSError as e:
                raise DecodeFailure(f"Could not read sheet image {source}: {e}") from e
        else:
            image = decode_image(source)
        return self.load_sheet(image, label="Imported", source="imported")

    def apply_refined(self, payload):
        """Swaps in a refined image while keeping the current frame rects."""
        sheet = self._require_sheet()
        image = decode_image(payload)
        return self.load_sheet(image, sheet.frame_sequence, sheet.metadata.label, source="refined")

    def close(self):
        if self.scheduler is not None:
            self.scheduler.stop()

    # --- Per-frame edits ---

    def select_frame(self, index):
        sheet = self._require_sheet()
        if not 0 <= index < len(sheet.frame_sequence):
            raise IndexError(f"Frame index {index} out of range")
        self.active_frame_index = index

    def update_frame_rect(self, index=None, **changes):
        sheet = self._require_sheet()
        index = self.active_frame_index if index is None else index
        if self.edit_bounds is not None:
            changes = self.edit_bounds.apply(changes)
        sheet.frame_sequence = sheet.frame_sequence.update(index, **changes)
        self._notify()
        return sheet.frame_sequence[index]

    def toggle_flip(self, index=None):
        sheet = self._require_sheet()
        index = self.active_frame_index if index is None else index
        sheet.frame_sequence = sheet.frame_sequence.toggle_flip(index)
        self._notify()
        return sheet.frame_sequence[index]

    def replace_frame_sequence(self, frame_sequence):
        sheet = self._require_sheet()
        if len(frame_sequence) != len(sheet.frame_sequence):
            raise InvalidGeometry(f"Expected {len(sheet.frame_sequence)} frame rects, got {len(frame_sequence)}")
        sheet.frame_sequence = frame_sequence
        self._notify()

    # --- Playback ---

    @property
    def current_index(self):
        return self.cursor.current_index

    def start(self, on_advance=None):
        sheet = self._require_sheet()
        if self.scheduler is None:
            raise RuntimeError("Session has no tick source; playback is unavailable")

        def advance(index):
            self._notify()
            if on_advance is not None:
                on_advance(index)

        self.scheduler.start(self.settings.fps, len(sheet.frame_sequence), advance)

    def stop(self):
        if self.scheduler is not None:
            self.scheduler.stop()

    def seek(self, index):
        """Shows frame `index` (wrapping), e.g. for stepping while paused."""
        sheet = self._require_sheet()
        self.cursor.current_index = index % len(sheet.frame_sequence)
        self._notify()

    def set_fps(self, fps):
        fps = self.settings.set_fps(fps)
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.set_rate(fps)
        return fps

    def set_zoom(self, zoom):
        zoom = self.settings.set_zoom(zoom)
        self._notify()
        return zoom

    def set_overlay(self, name, enabled):
        self.settings.set_overlay(name, enabled)
        self._notify()

    # --- Rendering ---

    def frame_layout(self, index=None):
        sheet = self._require_sheet()
        index = self.current_index if index is None else index
        return compose(sheet.frame_sequence[index], sheet.aspect_ratio, self.settings.display_height)

    def overlay_plan(self):
        sheet = self._require_sheet()
        return plan_overlays(sheet.frame_sequence, self.current_index, sheet.aspect_ratio,
                             self.settings.display_height, self.settings.overlays)

    def render_frame(self, index=None):
        sheet = self._require_sheet()
        index = self.current_index if index is None else index
        return render_frame(sheet.image, sheet.frame_sequence[index], self.settings.display_height)

    def render_preview(self):
        sheet = self._require_sheet()
        side = self.settings.canvas_height
        return render_preview(sheet.image, sheet.frame_sequence, self.current_index,
                              self.settings.display_height, self.settings.overlays, (side, side))

    # --- Internals ---

    def add_listener(self, callback):
        """Registers callback(session), called whenever the preview needs repainting."""
        self.listeners.append(callback)

    def _notify(self):
        for callback in list(self.listeners):
            callback(self)

    def _reset_cursor(self):
        if self.scheduler is not None:
            self.scheduler.reset(len(self.sheet.frame_sequence))
        else:
            self.cursor.reset()

    def _require_sheet(self):
        if self.sheet is None:
            raise RuntimeError("No sprite sheet loaded")
        return self.sheet
