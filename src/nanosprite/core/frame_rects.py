# core/frame_rects.py

import json
import logging
import math
from dataclasses import dataclass, replace

from .config import GRID_COLUMNS, FRAME_COUNT
from .errors import InvalidGeometry

logger = logging.getLogger(__name__)

RECT_FIELDS = ("x", "y", "w", "h")


def _wire_number(value):
    # Integral percentages go out as JSON integers, e.g. 25 rather than 25.0
    return int(value) if float(value).is_integer() else value


@dataclass(frozen=True)
class FrameRect:
    """
    One frame's sub-rectangle of the sprite sheet.
    x, y, w, h are percentages (0-100) of the sheet's width/height; flipped mirrors the
    frame horizontally. Values outside 0-100 are allowed and crop outside the sheet.
    """
    x: float
    y: float
    w: float
    h: float
    flipped: bool = False

    @property
    def aspect_ratio(self):
        return self.w / self.h

    def validate(self):
        for name in RECT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidGeometry(f"Frame rect {name} must be a finite number, got {value!r}")
        if self.w <= 0 or self.h <= 0:
            raise InvalidGeometry(f"Frame rect needs a positive width and height, got w={self.w}, h={self.h}")
        return self

    def updated(self, **changes):
        unknown = set(changes) - set(RECT_FIELDS) - {"flipped"}
        if unknown:
            raise InvalidGeometry(f"Unknown frame rect fields: {sorted(unknown)}")
        return replace(self, **changes).validate()

    def toggled(self):
        return replace(self, flipped=not self.flipped)

    def to_wire(self):
        wire = {name: _wire_number(getattr(self, name)) for name in RECT_FIELDS}
        wire["flipped"] = bool(self.flipped)
        return wire

    @classmethod
    def from_wire(cls, data):
        if not isinstance(data, dict):
            raise InvalidGeometry(f"Frame rect must be an object, got {type(data).__name__}")
        try:
            values = {name: data[name] for name in RECT_FIELDS}
        except KeyError as e:
            raise InvalidGeometry(f"Frame rect is missing field {e.args[0]!r}") from e
        flipped = data.get("flipped", False)
        if not isinstance(flipped, bool):
            raise InvalidGeometry(f"Frame rect flipped must be true or false, got {flipped!r}")
        return cls(flipped=flipped, **values).validate()


def default_rect(index, columns=GRID_COLUMNS, rows=None, frame_count=FRAME_COUNT):
    """
    The rect of grid cell `index` when the sheet is evenly tiled, row-major.
    :param index: Frame index.
    :param columns: Number of grid columns.
    :param rows: Number of grid rows (derived from frame_count when omitted).
    """
    if rows is None:
        rows = math.ceil(frame_count / columns)
    w = 100 / columns
    h = 100 / rows
    row, col = divmod(index, columns)
    return FrameRect(x=_wire_number(col * w), y=_wire_number(row * h), w=_wire_number(w), h=_wire_number(h))


class FrameSequence:
    """
    Fixed-length, ordered sequence of frame rects. Index i maps row-major onto the grid
    (row = i // columns, col = i % columns).

    Sequences are immutable: every edit returns a new sequence, so a failed edit never
    leaves a half-updated sequence behind.
    """

    def __init__(self, rects, columns=GRID_COLUMNS):
        rects = tuple(rects)
        if not rects:
            raise InvalidGeometry("A frame sequence needs at least one frame")
        for rect in rects:
            if not isinstance(rect, FrameRect):
                raise InvalidGeometry(f"Expected FrameRect, got {type(rect).__name__}")
            rect.validate()
        self._rects = rects
        self.columns = columns

    @classmethod
    def default(cls, frame_count=FRAME_COUNT, columns=GRID_COLUMNS):
        return cls([default_rect(i, columns, frame_count=frame_count) for i in range(frame_count)], columns)

    @property
    def frame_count(self):
        return len(self._rects)

    def __len__(self):
        return len(self._rects)

    def __iter__(self):
        return iter(self._rects)

    def __getitem__(self, index):
        return self._rects[index]

    def __eq__(self, other):
        if not isinstance(other, FrameSequence):
            return NotImplemented
        return self._rects == other._rects

    def __hash__(self):
        return hash(self._rects)

    def __repr__(self):
        return f"FrameSequence({list(self._rects)!r})"

    def grid_cell(self, index):
        """Returns (row, col) of the grid cell an index maps to."""
        self._check_index(index)
        return divmod(index, self.columns)

    def _check_index(self, index):
        if not 0 <= index < len(self._rects):
            raise IndexError(f"Frame index {index} out of range 0..{len(self._rects) - 1}")

    def with_rect(self, index, rect):
        self._check_index(index)
        rects = list(self._rects)
        rects[index] = rect.validate()
        return FrameSequence(rects, self.columns)

    def update(self, index, **changes):
        self._check_index(index)
        return self.with_rect(index, self._rects[index].updated(**changes))

    def toggle_flip(self, index):
        self._check_index(index)
        return self.with_rect(index, self._rects[index].toggled())

    def to_wire(self):
        return [rect.to_wire() for rect in self._rects]

    def to_json(self):
        return json.dumps(self.to_wire())

    @classmethod
    def from_wire(cls, items, frame_count=FRAME_COUNT, columns=GRID_COLUMNS):
        """
        Builds a sequence from the wire array of {x, y, w, h, flipped} objects.
        Missing indices fall back to the default tiling; extra entries are dropped.
        """
        if items is None:
            items = []
        if not isinstance(items, (list, tuple)):
            raise InvalidGeometry(f"Frame rects must be an array, got {type(items).__name__}")

        if len(items) > frame_count:
            logger.warning("Dropping %d frame rects beyond frame count %d", len(items) - frame_count, frame_count)
        elif len(items) < frame_count:
            logger.warning("Only %d of %d frame rects given, using default tiling for the rest", len(items), frame_count)

        rects = []
        for i in range(frame_count):
            if i < len(items) and items[i] is not None:
                rects.append(FrameRect.from_wire(items[i]))
            else:
                rects.append(default_rect(i, columns, frame_count=frame_count))
        return cls(rects, columns)

    @classmethod
    def from_json(cls, text, frame_count=FRAME_COUNT, columns=GRID_COLUMNS):
        try:
            items = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidGeometry(f"Frame rects are not valid JSON: {e}") from e
        return cls.from_wire(items, frame_count, columns)
