import pytest
from PIL import Image, ImageDraw

CELL_COLORS = [
    (255, 0, 0, 255),
    (0, 255, 0, 255),
    (0, 0, 255, 255),
    (255, 255, 0, 255),
    (255, 0, 255, 255),
    (0, 255, 255, 255),
    (128, 64, 0, 255),
    (64, 0, 128, 255),
]
CELL_SIZE = 100


class SimulatedTickSource:
    """Tick source driven by hand: each tick() fires the callbacks requested so far."""

    def __init__(self):
        self.pending = {}
        self.cancelled = []
        self._next_handle = 0

    def request_tick(self, callback):
        self._next_handle += 1
        self.pending[self._next_handle] = callback
        return self._next_handle

    def cancel_tick(self, handle):
        self.pending.pop(handle, None)
        self.cancelled.append(handle)

    def tick(self, timestamp):
        callbacks = list(self.pending.values())
        self.pending.clear()
        for callback in callbacks:
            callback(timestamp)

    def run(self, start, end, step):
        for timestamp in range(start, end + 1, step):
            self.tick(timestamp)


class FakeWidget:
    """Stands in for a tkinter widget's after()/after_cancel()."""

    def __init__(self):
        self.scheduled = {}
        self.delays = []
        self._next_id = 0

    def after(self, delay, func):
        self._next_id += 1
        after_id = f"after#{self._next_id}"
        self.scheduled[after_id] = func
        self.delays.append(delay)
        return after_id

    def after_cancel(self, after_id):
        self.scheduled.pop(after_id, None)

    def fire(self):
        callbacks = list(self.scheduled.values())
        self.scheduled.clear()
        for func in callbacks:
            func()


@pytest.fixture
def tick_source():
    return SimulatedTickSource()


@pytest.fixture
def fake_widget():
    return FakeWidget()


@pytest.fixture
def sheet_image():
    """A 400x200 sheet: 4x2 cells of 100x100, each filled with its own colour."""
    image = Image.new("RGBA", (4 * CELL_SIZE, 2 * CELL_SIZE))
    draw = ImageDraw.Draw(image)
    for i, color in enumerate(CELL_COLORS):
        row, col = divmod(i, 4)
        left, top = col * CELL_SIZE, row * CELL_SIZE
        draw.rectangle([left, top, left + CELL_SIZE - 1, top + CELL_SIZE - 1], fill=color)
    return image


@pytest.fixture
def gradient_image():
    """A 400x200 sheet whose red channel increases left to right."""
    row = Image.new("RGBA", (400, 1))
    row.putdata([(x * 255 // 399, 0, 0, 255) for x in range(400)])
    return row.resize((400, 200), Image.NEAREST)
