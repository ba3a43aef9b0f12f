# core/grid_anchor.py

from PIL import Image, ImageDraw, ImageFont

from .config import (
    GRID_COLUMNS, GRID_ROWS, ANCHOR_WIDTH, ANCHOR_HEIGHT,
    ANCHOR_LINE_COLOR, ANCHOR_LINE_WIDTH, ANCHOR_LABEL_COLOR,
    ANCHOR_FONT_SIZE, ANCHOR_LABEL_OFFSET,
)
from .errors import InvalidGeometry
from .payload import encode_image


def frame_label(index):
    return f"Frame {index + 1}"


def generate_anchor(columns=GRID_COLUMNS, rows=GRID_ROWS, width=ANCHOR_WIDTH, height=ANCHOR_HEIGHT):
    """
    Draws the reference grid handed to the image generator as a spatial guide:
    faint separator lines between the cells and a "Frame N" label in each cell,
    numbered row-major. Transparent background.
    """
    if columns < 1 or rows < 1:
        raise InvalidGeometry(f"Grid needs at least one column and row, got {columns}x{rows}")
    if width <= 0 or height <= 0:
        raise InvalidGeometry(f"Anchor image needs a positive size, got {width}x{height}")

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    cell_w = width / columns
    cell_h = height / rows

    for i in range(1, columns):
        x = i * cell_w
        draw.line([(x, 0), (x, height)], fill=ANCHOR_LINE_COLOR, width=ANCHOR_LINE_WIDTH)
    for i in range(1, rows):
        y = i * cell_h
        draw.line([(0, y), (width, y)], fill=ANCHOR_LINE_COLOR, width=ANCHOR_LINE_WIDTH)

    font = ImageFont.load_default(size=ANCHOR_FONT_SIZE)
    label_dx, label_dy = ANCHOR_LABEL_OFFSET
    for row in range(rows):
        for col in range(columns):
            # Offset is to the text baseline, left aligned
            position = (col * cell_w + label_dx, row * cell_h + label_dy)
            draw.text(position, frame_label(row * columns + col), fill=ANCHOR_LABEL_COLOR, font=font, anchor="ls")

    return image


def generate_anchor_payload(columns=GRID_COLUMNS, rows=GRID_ROWS, width=ANCHOR_WIDTH, height=ANCHOR_HEIGHT):
    """The reference grid as a canonical base64 PNG payload."""
    return encode_image(generate_anchor(columns, rows, width, height), format="PNG")
