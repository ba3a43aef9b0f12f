# core/collaborator.py
#
# Request/response shapes exchanged with the external image generator.
# Nothing here performs network I/O; callers hand the parts to their own client.

from .config import GRID_COLUMNS, GRID_ROWS
from .grid_anchor import generate_anchor_payload
from .payload import normalize

PNG_MIME = "image/png"


def spatial_guide_note(columns=GRID_COLUMNS, rows=GRID_ROWS):
    frame_count = columns * rows
    row_names = ["top", "bottom"] if rows == 2 else [f"row {r + 1}" for r in range(rows)]
    placements = [
        f"{r * columns + 1}-{(r + 1) * columns} are in the {row_names[r]} row"
        for r in range(rows)
    ]
    return (
        f"SPATIAL ANCHOR: Use the attached grid template as a spatial guide for positioning "
        f"the {frame_count} frames. Ensure frame " + " and ".join(placements) + "."
    )


def inline_image_part(payload, mime_type=PNG_MIME):
    return {"inlineData": {"mimeType": mime_type, "data": normalize(payload)}}


def build_generation_parts(instruction, guide_payload=None, columns=GRID_COLUMNS, rows=GRID_ROWS):
    """
    Parts for a generation request: the spatial guide image first, then the caller's
    instruction with the guide note appended. A caller-supplied guide image replaces
    the generated reference grid.
    """
    guide = normalize(guide_payload) if guide_payload else generate_anchor_payload(columns, rows)
    text = f"{instruction}\n{spatial_guide_note(columns, rows)}" if instruction else spatial_guide_note(columns, rows)
    return [inline_image_part(guide), {"text": text}]


def build_refine_parts(image_payload, frame_sequence, instruction=""):
    """Parts for a refine pass: the current sheet plus its frame mapping in wire format."""
    text = f"Current frame mapping: {frame_sequence.to_json()}."
    if instruction:
        text = f"{text}\n{instruction}"
    return [inline_image_part(image_payload), {"text": text}]


def extract_image_payload(parts):
    """
    First inline image in a response's parts, as a canonical payload.
    Returns "" when the response carries no image.
    """
    for part in parts or []:
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            return normalize(inline["data"])
    return ""
