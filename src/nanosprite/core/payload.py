# core/payload.py

import base64
import binascii
import io
import logging
import re

from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailure

logger = logging.getLogger(__name__)

TRANSPORT_MARKER = "base64,"
# Standard base64 alphabet plus the URL-safe substitutes '-' and '_'
_OUTSIDE_ALPHABET = re.compile(r"[^A-Za-z0-9+/_-]")
_URL_SAFE = str.maketrans({"-": "+", "_": "/"})


def normalize(payload):
    """
    Canonicalizes a base64 image payload crossing the engine boundary.
    Strips a data-URL style prefix, drops characters outside the alphabet, maps the
    URL-safe alphabet to the standard one and restores '=' padding.
    Empty or None input gives "", which callers treat as "no image".
    """
    if not payload:
        return ""
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("ascii", errors="ignore")

    raw = payload
    if TRANSPORT_MARKER in raw:
        raw = raw.split(TRANSPORT_MARKER, 1)[1]

    clean = _OUTSIDE_ALPHABET.sub("", raw).translate(_URL_SAFE)
    pad_needed = (4 - len(clean) % 4) % 4
    return clean + "=" * pad_needed


def to_data_url(payload, mime_type="image/png"):
    canonical = normalize(payload)
    return f"data:{mime_type};base64,{canonical}" if canonical else ""


def encode_image(image, format="PNG"):
    """Encodes a PIL image as a canonical base64 payload."""
    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return normalize(base64.b64encode(buffer.getvalue()).decode("ascii"))


def decode_image(payload):
    """
    Decodes a payload into a PIL image.
    :raises DecodeFailure: when the payload is empty, not base64, or not an image.
    """
    canonical = normalize(payload)
    if not canonical:
        raise DecodeFailure("No image data in payload")
    try:
        data = base64.b64decode(canonical, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(f"Payload is not valid base64: {e}") from e
    if not data:
        raise DecodeFailure("Payload decodes to no bytes")

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeFailure(f"Payload is not a readable image: {e}") from e
    return image


def try_decode_image(payload):
    """Like decode_image, but degrades to None ("no image available")."""
    try:
        return decode_image(payload)
    except DecodeFailure as e:
        logger.warning("Treating payload as no image: %s", e)
        return None
