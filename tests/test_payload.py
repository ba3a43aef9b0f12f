import base64

import pytest
from PIL import Image

from nanosprite.core.errors import DecodeFailure
from nanosprite.core.payload import decode_image, encode_image, normalize, to_data_url, try_decode_image

SAMPLES = [
    "",
    "a",
    "QQ",
    "QUI",
    "QUJD",
    "====",
    "QUJD=",
    "data:image/png;base64,QUJD",
    "data:x;base64,--__",
    "ab-_cd\n ef==",
    "%%%",
    "base64,base64,QQ",
]


def test_empty_input_gives_empty_payload():
    assert normalize("") == ""
    assert normalize(None) == ""


def test_strips_transport_prefix():
    assert normalize("data:image/png;base64,QUJD") == "QUJD"


def test_maps_url_safe_alphabet():
    assert normalize("ab-_") == "ab+/"


@pytest.mark.parametrize("raw,expected", [("QUI", "QUI="), ("QQ", "QQ=="), ("QUJD", "QUJD"), ("QUJD=", "QUJD")])
def test_restores_padding(raw, expected):
    assert normalize(raw) == expected


def test_drops_characters_outside_alphabet():
    assert normalize("QU\nJD \t") == "QUJD"
    assert normalize("%%%") == ""


def test_accepts_bytes():
    assert normalize(b"data:image/png;base64,QQ") == "QQ=="


@pytest.mark.parametrize("payload", SAMPLES)
def test_normalize_is_idempotent(payload):
    once = normalize(payload)
    assert normalize(once) == once
    assert len(once) % 4 == 0


def test_encode_then_decode_keeps_pixels():
    image = Image.new("RGBA", (3, 2), (10, 20, 30, 255))
    image.putpixel((2, 1), (0, 0, 0, 0))
    payload = encode_image(image)
    assert normalize(payload) == payload
    assert decode_image(payload).convert("RGBA").tobytes() == image.tobytes()


def test_decode_accepts_url_safe_data_url():
    image = Image.new("RGB", (2, 2), (255, 0, 0))
    urlsafe = encode_image(image).replace("+", "-").replace("/", "_").rstrip("=")
    decoded = decode_image(f"data:image/png;base64,{urlsafe}")
    assert decoded.size == (2, 2)


@pytest.mark.parametrize("payload", ["", None, "%%%", "a", base64.b64encode(b"not an image").decode()])
def test_decode_failures(payload):
    with pytest.raises(DecodeFailure):
        decode_image(payload)
    assert try_decode_image(payload) is None


def test_to_data_url():
    assert to_data_url("QQ") == "data:image/png;base64,QQ=="
    assert to_data_url("") == ""
