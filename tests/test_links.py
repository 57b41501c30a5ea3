import pytest

from app.services.watermark.links import (
    preview_kind,
    preview_url,
    watermarked_image_url,
    watermarked_pdf_url,
)


def test_image_link_encodes_source_like_encode_uri_component():
    url = watermarked_image_url("https://cdn.example.com/a b/cover.jpg?x=1&y=(2)")
    assert url == "/api/watermark?url=https%3A%2F%2Fcdn.example.com%2Fa%20b%2Fcover.jpg%3Fx%3D1%26y%3D(2)"


def test_pdf_link_sets_flag():
    assert watermarked_pdf_url("https://cdn.example.com/deck.pdf") == \
        "/api/watermark?url=https%3A%2F%2Fcdn.example.com%2Fdeck.pdf&pdf=true"


def test_empty_source_is_returned_unchanged():
    assert watermarked_image_url("") == ""
    assert watermarked_pdf_url("") == ""


@pytest.mark.parametrize("url, mime, expected", [
    ("https://x.test/file", "application/pdf", "pdf"),
    ("https://x.test/file.pdf", "image/png", "image"),
    ("https://x.test/file", "image/webp; charset=binary", "image"),
    ("https://x.test/Deck.PDF?dl=1", None, "pdf"),
    ("https://x.test/shot.JPEG", None, "image"),
    ("https://x.test/archive.zip", None, None),
    ("https://x.test/archive.zip", "application/zip", None),
    (None, None, None),
])
def test_preview_kind(url, mime, expected):
    assert preview_kind(url, mime) == expected


def test_preview_url_routes_by_kind():
    assert preview_url("https://x.test/d.pdf").endswith("&pdf=true")
    assert preview_url("https://x.test/i.png") == "/api/watermark?url=https%3A%2F%2Fx.test%2Fi.png"
    assert preview_url("https://x.test/a.zip") is None
