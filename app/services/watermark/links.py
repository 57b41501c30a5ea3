# app/services/watermark/links.py
#
# Storefront helpers pointing previews at the watermark route.

import posixpath
from typing import Literal
from urllib.parse import quote, urlsplit

WATERMARK_ROUTE = "/api/watermark"

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "!~*'()"


def watermarked_image_url(original_url: str) -> str:
    if not original_url:
        return original_url

    return f"{WATERMARK_ROUTE}?url={quote(original_url, safe=_URI_COMPONENT_SAFE)}"


def watermarked_pdf_url(original_url: str) -> str:
    if not original_url:
        return original_url

    return f"{watermarked_image_url(original_url)}&pdf=true"


def preview_kind(
    url: str | None,
    mime: str | None = None
) -> Literal["pdf", "image"] | None:
    """MIME type wins, the URL extension is the fallback"""

    if mime:
        mime = mime.split(";")[0].strip().lower()

        if mime == "application/pdf":
            return "pdf"
        if mime.startswith("image/"):
            return "image"

    if not url:
        return None

    _, ext = posixpath.splitext(urlsplit(url).path.lower())

    if ext == ".pdf":
        return "pdf"
    if ext in IMAGE_EXTENSIONS:
        return "image"

    return None


def preview_url(url: str | None, mime: str | None = None) -> str | None:
    kind = preview_kind(url, mime)

    if kind == "pdf":
        return watermarked_pdf_url(url)
    if kind == "image":
        return watermarked_image_url(url)

    return None
