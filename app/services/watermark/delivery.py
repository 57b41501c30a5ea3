# app/services/watermark/delivery.py

import posixpath
import re
from urllib.parse import quote, urlsplit

from .watermark_config import CACHE_CONTROL, DEFAULT_FILENAME


# -------------------------
# Filenames
# -------------------------

def filename_from_url(url: str) -> str:

    try:
        parts = urlsplit(url)
    except ValueError:
        return DEFAULT_FILENAME

    if not parts.scheme or not parts.netloc:
        return DEFAULT_FILENAME

    name = parts.path.rsplit("/", 1)[-1]

    return name or DEFAULT_FILENAME


def pdf_filename(url: str) -> str:
    name = filename_from_url(url)

    if name.lower().endswith(".pdf"):
        return name[:-4] + ".pdf"

    return f"{name}.pdf"


def png_filename(url: str) -> str:
    stem, _ = posixpath.splitext(filename_from_url(url))
    return f"{stem or DEFAULT_FILENAME}.png"


# -------------------------
# Headers
# -------------------------

_UNSAFE = re.compile(r'[^\x20-\x7e]|["\\]')


def content_disposition(disposition: str, filename: str) -> str:
    fallback = _UNSAFE.sub("_", filename)
    value = f'{disposition}; filename="{fallback}"'

    # Non-ASCII names go through the RFC 5987 parameter
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"

    return value


def build_headers(
    mime_type: str,
    content_length: int,
    disposition: str,
    filename: str
) -> dict[str, str]:

    return {
        "Content-Type": mime_type,
        "Cache-Control": CACHE_CONTROL,
        "Content-Length": str(content_length),
        "Content-Disposition": content_disposition(disposition, filename),
    }
