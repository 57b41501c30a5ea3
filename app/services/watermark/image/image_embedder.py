# app/services/watermark/image/image_embedder.py

import io
from xml.sax.saxutils import escape

import fitz
from PIL import Image, ImageOps

from ..watermark_config import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    IMAGE_FILL,
    IMAGE_FONT_FAMILY,
    IMAGE_METRICS_FONT,
    IMAGE_OPACITY,
    IMAGE_STROKE,
    ROTATION_DEGREES,
    WATERMARK_TEXT,
    watermark_font_size,
    watermark_stroke_width,
)


# --------------------------------
# Decode
# --------------------------------

def _open_image(image_bytes: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(image_bytes))
    img.load()

    # Phone photos carry their rotation in EXIF
    return ImageOps.exif_transpose(img)


def image_dimensions(img: Image.Image) -> tuple[int, int]:
    width, height = img.size
    return width or DEFAULT_WIDTH, height or DEFAULT_HEIGHT


# --------------------------------
# Vector watermark
# --------------------------------

def build_watermark_svg(width: int, height: int, text: str = WATERMARK_TEXT) -> str:
    """
    Centered, rotated text as SVG markup sized to the target image.

    Opacity is applied when the markup is rasterized.
    The text is placed by explicit offsets measured from the font metrics
    rather than text-anchor, so the rotation pivot is the visual center.
    """

    font_size = watermark_font_size(width)
    stroke_width = watermark_stroke_width(font_size)

    metrics = fitz.Font(IMAGE_METRICS_FONT)
    text_width = metrics.text_length(text, fontsize=font_size)

    x = -text_width / 2
    y = (metrics.ascender + metrics.descender) / 2 * font_size

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<g transform="translate({width / 2:.2f},{height / 2:.2f}) '
        f'rotate({ROTATION_DEGREES})">'
        f'<text x="{x:.2f}" y="{y:.2f}" '
        f'font-family="{IMAGE_FONT_FAMILY}" font-size="{font_size}" '
        f'fill="{IMAGE_FILL}" '
        f'stroke="{IMAGE_STROKE}" stroke-width="{stroke_width}">'
        f'{escape(text)}'
        f'</text></g></svg>'
    )


def render_svg(svg: str, width: int, height: int) -> Image.Image:

    with fitz.open(stream=svg.encode("utf-8"), filetype="svg") as doc:
        page = doc[0]

        scale = fitz.Matrix(
            width / page.rect.width,
            height / page.rect.height,
        )

        pix = page.get_pixmap(matrix=scale, alpha=True)

    # MuPDF pixmaps hold premultiplied alpha
    overlay = Image.frombytes(
        "RGBa",
        (pix.width, pix.height),
        pix.samples
    ).convert("RGBA")

    if overlay.size != (width, height):
        overlay = overlay.resize((width, height), Image.Resampling.BICUBIC)

    # MuPDF ignores SVG opacity attributes, so opacity is applied to the raster
    overlay.putalpha(
        overlay.getchannel("A").point(lambda a: round(a * IMAGE_OPACITY))
    )

    return overlay


# --------------------------------
# Encode
# --------------------------------

def _encode_png(img: Image.Image) -> bytes:
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def reencode_png(image_bytes: bytes) -> bytes:
    return _encode_png(_open_image(image_bytes))


def placeholder_png(
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT
) -> bytes:
    return _encode_png(Image.new("RGBA", (width, height), (0, 0, 0, 0)))


# --------------------------------
# MAIN IMAGE WATERMARK ENGINE
# --------------------------------

def embed_image_watermark(image_bytes: bytes) -> bytes:

    img = _open_image(image_bytes)

    if img.mode != "RGBA":
        img = img.convert("RGBA")

    width, height = image_dimensions(img)

    overlay = render_svg(build_watermark_svg(width, height), width, height)

    return _encode_png(Image.alpha_composite(img, overlay))
