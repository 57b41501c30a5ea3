# app/services/watermark/document/pdf_embedder.py

import fitz

from ..watermark_config import (
    PDF_COLOR,
    PDF_FONT_NAME,
    PDF_FONT_SIZE,
    PDF_OPACITY,
    ROTATION_DEGREES,
    WATERMARK_TEXT,
)


# -------------------------
# Layout
# -------------------------

def text_extent(font: fitz.Font, text: str, fontsize: float) -> tuple[float, float]:
    """Width and glyph height of a single line, from the font's own metrics"""

    width = font.text_length(text, fontsize=fontsize)
    height = (font.ascender - font.descender) * fontsize

    return width, height


def watermark_origin(
    page_rect: fitz.Rect,
    font: fitz.Font,
    text: str,
    fontsize: float
) -> tuple[fitz.Point, fitz.Point]:
    """
    Returns (baseline start, page center).

    The baseline start puts the center of the text box on the page center,
    so rotating around the page center keeps the rotated text centered.
    """

    width, _ = text_extent(font, text, fontsize)

    center = fitz.Point(
        page_rect.x0 + page_rect.width / 2,
        page_rect.y0 + page_rect.height / 2,
    )

    # y grows downwards: glyphs span baseline - ascender .. baseline - descender
    mid_offset = (font.ascender + font.descender) / 2 * fontsize

    origin = fitz.Point(
        center.x - width / 2,
        center.y + mid_offset,
    )

    return origin, center


# -------------------------
# PDF
# -------------------------

def embed_pdf_watermark(pdf_bytes: bytes) -> bytes:

    font = fitz.Font(PDF_FONT_NAME)

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:

        if doc.needs_pass:
            raise ValueError("Encrypted PDF")

        if doc.page_count == 0:
            raise ValueError("PDF has no pages")

        for page in doc:

            # insert_text draws in unrotated space, /Rotate turns it clockwise on display
            unrotated = page.rect * page.derotation_matrix
            angle = ROTATION_DEGREES + page.rotation

            origin, center = watermark_origin(
                unrotated,
                font,
                WATERMARK_TEXT,
                PDF_FONT_SIZE,
            )

            page.insert_text(
                origin,
                WATERMARK_TEXT,
                fontsize=PDF_FONT_SIZE,
                fontname=PDF_FONT_NAME,
                color=PDF_COLOR,
                fill=PDF_COLOR,
                fill_opacity=PDF_OPACITY,
                stroke_opacity=PDF_OPACITY,
                morph=(center, fitz.Matrix(angle)),
                overlay=True,
            )

        # Keep the trailer /ID so equal input gives equal output
        return doc.tobytes(garbage=1, deflate=True, no_new_id=True)
