# --------------------------------
# Watermark appearance
# --------------------------------
#
# Fixed for the whole service. Callers only choose whether a file is
# watermarked and which format path handles it.

WATERMARK_TEXT = "Websites Arena"

ROTATION_DEGREES = -45


# -------------------------------
# PDF
# -------------------------------

# Base-14 font, always available without a font file
PDF_FONT_NAME = "helv"
PDF_FONT_SIZE = 72
PDF_OPACITY = 0.25
PDF_COLOR = (0.4, 0.4, 0.4)


# -------------------------------
# Image
# -------------------------------

# Canonical social preview size, used when the image reports no size
DEFAULT_WIDTH = 1200
DEFAULT_HEIGHT = 630

FONT_SIZE_RATIO = 0.10
MIN_FONT_SIZE = 40

STROKE_RATIO = 0.03

IMAGE_OPACITY = 0.5
IMAGE_FILL = "#ffffff"
IMAGE_STROKE = "#000000"
IMAGE_FONT_FAMILY = "sans-serif"
# Metrics used to center the SVG text, matches the sans-serif face MuPDF renders
IMAGE_METRICS_FONT = "helv"


def watermark_font_size(width: int) -> int:
    return max(MIN_FONT_SIZE, int(width * FONT_SIZE_RATIO))


def watermark_stroke_width(font_size: int) -> float:
    return max(1.0, round(font_size * STROKE_RATIO, 2))


# -------------------------------
# Delivery
# -------------------------------

CACHE_CONTROL = "public, max-age=31536000, immutable"

DEFAULT_FILENAME = "file"
