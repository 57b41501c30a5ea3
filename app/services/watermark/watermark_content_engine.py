from app.logger import ServiceLogger
from app.schemas.watermark_schemas import FetchedAsset, TransformedAsset

from .delivery import pdf_filename, png_filename
from .document.pdf_embedder import embed_pdf_watermark
from .image.image_embedder import (
    embed_image_watermark,
    placeholder_png,
    reencode_png,
)


# ---------- PDF ----------
def watermark_pdf(asset: FetchedAsset, log: ServiceLogger) -> TransformedAsset:
    filename = pdf_filename(asset.source_url)

    try:
        content = embed_pdf_watermark(asset.content)
        watermarked = True

    except Exception as e:
        # Fail open: the original file is served untouched
        log.log("error", "PDF watermark failed, serving original", {
            "stage": "pdf",
            "format": "pdf",
            "source_url": asset.source_url,
            "error": repr(e),
        })
        content = asset.content
        watermarked = False

    return TransformedAsset(
        content=content,
        mime_type="application/pdf",
        filename=filename,
        disposition="inline",
        watermarked=watermarked,
    )


# ---------- IMAGE ----------
def watermark_image(asset: FetchedAsset, log: ServiceLogger) -> TransformedAsset:
    filename = png_filename(asset.source_url)

    try:
        content = embed_image_watermark(asset.content)
        watermarked = True

    except Exception as e:
        log.log("error", "Image watermark failed, re-encoding original", {
            "stage": "image",
            "format": "png",
            "source_url": asset.source_url,
            "error": repr(e),
        })
        content = _image_fallback(asset, log)
        watermarked = False

    return TransformedAsset(
        content=content,
        mime_type="image/png",
        filename=filename,
        disposition="attachment",
        watermarked=watermarked,
    )


def _image_fallback(asset: FetchedAsset, log: ServiceLogger) -> bytes:
    try:
        return reencode_png(asset.content)

    except Exception as e:
        # Source is not a decodable image at all
        log.log("error", "Image re-encode failed, serving placeholder", {
            "stage": "image",
            "format": "png",
            "source_url": asset.source_url,
            "error": repr(e),
        })
        return placeholder_png()


# ---------- DISPATCHER ----------
def apply_watermark(
    asset: FetchedAsset,
    is_pdf: bool,
    log: ServiceLogger
) -> TransformedAsset:
    if is_pdf:
        return watermark_pdf(asset, log)

    return watermark_image(asset, log)
