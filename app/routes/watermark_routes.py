from collections.abc import AsyncIterator

import httpx
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.logger import ServiceLogger, get_logger
from app.schemas.watermark_schemas import ErrorResponse, WatermarkRequest
from app.services.watermark.delivery import build_headers
from app.services.watermark.errors import (
    AssetTooLargeError,
    FetchError,
    UpstreamStatusError,
)
from app.services.watermark.retrieval import decode_source_url, fetch_asset
from app.services.watermark.watermark_content_engine import apply_watermark


waterrouter = APIRouter(prefix="/api", tags=["Watermark"])


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    # httpx defaults to 5s per phase; the fetch deadline is the only bound
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.fetch_timeout)
    ) as client:
        yield client


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


@waterrouter.get("/watermark")
async def watermark_file(
    url: str | None = Query(default=None),
    pdf: str | None = Query(default=None),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
    log: ServiceLogger = Depends(get_logger),
):
    try:
        if not url:
            return _error("URL parameter required", 400)

        request = WatermarkRequest(
            source_url=decode_source_url(url),
            is_pdf=pdf == "true",
        )
        is_pdf, source_url = request.is_pdf, request.source_url

        # ---------- Retrieval ----------
        try:
            asset = await fetch_asset(
                client,
                source_url,
                timeout=settings.fetch_timeout,
                max_bytes=settings.max_asset_bytes,
            )

        except FetchError as e:
            context = {
                "stage": "fetch",
                "kind": e.kind,
                "format": "pdf" if is_pdf else "image",
                "source_url": source_url,
                "error": str(e),
            }

            if isinstance(e, UpstreamStatusError):
                context["status_code"] = e.status_code

            log.log("error", "Failed to fetch source file", context)

            if isinstance(e, AssetTooLargeError):
                return _error("File too large", 413)

            if isinstance(e, UpstreamStatusError):
                return _error("Failed to fetch file", 400)

            return _error("Failed to fetch file from URL", 400)

        # ---------- Transform ----------
        result = apply_watermark(asset, is_pdf, log)

        log.log("info", "Served watermark request", {
            "stage": "handler",
            "format": "pdf" if is_pdf else "image",
            "source_url": source_url,
            "bytes": len(result.content),
            "watermarked": result.watermarked,
        })

        return Response(
            content=result.content,
            headers=build_headers(
                result.mime_type,
                len(result.content),
                result.disposition,
                result.filename,
            ),
        )

    except Exception as e:
        log.log("error", "Unhandled watermark error", {
            "stage": "handler",
            "error": repr(e),
        })
        return _error("Failed to process file", 500)
