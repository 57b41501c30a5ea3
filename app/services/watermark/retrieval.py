# app/services/watermark/retrieval.py

import asyncio
from urllib.parse import unquote

import httpx

from app.schemas.watermark_schemas import FetchedAsset
from .errors import (
    AssetTooLargeError,
    FetchNetworkError,
    FetchTimeoutError,
    UpstreamStatusError,
)


# -------------------------
# URL decoding
# -------------------------

def decode_source_url(raw: str) -> str:
    # Malformed escapes are kept as-is, the fetch decides if the URL is usable
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return raw


# -------------------------
# Download
# -------------------------

async def _download(
    client: httpx.AsyncClient,
    source_url: str,
    max_bytes: int
) -> bytes:

    async with client.stream(
        "GET",
        source_url,
        headers={"Accept": "*/*"},
        follow_redirects=True,
    ) as response:

        if not response.is_success:
            raise UpstreamStatusError(
                f"Upstream returned {response.status_code}",
                source_url,
                response.status_code,
            )

        declared = response.headers.get("content-length")

        if declared and declared.isdigit() and int(declared) > max_bytes:
            raise AssetTooLargeError(
                f"Declared size {declared} exceeds {max_bytes}",
                source_url,
                max_bytes,
            )

        buf = bytearray()

        async for chunk in response.aiter_bytes():
            buf.extend(chunk)

            if len(buf) > max_bytes:
                raise AssetTooLargeError(
                    f"Body exceeds {max_bytes} bytes",
                    source_url,
                    max_bytes,
                )

        return bytes(buf)


async def fetch_asset(
    client: httpx.AsyncClient,
    source_url: str,
    timeout: float,
    max_bytes: int
) -> FetchedAsset:
    """
    Reads the whole source into memory.
    The deadline covers connect, headers and body together.
    """

    try:
        content = await asyncio.wait_for(
            _download(client, source_url, max_bytes),
            timeout=timeout,
        )

    except asyncio.TimeoutError as e:
        raise FetchTimeoutError(
            f"No complete response within {timeout}s",
            source_url,
        ) from e

    except httpx.TimeoutException as e:
        raise FetchTimeoutError(str(e) or "Timed out", source_url) from e

    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        raise FetchNetworkError(str(e) or type(e).__name__, source_url) from e

    return FetchedAsset(content=content, source_url=source_url)
