import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.logger import ServiceLogger, get_logger
from app.routes.watermark_routes import get_http_client
from app.schemas.cms_schemas import ImageRef, Product
from app.services.cms.asset_urls import file_url_for, image_url_for
from app.services.cms.cms_client import CmsClient
from app.services.watermark.links import preview_url, watermarked_image_url


productrouter = APIRouter(prefix="/api/products", tags=["Products"])


def get_cms_client(
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
    log: ServiceLogger = Depends(get_logger),
) -> CmsClient:
    return CmsClient(http, settings, log)


def _watermarked_image(
    image: ImageRef,
    product: Product,
    settings: Settings,
    log: ServiceLogger
) -> dict | None:

    try:
        source = image_url_for(
            image.asset.ref,
            settings.cms_project_id,
            settings.cms_dataset,
        )
    except ValueError as e:
        log.log("warning", "Skipping preview image", {
            "stage": "cms",
            "product_id": product.id,
            "error": str(e),
        })
        return None

    return {"url": watermarked_image_url(source), "alt": image.alt}


def _preview_file(product: Product, settings: Settings, log: ServiceLogger) -> str | None:
    source = product.preview_file_url

    # Unresolved asset: build the CDN URL from the reference
    if not source and product.preview_file_ref:
        try:
            source = file_url_for(
                product.preview_file_ref,
                settings.cms_project_id,
                settings.cms_dataset,
            )
        except ValueError as e:
            log.log("warning", "Skipping preview file", {
                "stage": "cms",
                "product_id": product.id,
                "error": str(e),
            })
            return None

    return preview_url(source, product.preview_file_mime)


@productrouter.get("")
async def list_products(
    cms: CmsClient = Depends(get_cms_client),
    settings: Settings = Depends(get_settings),
    log: ServiceLogger = Depends(get_logger),
):
    products = await cms.with_ratings(await cms.list_products())

    return [
        {
            "id": p.id,
            "title": p.title,
            "slug": p.slug.current,
            "price": p.price,
            "category": p.category,
            "image": _watermarked_image(p.image, p, settings, log) if p.image else None,
            "avg_rating": p.avg_rating,
            "review_count": p.review_count,
        }
        for p in products
    ]


@productrouter.get("/{slug}/previews")
async def product_previews(
    slug: str,
    cms: CmsClient = Depends(get_cms_client),
    settings: Settings = Depends(get_settings),
    log: ServiceLogger = Depends(get_logger),
):
    product = await cms.get_product(slug)

    if product is None:
        return JSONResponse({"error": "Product not found"}, status_code=404)

    images = [
        image
        for image in (
            _watermarked_image(ref, product, settings, log)
            for ref in product.preview_images
        )
        if image is not None
    ]

    rating = await cms.get_product_rating(product.id)

    return {
        "id": product.id,
        "title": product.title,
        "images": images,
        "file": _preview_file(product, settings, log),
        "avg_rating": rating.avg_rating,
        "review_count": rating.review_count,
    }
