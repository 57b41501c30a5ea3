# app/services/cms/cms_client.py

import json
from collections import defaultdict
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.config import Settings
from app.logger import ServiceLogger
from app.schemas.cms_schemas import Product, ProductRating, Review


ModelT = TypeVar("ModelT", bound=BaseModel)


# -------------------------
# Queries
# -------------------------

PRODUCT_PROJECTION = """{
  _id, title, slug, price, description, category, image, previewImages,
  features, techStack, checkoutUrl, youtubeUrl,
  "previewFileUrl": previewFile.asset->url,
  "previewFileRef": previewFile.asset._ref,
  "previewFileMime": previewFile.asset->mimeType
}"""

PRODUCTS_QUERY = f'*[_type == "product"] | order(_createdAt desc) {PRODUCT_PROJECTION}'

PRODUCT_BY_SLUG_QUERY = (
    f'*[_type == "product" && slug.current == $slug][0] {PRODUCT_PROJECTION}'
)

VERIFIED_REVIEWS_QUERY = """*[_type == "review" && product._ref in $productIds && verified == true] {
  _id, rating, verified, authorName, comment,
  "productId": product._ref
}"""


def average_rating(ratings: list[int]) -> ProductRating:
    if not ratings:
        return ProductRating(avg_rating=None, review_count=0)

    # One decimal, half up
    avg = int(sum(ratings) * 10 / len(ratings) + 0.5) / 10

    return ProductRating(avg_rating=avg, review_count=len(ratings))


# -------------------------
# Client
# -------------------------

class CmsClient:
    """
    Read-only client for the content store's HTTP query API.

    Failures are logged and surface as empty results, the storefront
    renders without the missing content rather than erroring.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        settings: Settings,
        log: ServiceLogger
    ):
        self._http = http
        self._settings = settings
        self._log = log

    @property
    def query_url(self) -> str:
        s = self._settings
        return (
            f"https://{s.cms_project_id}.api.sanity.io/"
            f"v{s.cms_api_version}/data/query/{s.cms_dataset}"
        )

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:

        if not self._settings.cms_project_id:
            self._log.log("warning", "CMS project id not configured", {
                "stage": "cms",
            })
            return None

        query_params = {"query": query}

        for key, value in (params or {}).items():
            query_params[f"${key}"] = json.dumps(value)

        try:
            r = await self._http.get(self.query_url, params=query_params)
            r.raise_for_status()
            return r.json().get("result")

        except (httpx.HTTPError, ValueError) as e:
            self._log.log("error", "CMS query failed", {
                "stage": "cms",
                "query": query,
                "error": repr(e),
            })
            return None

    def _parse_many(self, rows: Any, model: type[ModelT]) -> list[ModelT]:
        out = []

        for row in rows or []:
            try:
                out.append(model.model_validate(row))
            except ValidationError as e:
                self._log.log("warning", "Skipping malformed CMS record", {
                    "stage": "cms",
                    "model": model.__name__,
                    "id": row.get("_id") if isinstance(row, dict) else None,
                    "error": str(e),
                })

        return out

    # ---------- Products ----------

    async def list_products(self) -> list[Product]:
        return self._parse_many(await self.fetch(PRODUCTS_QUERY), Product)

    async def get_product(self, slug: str) -> Product | None:
        row = await self.fetch(PRODUCT_BY_SLUG_QUERY, {"slug": slug})

        if not row:
            return None

        found = self._parse_many([row], Product)
        return found[0] if found else None

    # ---------- Reviews ----------

    async def verified_reviews(self, product_ids: list[str]) -> list[Review]:
        if not product_ids:
            return []

        rows = await self.fetch(VERIFIED_REVIEWS_QUERY, {"productIds": product_ids})
        return self._parse_many(rows, Review)

    async def get_product_rating(self, product_id: str) -> ProductRating:
        reviews = await self.verified_reviews([product_id])
        return average_rating([r.rating for r in reviews])

    async def with_ratings(self, products: list[Product]) -> list[Product]:
        # One query for all products
        reviews = await self.verified_reviews([p.id for p in products])

        by_product: dict[str, list[int]] = defaultdict(list)

        for review in reviews:
            by_product[review.product_id].append(review.rating)

        rated = []

        for product in products:
            rating = average_rating(by_product.get(product.id, []))
            rated.append(product.model_copy(update=rating.model_dump()))

        return rated
