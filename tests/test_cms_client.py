import asyncio
import json

import httpx
import pytest

from app.config import Settings
from app.services.cms.asset_urls import file_url_for, image_url_for
from app.schemas.cms_schemas import Product
from app.services.cms.cms_client import CmsClient, average_rating
from conftest import RecordingLogger


SETTINGS = Settings(cms_project_id="abc123", cms_dataset="production")

PRODUCT = {
    "_id": "prod-1",
    "title": "Niche SaaS",
    "slug": {"_type": "slug", "current": "niche-saas"},
    "price": 1500,
    "description": "Profitable micro SaaS",
    "category": "saas",
    "image": {"_type": "image", "asset": {"_ref": "image-Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000-jpg"}},
    "previewImages": [
        {"_key": "k1", "asset": {"_ref": "image-Aa11-800x600-png"}, "alt": "Dashboard"},
    ],
    "techStack": ["Next.js"],
    "previewFileUrl": "https://cdn.sanity.io/files/abc123/production/deck.pdf",
    "previewFileMime": "application/pdf",
}


def run(coro):
    return asyncio.run(coro)


def cms_with(handler, settings=SETTINGS):
    log = RecordingLogger()

    async def call(method, *args):
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await getattr(CmsClient(http, settings, log), method)(*args)

    return call, log


# ---------- Asset URLs ----------

def test_image_url_for_reference():
    url = image_url_for("image-Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000-jpg", "abc123", "production")
    assert url == "https://cdn.sanity.io/images/abc123/production/Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000.jpg"


def test_file_url_for_reference():
    assert file_url_for("file-Aa11-pdf", "abc123", "staging") == \
        "https://cdn.sanity.io/files/abc123/staging/Aa11.pdf"


@pytest.mark.parametrize("ref", ["", "image-abc", "file-Aa11-pdf", "image-x-12-png"])
def test_malformed_image_reference(ref):
    with pytest.raises(ValueError):
        image_url_for(ref, "abc123", "production")


# ---------- Ratings ----------

def test_average_rating_rounds_to_one_decimal():
    assert average_rating([5, 4, 4]).avg_rating == 4.3
    assert average_rating([5, 4]).avg_rating == 4.5
    assert average_rating([]).model_dump() == {"avg_rating": None, "review_count": 0}


# ---------- Queries ----------

def test_get_product_parses_typed_record():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"result": PRODUCT})

    call, _ = cms_with(handler)
    product = run(call("get_product", "niche-saas"))

    assert product.id == "prod-1"
    assert product.slug.current == "niche-saas"
    assert product.preview_images[0].asset.ref == "image-Aa11-800x600-png"
    assert product.tech_stack == ["Next.js"]
    assert product.review_count == 0

    request = seen[0]
    assert request.url.host == "abc123.api.sanity.io"
    assert request.url.path == "/v2024-01-01/data/query/production"
    assert json.loads(request.url.params["$slug"]) == "niche-saas"


def test_query_failure_is_empty_result():
    call, log = cms_with(lambda request: httpx.Response(500))

    assert run(call("list_products")) == []
    assert log.contexts("error")[0]["stage"] == "cms"


def test_unconfigured_project_makes_no_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"result": []})

    call, log = cms_with(handler, Settings())

    assert run(call("list_products")) == []
    assert calls == []
    assert log.records[0][0] == "warning"


def test_malformed_records_are_skipped():
    broken = dict(PRODUCT, _id="prod-2", price=-1)
    call, log = cms_with(lambda request: httpx.Response(200, json={"result": [PRODUCT, broken]}))

    products = run(call("list_products"))

    assert [p.id for p in products] == ["prod-1"]
    assert log.contexts("warning")[0]["id"] == "prod-2"


def test_with_ratings_groups_reviews_in_one_query():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"result": [
            {"_id": "r1", "productId": "prod-1", "rating": 5, "verified": True},
            {"_id": "r2", "productId": "prod-1", "rating": 4, "verified": True},
        ]})

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            cms = CmsClient(http, SETTINGS, RecordingLogger())
            products = [
                Product.model_validate(PRODUCT),
                Product.model_validate(dict(PRODUCT, _id="prod-9")),
            ]
            return await cms.with_ratings(products)

    rated = run(go())

    assert len(calls) == 1
    assert json.loads(calls[0].url.params["$productIds"]) == ["prod-1", "prod-9"]
    assert (rated[0].avg_rating, rated[0].review_count) == (4.5, 2)
    assert (rated[1].avg_rating, rated[1].review_count) == (None, 0)
