from fastapi import FastAPI

from app.logger import configure_logging
from app.routes.product_routes import productrouter
from app.routes.watermark_routes import waterrouter

configure_logging()

app = FastAPI(title="Websites Arena")

app.include_router(waterrouter)
app.include_router(productrouter)


@app.get("/api/health")
def health():
    return {"ok": True}
