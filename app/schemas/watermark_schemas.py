from pydantic import BaseModel, ConfigDict
from typing import Literal


# ---------- Request ----------
class WatermarkRequest(BaseModel):
    source_url: str
    is_pdf: bool = False


# ---------- Pipeline values ----------
class FetchedAsset(BaseModel):
    content: bytes
    source_url: str


class TransformedAsset(BaseModel):
    content: bytes
    mime_type: Literal["application/pdf", "image/png"]
    filename: str
    disposition: Literal["inline", "attachment"]

    # False when a fallback delivered the asset without the mark
    watermarked: bool = True


# ---------- API Response ----------
class ErrorResponse(BaseModel):
    error: str

    model_config = ConfigDict(frozen=True)
