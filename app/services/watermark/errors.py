# app/services/watermark/errors.py


class WatermarkServiceError(Exception):
    """Base for errors the watermark route reports to the caller"""


# -------------------------
# Retrieval
# -------------------------

class FetchError(WatermarkServiceError):

    # Internal kind, logged but never sent to the caller
    kind = "network"

    def __init__(self, message: str, source_url: str):
        super().__init__(message)
        self.source_url = source_url


class FetchNetworkError(FetchError):
    kind = "network"


class FetchTimeoutError(FetchError):
    kind = "timeout"


class UpstreamStatusError(FetchError):
    kind = "status"

    def __init__(self, message: str, source_url: str, status_code: int):
        super().__init__(message, source_url)
        self.status_code = status_code


class AssetTooLargeError(FetchError):
    kind = "too_large"

    def __init__(self, message: str, source_url: str, limit: int):
        super().__init__(message, source_url)
        self.limit = limit
