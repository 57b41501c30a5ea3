import io
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import fitz
import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.config import Settings, get_settings
from app.logger import get_logger
from app.main import app
from app.routes.watermark_routes import get_http_client


PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class RecordingLogger:

    def __init__(self):
        self.records = []

    def log(self, level, message, context=None):
        self.records.append((level, message, dict(context or {})))

    def contexts(self, level=None):
        return [c for (lvl, _, c) in self.records if level is None or lvl == level]


class CountingTransport(httpx.MockTransport):

    def __init__(self, handler):
        self.calls = []

        async def counted(request):
            self.calls.append(request)
            result = handler(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result

        super().__init__(counted)


def make_pdf(*sizes) -> bytes:
    doc = fitz.open()

    for width, height, *rotation in sizes or [(612, 792)]:
        page = doc.new_page(width=width, height=height)
        if rotation:
            page.set_rotation(rotation[0])

    data = doc.tobytes()
    doc.close()
    return data


def make_image(fmt="JPEG", size=(800, 600), color=(120, 120, 120)) -> bytes:
    out = io.BytesIO()
    mode = "RGBA" if fmt == "PNG" and len(color) == 4 else "RGB"
    Image.new(mode, size, color).save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def recorder():
    return RecordingLogger()


@pytest.fixture
def serve(recorder):
    """
    Builds a TestClient whose outbound HTTP goes to `handler`.
    Returns (client, transport) so tests can count upstream calls.
    """

    def build(handler, settings: Settings | None = None):
        transport = CountingTransport(handler)

        async def http_override():
            async with httpx.AsyncClient(transport=transport) as client:
                yield client

        app.dependency_overrides[get_http_client] = http_override
        app.dependency_overrides[get_logger] = lambda: recorder
        app.dependency_overrides[get_settings] = lambda: settings or Settings()

        return TestClient(app), transport

    yield build

    app.dependency_overrides.clear()


def static(content: bytes, status_code: int = 200, **headers):
    def handler(request):
        return httpx.Response(status_code, content=content, headers=headers)
    return handler


@pytest.fixture
def origin():
    """
    Real HTTP origin on localhost for exercising the production client.
    `origin(content, delay)` returns a URL that answers after `delay` seconds.
    """

    servers = []

    def build(content: bytes, delay: float = 0.0) -> str:

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self):
                time.sleep(delay)
                self.send_response(200)
                self.send_header("Content-Length", str(len(content)))
                self.end_headers()
                self.wfile.write(content)

            def log_message(self, format, *args):
                pass

        server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)

        host, port = server.server_address
        return f"http://{host}:{port}/assets/cover.jpg"

    yield build

    for server in servers:
        server.shutdown()
        server.server_close()
