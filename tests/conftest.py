import io
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from printify_studio.generation.defaults import DefaultsStore
from printify_studio.services.imgbb import ImgBBService
from printify_studio.services.printify import PrintifyService
from printify_studio.services.replicate import ReplicateService


class ToolRecorder:
    """FastMCP の代わりに登録されたツール関数を記録する"""

    def __init__(self):
        self.tools = {}
        self.prompts = {}

    def tool(self):
        def decorator(fn):
            self.tools[fn.__name__] = fn
            return fn

        return decorator

    def prompt(self):
        def decorator(fn):
            self.prompts[fn.__name__] = fn
            return fn

        return decorator


def make_image(fmt: str = "PNG", size: tuple[int, int] = (64, 48), mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color=(200, 30, 30) if mode == "RGB" else (200, 30, 30, 128)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def service():
    return PrintifyService(api_key="test-key", shop_id="12345")


@pytest.fixture
def defaults():
    return DefaultsStore()


@pytest.fixture
def png_bytes():
    return make_image()


@pytest.fixture
def replicate_service():
    svc = ReplicateService(api_token="test-token")
    svc._client.async_run = AsyncMock()
    return svc


@pytest.fixture
def hosting():
    return ImgBBService(api_key="imgbb-key")


@pytest.fixture
def recorder():
    return ToolRecorder()


@pytest.fixture
def image_factory():
    return make_image
