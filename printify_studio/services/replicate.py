"""Replicate クライアントのラッパー

SDK の戻り値はここで RawBytes / RemoteUrl / LazyByteSource のいずれかに変換する。
呼び出し側は SDK の戻り値の形を意識しなくてよい。
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

import httpx
import replicate
from replicate.exceptions import ReplicateException

from printify_studio.errors import BackendError, UnsupportedOutputError

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 120.0
LAZY_ACCESSORS = ("aread", "read", "blob", "text")


@dataclass(frozen=True)
class RawBytes:
    data: bytes


@dataclass(frozen=True)
class RemoteUrl:
    url: str


@dataclass(frozen=True)
class LazyByteSource:
    accessor: str
    load: Callable[[], Any]


BackendOutput = RawBytes | RemoteUrl | LazyByteSource


def is_http_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def coerce_output(output: Any) -> BackendOutput:
    if output is None:
        raise BackendError("Replicate returned no output")
    if isinstance(output, (bytes, bytearray, memoryview)):
        return RawBytes(bytes(output))
    if isinstance(output, str):
        if is_http_url(output):
            return RemoteUrl(output)
        raise UnsupportedOutputError(f"Replicate returned a string that is not an image URL: {output[:80]}")
    if isinstance(output, (list, tuple)):
        if not output:
            raise BackendError("Replicate returned an empty output list")
        return coerce_output(output[0])
    for accessor in LAZY_ACCESSORS:
        method = getattr(output, accessor, None)
        if callable(method):
            return LazyByteSource(accessor, method)
    raise UnsupportedOutputError(f"Unsupported output type from Replicate: {type(output).__name__}")


class ReplicateService:
    def __init__(self, api_token: str):
        self._client = replicate.Client(api_token=api_token)
        self._http = httpx.AsyncClient(
            timeout=DOWNLOAD_TIMEOUT,
            follow_redirects=True,
            headers={"user-agent": "printify-studio-mcp/0.1.0"},
        )

    async def close(self):
        await self._http.aclose()

    async def generate(self, model_id: str, model_input: dict) -> bytes:
        prompt = model_input.get("prompt")
        options = {k: v for k, v in model_input.items() if k != "prompt"}
        logger.info(f"Running {model_id} on Replicate")
        try:
            output = await self._client.async_run(model_id, input=model_input)
            data = await self._materialize(coerce_output(output))
        except BackendError as e:
            e.prompt, e.options, e.model_id = prompt, options, model_id
            e.context.update({"prompt": prompt, "model": model_id, "options": options})
            raise
        except (ReplicateException, httpx.HTTPError) as e:
            raise BackendError(str(e), prompt=prompt, options=options, model_id=model_id) from e
        logger.info(f"Image generated successfully, buffer size: {len(data)} bytes")
        return data

    async def _materialize(self, output: BackendOutput) -> bytes:
        if isinstance(output, RawBytes):
            return output.data
        if isinstance(output, RemoteUrl):
            return await self._download(output.url)

        value = output.load()
        if inspect.isawaitable(value):
            value = await value
        if isinstance(value, str):
            if is_http_url(value):
                return await self._download(value)
            raise UnsupportedOutputError(
                f"Output accessor {output.accessor}() returned text that is not an image URL"
            )
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        raise UnsupportedOutputError(
            f"Output accessor {output.accessor}() returned unsupported type: {type(value).__name__}"
        )

    async def _download(self, url: str) -> bytes:
        logger.info(f"Downloading generated image from {url}")
        response = await self._http.get(url)
        response.raise_for_status()
        return response.content
