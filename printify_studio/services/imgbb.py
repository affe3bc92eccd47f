import base64
import logging

import httpx

logger = logging.getLogger(__name__)

BASE_URL = "https://api.imgbb.com"


class ImgBBService:
    """Printify が URL で取得できるよう画像を ImgBB に置く"""

    def __init__(self, api_key: str):
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            headers={"user-agent": "printify-studio-mcp/0.1.0"},
            timeout=60.0,
        )

    async def close(self):
        await self._client.aclose()

    async def upload(self, data: bytes) -> str:
        response = await self._client.post(
            "/1/upload",
            params={"key": self._api_key},
            data={"image": base64.b64encode(data).decode("ascii")},
        )
        response.raise_for_status()
        url = response.json().get("data", {}).get("url")
        if not url:
            raise ValueError("ImgBB response did not contain an image URL")
        logger.info(f"Successfully uploaded image to ImgBB. URL: {url}")
        return url
