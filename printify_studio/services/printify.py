import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

BASE_URL = "https://api.printify.com"
MAX_RETRIES = 3
RATE_LIMIT_THRESHOLD = 5


class PrintifyService:
    def __init__(self, api_key: str, shop_id: str | None = None):
        self.shop_id = shop_id
        self.shops: list[dict] = []
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            headers={
                "authorization": f"Bearer {api_key}",
                "user-agent": "printify-studio-mcp/0.1.0",
                "content-type": "application/json",
            },
            timeout=60.0,
        )

    async def close(self):
        await self._client.aclose()

    async def _request(
        self, method: str, path: str, retries: int = MAX_RETRIES, **kwargs
    ) -> dict | list:
        last_exc = None
        for attempt in range(retries):
            try:
                response = await self._client.request(method, path, **kwargs)
                response.raise_for_status()
                # プロアクティブレート制限
                remaining = response.headers.get("X-RateLimit-Remaining")
                if remaining is not None and int(remaining) < RATE_LIMIT_THRESHOLD:
                    reset = float(response.headers.get("X-RateLimit-Reset", "1"))
                    logger.info(f"Rate limit low ({remaining} remaining). Sleeping {reset}s")
                    await asyncio.sleep(reset)
                if response.status_code == 204:
                    return {}
                return response.json()
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429 and attempt + 1 < retries:
                    wait = float(e.response.headers.get("Retry-After", 2 ** attempt))
                    logger.warning(f"Rate limited. Retrying in {wait}s (attempt {attempt + 1})")
                    await asyncio.sleep(wait)
                    last_exc = e
                    continue
                raise
        raise last_exc

    async def _get(self, path: str, **params) -> dict | list:
        return await self._request("GET", path, params=params)

    async def _post(self, path: str, data: dict | None = None, retries: int = MAX_RETRIES) -> dict:
        return await self._request("POST", path, retries=retries, json=data)

    async def _put(self, path: str, data: dict) -> dict:
        return await self._request("PUT", path, json=data)

    async def _delete(self, path: str) -> dict:
        return await self._request("DELETE", path)

    def _shop_path(self, suffix: str, shop_id: str | None = None) -> str:
        shop_id = shop_id or self.shop_id
        if not shop_id:
            raise ValueError("shop_id is required. Set PRINTIFY_SHOP_ID or call list_shops first.")
        return f"/v1/shops/{shop_id}/{suffix}"

    # --- Shops ---

    async def list_shops(self) -> list[dict]:
        self.shops = await self._get("/v1/shops.json")
        return self.shops

    async def initialize(self) -> list[dict]:
        """ショップ一覧を取得し、未設定なら先頭のショップを選択する"""
        shops = await self.list_shops()
        logger.info(f"Found {len(shops)} Printify shops")
        if shops and not self.shop_id:
            self.shop_id = str(shops[0]["id"])
            logger.info(f"Setting default shop ID to: {self.shop_id}")
        return shops

    @property
    def current_shop(self) -> dict | None:
        if not self.shop_id:
            return None
        return next((s for s in self.shops if str(s["id"]) == str(self.shop_id)), None)

    async def switch_shop(self, shop_id: str) -> dict:
        shops = await self.list_shops()
        shop = next((s for s in shops if str(s["id"]) == str(shop_id)), None)
        if shop is None:
            raise ValueError(f"Shop with ID {shop_id} not found. Use the list_shops tool to see available shops.")
        self.shop_id = str(shop["id"])
        logger.info(f"Switched to shop {shop['title']} ({self.shop_id})")
        return shop

    # --- Products ---

    async def list_products(self, page: int = 1, limit: int = 10, shop_id: str | None = None) -> dict:
        return await self._get(self._shop_path("products.json", shop_id), page=page, limit=limit)

    async def get_product(self, product_id: str, shop_id: str | None = None) -> dict:
        return await self._get(self._shop_path(f"products/{product_id}.json", shop_id))

    async def create_product(self, data: dict, shop_id: str | None = None) -> dict:
        return await self._post(self._shop_path("products.json", shop_id), data=data)

    async def update_product(self, product_id: str, data: dict, shop_id: str | None = None) -> dict:
        return await self._put(self._shop_path(f"products/{product_id}.json", shop_id), data=data)

    async def delete_product(self, product_id: str, shop_id: str | None = None) -> dict:
        return await self._delete(self._shop_path(f"products/{product_id}.json", shop_id))

    async def publish_product(self, product_id: str, data: dict, shop_id: str | None = None) -> dict:
        return await self._post(self._shop_path(f"products/{product_id}/publish.json", shop_id), data=data)

    # --- Catalog ---

    async def list_blueprints(self) -> list[dict]:
        return await self._get("/v1/catalog/blueprints.json")

    async def get_blueprint(self, blueprint_id: int) -> dict:
        return await self._get(f"/v1/catalog/blueprints/{blueprint_id}.json")

    async def get_print_providers(self, blueprint_id: int) -> list[dict]:
        return await self._get(f"/v1/catalog/blueprints/{blueprint_id}/print_providers.json")

    async def get_variants(self, blueprint_id: int, provider_id: int) -> dict:
        return await self._get(
            f"/v1/catalog/blueprints/{blueprint_id}/print_providers/{provider_id}/variants.json"
        )

    # --- Images ---

    async def upload_image(
        self, file_name: str, url: str | None = None, contents: str | None = None
    ) -> dict:
        data = {"file_name": file_name}
        if url:
            data["url"] = url
        elif contents:
            data["contents"] = contents
        else:
            raise ValueError("Either url or contents (base64) is required")
        # アップロードはリトライしない
        return await self._post("/v1/uploads/images.json", data=data, retries=1)
