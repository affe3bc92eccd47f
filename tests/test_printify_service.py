import httpx
import pytest
import respx

from printify_studio.services.printify import PrintifyService

API = "https://api.printify.com"


class TestPrintifyServiceInit:
    def test_creates_client_with_auth_header(self, service: PrintifyService):
        assert service._client.headers["authorization"] == "Bearer test-key"

    def test_creates_client_with_user_agent(self, service: PrintifyService):
        assert "printify-studio-mcp" in service._client.headers["user-agent"]

    def test_stores_shop_id(self, service: PrintifyService):
        assert service.shop_id == "12345"


class TestPrintifyServiceRequest:
    @respx.mock
    async def test_get_returns_json(self, service: PrintifyService):
        respx.get(f"{API}/v1/shops.json").mock(
            return_value=httpx.Response(200, json=[{"id": 1, "title": "My Shop"}])
        )
        result = await service._get("/v1/shops.json")
        assert result == [{"id": 1, "title": "My Shop"}]

    @respx.mock
    async def test_get_raises_on_401(self, service: PrintifyService):
        respx.get(f"{API}/v1/shops.json").mock(
            return_value=httpx.Response(401, json={"error": "Unauthorized"})
        )
        try:
            await service._get("/v1/shops.json")
            assert False, "Should have raised"
        except httpx.HTTPStatusError as e:
            assert e.response.status_code == 401

    @respx.mock
    async def test_retry_on_429(self, service: PrintifyService):
        route = respx.get(f"{API}/v1/shops.json")
        route.side_effect = [
            httpx.Response(429, headers={"Retry-After": "0"}),
            httpx.Response(200, json=[{"id": 1}]),
        ]
        result = await service._get("/v1/shops.json")
        assert result == [{"id": 1}]
        assert route.call_count == 2


class TestResponseHandling:
    @respx.mock
    async def test_204_returns_empty_dict(self, service: PrintifyService):
        respx.delete(f"{API}/v1/shops/12345/products/prod_1.json").mock(
            return_value=httpx.Response(204)
        )
        result = await service.delete_product("prod_1")
        assert result == {}

    @respx.mock
    async def test_retry_exhaustion_raises_last_exception(self, service: PrintifyService, recorded_sleeps):
        route = respx.get(f"{API}/v1/shops.json").mock(
            return_value=httpx.Response(429, headers={"Retry-After": "0"})
        )
        try:
            await service._get("/v1/shops.json")
            assert False, "Should have raised after 3 retries"
        except httpx.HTTPStatusError as e:
            assert e.response.status_code == 429
        assert route.call_count == 3
        assert recorded_sleeps == [0.0, 0.0]


class TestUploadImageValidation:
    async def test_raises_when_no_url_or_contents(self, service: PrintifyService):
        try:
            await service.upload_image(file_name="design.png")
            assert False, "Should have raised ValueError"
        except ValueError as e:
            assert "url or contents" in str(e).lower()

    @respx.mock
    async def test_upload_is_not_retried_on_429(self, service: PrintifyService):
        route = respx.post(f"{API}/v1/uploads/images.json").mock(
            return_value=httpx.Response(429, headers={"Retry-After": "0"})
        )
        try:
            await service.upload_image(file_name="design.png", url="https://example.com/design.png")
            assert False, "Should have raised"
        except httpx.HTTPStatusError as e:
            assert e.response.status_code == 429
        assert route.call_count == 1


@pytest.fixture
def recorded_sleeps(monkeypatch):
    sleeps = []

    async def record_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr("printify_studio.services.printify.asyncio.sleep", record_sleep)
    return sleeps


class TestProactiveRateLimit:
    @respx.mock
    @pytest.mark.parametrize(
        "headers, expected",
        [
            ({"X-RateLimit-Remaining": "3", "X-RateLimit-Reset": "2"}, [2.0]),
            ({"X-RateLimit-Remaining": "4"}, [1.0]),
            ({"X-RateLimit-Remaining": "50"}, []),
            ({}, []),
        ],
    )
    async def test_sleeps_only_when_remaining_is_low(self, service: PrintifyService, recorded_sleeps, headers, expected):
        respx.get(f"{API}/v1/shops.json").mock(
            return_value=httpx.Response(200, json=[{"id": 1}], headers=headers)
        )
        result = await service.list_shops()
        assert result == [{"id": 1}]
        assert recorded_sleeps == expected
