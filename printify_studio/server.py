import contextlib
import logging

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.server import TransportSecuritySettings
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from printify_studio.config import Settings
from printify_studio.generation.defaults import DefaultsStore
from printify_studio.generation.pipeline import ImagePipeline
from printify_studio.services.imgbb import ImgBBService
from printify_studio.services.printify import PrintifyService
from printify_studio.services.replicate import ReplicateService
from printify_studio.tools import defaults as defaults_tools
from printify_studio.tools import catalog, docs, generation, images, products, prompts, shops

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _create_services_and_mcp(settings: Settings | None = None):
    settings = settings or Settings()
    service = PrintifyService(
        api_key=settings.printify_api_key,
        shop_id=settings.printify_shop_id,
    )

    replicate = None
    if settings.replicate_api_token:
        replicate = ReplicateService(api_token=settings.replicate_api_token)
    else:
        logger.warning("REPLICATE_API_TOKEN is not set. Image generation tools are disabled.")

    hosting = None
    if settings.imgbb_api_key:
        hosting = ImgBBService(api_key=settings.imgbb_api_key)
    else:
        logger.info("IMGBB_API_KEY is not set. Images will be uploaded as base64 (Ultra model unavailable).")

    # デフォルト設定はプロセス内で共有し、パイプラインとツールに注入する
    defaults = DefaultsStore()
    pipeline = ImagePipeline(defaults, replicate=replicate, printify=service, hosting=hosting)

    mcp_kwargs = {}
    # stateless HTTP では FastMCP の lifespan がリクエストごとに走るので、stdio のときだけ渡す
    if settings.transport == "stdio":
        mcp_kwargs["lifespan"] = lambda _server: services_lifespan(pipeline)

    mcp = FastMCP(
        "Printify Studio MCP Server",
        json_response=True,
        stateless_http=True,
        transport_security=TransportSecuritySettings(
            enable_dns_rebinding_protection=False,
        ),
        **mcp_kwargs,
    )

    shops.register(mcp, service)
    products.register(mcp, service)
    catalog.register(mcp, service)
    images.register(mcp, service)
    defaults_tools.register(mcp, defaults)
    generation.register(mcp, pipeline)
    docs.register(mcp)
    prompts.register(mcp)

    return settings, pipeline, mcp


async def _close_services(pipeline: ImagePipeline):
    for client in (pipeline.printify, pipeline.replicate, pipeline.hosting):
        if client is not None:
            await client.close()


@contextlib.asynccontextmanager
async def services_lifespan(pipeline: ImagePipeline):
    """起動時にショップを選択し、終了時に HTTP クライアントを閉じる（全トランスポート共通）"""
    logger.info("Printify Studio MCP Server starting")
    try:
        await pipeline.printify.initialize()
    except httpx.HTTPError as e:
        logger.warning(f"Could not fetch Printify shops on startup: {e}")
    try:
        yield {}
    finally:
        await _close_services(pipeline)
        logger.info("Printify Studio MCP Server stopped")


async def health(request):
    return JSONResponse({"status": "ok"})


def create_app(settings: Settings | None = None) -> Starlette:
    settings, pipeline, mcp = _create_services_and_mcp(settings)

    @contextlib.asynccontextmanager
    async def lifespan(app):
        async with contextlib.AsyncExitStack() as stack:
            await stack.enter_async_context(services_lifespan(pipeline))
            await stack.enter_async_context(mcp.session_manager.run())
            yield

    return Starlette(
        routes=[
            Route("/health", health),
            Mount("/", app=mcp.streamable_http_app()),
        ],
        lifespan=lifespan,
    )


def main():
    settings = Settings()
    if settings.transport == "stdio":
        _, _, mcp = _create_services_and_mcp(settings)
        mcp.run(transport="stdio")
    else:
        import uvicorn

        uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
