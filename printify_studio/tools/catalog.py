from mcp.server.fastmcp import FastMCP

from printify_studio.services.printify import PrintifyService
from printify_studio.tools._error_handler import handle_errors


def register(mcp: FastMCP, service: PrintifyService):
    @mcp.tool()
    @handle_errors
    async def get_blueprints() -> list[dict]:
        """List all available product blueprints (templates) from the Printify catalog."""
        return await service.list_blueprints()

    @mcp.tool()
    @handle_errors
    async def get_blueprint(blueprint_id: int) -> dict:
        """Get details for a specific blueprint including available images and description."""
        return await service.get_blueprint(blueprint_id)

    @mcp.tool()
    @handle_errors
    async def get_print_providers(blueprint_id: int) -> list[dict]:
        """List print providers available for a specific blueprint."""
        return await service.get_print_providers(blueprint_id)

    @mcp.tool()
    @handle_errors
    async def get_variants(blueprint_id: int, provider_id: int) -> dict:
        """List variants (sizes, colors) for a blueprint and print provider combination."""
        return await service.get_variants(blueprint_id, provider_id)
