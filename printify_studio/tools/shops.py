from mcp.server.fastmcp import FastMCP

from printify_studio.services.printify import PrintifyService
from printify_studio.tools._error_handler import handle_errors


def register(mcp: FastMCP, service: PrintifyService):
    @mcp.tool()
    @handle_errors
    async def get_printify_status() -> dict:
        """Check the Printify connection: number of shops and the currently selected shop."""
        shops = await service.list_shops()
        return {
            "connected": True,
            "available_shops": len(shops),
            "current_shop": service.current_shop,
        }

    @mcp.tool()
    @handle_errors
    async def list_shops() -> list[dict]:
        """List all Printify shops in your account. The shop used by default is marked with 'current'."""
        shops = await service.list_shops()
        return [{**shop, "current": str(shop["id"]) == str(service.shop_id)} for shop in shops]

    @mcp.tool()
    @handle_errors
    async def switch_shop(shop_id: str) -> dict:
        """Switch the shop used by default for subsequent Printify calls."""
        shop = await service.switch_shop(shop_id)
        return {"success": True, "current_shop": shop}
