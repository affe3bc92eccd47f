from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from printify_studio.services.printify import PrintifyService
from printify_studio.tools._error_handler import handle_errors


class VariantInput(BaseModel):
    variant_id: int
    price: int = Field(description="Price in cents (e.g., 1999 for $19.99)")
    is_enabled: bool = True


class PrintAreaInput(BaseModel):
    position: str = Field(description="Print position (e.g., 'front', 'back')")
    image_id: str = Field(alias="imageId", description="Image ID from Printify uploads")

    model_config = {"populate_by_name": True}


def product_payload(
    title: str,
    description: str,
    blueprint_id: int,
    print_provider_id: int,
    variants: list[VariantInput],
    print_areas: dict[str, PrintAreaInput] | None = None,
) -> dict:
    """create_product の引数を Printify の products.json 形式に変換する

    print_areas は全バリアント共通の 1 エントリにまとめ、画像は中央に等倍で配置する。
    """
    payload = {
        "title": title,
        "description": description,
        "blueprint_id": blueprint_id,
        "print_provider_id": print_provider_id,
        "variants": [
            {"id": v.variant_id, "price": v.price, "is_enabled": v.is_enabled} for v in variants
        ],
        "print_areas": [],
    }
    if print_areas:
        payload["print_areas"].append({
            "variant_ids": [v.variant_id for v in variants],
            "placeholders": [
                {
                    "position": area.position,
                    "images": [{"id": area.image_id, "x": 0.5, "y": 0.5, "scale": 1, "angle": 0}],
                }
                for area in print_areas.values()
            ],
        })
    return payload


def register(mcp: FastMCP, service: PrintifyService):
    @mcp.tool()
    @handle_errors
    async def list_products(
        page: int = 1, limit: int = 10, shop_id: str | None = None
    ) -> dict:
        """List products in a shop. Supports pagination. If shop_id is omitted, uses the current shop."""
        return await service.list_products(page=page, limit=limit, shop_id=shop_id)

    @mcp.tool()
    @handle_errors
    async def get_product(product_id: str, shop_id: str | None = None) -> dict:
        """Get detailed product info including mockup image URLs."""
        return await service.get_product(product_id, shop_id=shop_id)

    @mcp.tool()
    @handle_errors
    async def create_product(
        title: str,
        description: str,
        blueprint_id: int,
        print_provider_id: int,
        variants: list[VariantInput],
        print_areas: dict[str, PrintAreaInput] | None = None,
        shop_id: str | None = None,
    ) -> dict:
        """Create a new product from a blueprint and print provider.

        print_areas maps a name to {"position": "front", "imageId": "<uploaded image ID>"}; use the image ID
        returned by upload_image or generate_and_upload_image. Look up blueprint, provider and variant IDs with
        get_blueprints, get_print_providers and get_variants."""
        data = product_payload(title, description, blueprint_id, print_provider_id, variants, print_areas)
        return await service.create_product(data, shop_id=shop_id)

    @mcp.tool()
    @handle_errors
    async def update_product(
        product_id: str, data: dict, shop_id: str | None = None
    ) -> dict:
        """Update an existing product's properties. data is sent to Printify as-is."""
        return await service.update_product(product_id, data, shop_id=shop_id)

    @mcp.tool()
    @handle_errors
    async def delete_product(product_id: str, shop_id: str | None = None) -> dict:
        """Delete a product from the shop."""
        return await service.delete_product(product_id, shop_id=shop_id)

    @mcp.tool()
    @handle_errors
    async def publish_product(
        product_id: str, data: dict, shop_id: str | None = None
    ) -> dict:
        """Publish a product to sales channels. Data should specify which fields to publish (title, description, images, variants, tags)."""
        return await service.publish_product(product_id, data, shop_id=shop_id)
