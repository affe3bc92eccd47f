from typing import Literal

from mcp.server.fastmcp import FastMCP

Topic = Literal[
    "product_creation",
    "blueprints",
    "print_providers",
    "variants",
    "images",
    "publishing",
    "image_generation",
]

TOPICS: dict[str, str] = {
    "product_creation": """# Creating a product

1. Pick a blueprint with get_blueprints / get_blueprint (e.g. a t-shirt).
2. Pick a print provider for it with get_print_providers.
3. Pick variants (sizes, colors) with get_variants and note their IDs.
4. Get an image ID with upload_image or generate_and_upload_image.
5. Call create_product:

    create_product(
        title="Cat Tee",
        description="...",
        blueprint_id=6,
        print_provider_id=3,
        variants=[{"variant_id": 17390, "price": 1999}],
        print_areas={"front": {"position": "front", "imageId": "<image id>"}},
    )

Prices are in cents. Every listed variant shares the print areas; images are centered at scale 1.
""",
    "blueprints": """# Blueprints

A blueprint is a product template from the Printify catalog (t-shirt, mug, poster...).

- get_blueprints lists all blueprints with their IDs, titles and brands.
- get_blueprint(blueprint_id) returns the description and preview images of one blueprint.

Use the blueprint ID as blueprint_id in create_product.
""",
    "print_providers": """# Print providers

Each blueprint is produced by one or more print providers, which differ in price, location and variants.

- get_print_providers(blueprint_id) lists the providers for a blueprint.

Use the provider ID as print_provider_id in create_product and get_variants.
""",
    "variants": """# Variants

Variants are the sizes and colors a provider offers for a blueprint.

- get_variants(blueprint_id, provider_id) lists them with their IDs and options.

Pass the chosen IDs to create_product as variants=[{"variant_id": <id>, "price": <cents>}].
Set "is_enabled": false to list a variant without selling it.
""",
    "images": """# Images

upload_image(file_name, source) uploads an image to Printify. source may be:

- an http(s) URL that Printify can fetch,
- a local file path (absolute, ~, ./ or file://), up to 20MB,
- a base64 string.

The result contains the image ID to use in create_product's print_areas.
""",
    "publishing": """# Publishing

publish_product(product_id, data) pushes a product to the shop's sales channel.
data chooses which fields are published, for example:

    {"title": true, "description": true, "images": true, "variants": true, "tags": true}

Check the result with get_product: a published product has an "external" reference.
""",
    "image_generation": """# Image generation

- get_defaults shows the models (Flux 1.1 Pro, Flux 1.1 Pro Ultra) and the current defaults.
- set_default(option, value) changes a default, e.g. set_default("aspectRatio", "16:9").
- generate_image(prompt, output_path, ...) generates an image and saves it locally.
- generate_and_upload_image(prompt, file_name, ...) generates an image and uploads it to Printify.

Parameters omitted from a call fall back to the defaults. aspect_ratio wins over width/height.
Flux 1.1 Pro Ultra images are too large for base64 uploads and need IMGBB_API_KEY;
other models use ImgBB when it is configured and base64 otherwise.
""",
}


def register(mcp: FastMCP):
    @mcp.tool()
    async def how_to_use(topic: Topic) -> str:
        """Documentation for the Printify workflow: product_creation, blueprints, print_providers, variants,
        images, publishing or image_generation."""
        return TOPICS[topic]
