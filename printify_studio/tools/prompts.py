from mcp.server.fastmcp import FastMCP


def product_description_prompt(
    product_name: str,
    category: str,
    target_audience: str | None = None,
    key_features: str | None = None,
) -> str:
    lines = [
        "Please write a compelling product description for the following product:",
        "",
        f"Product name: {product_name}",
        f"Category: {category}",
    ]
    if target_audience:
        lines.append(f"Target audience: {target_audience}")
    features = [f.strip() for f in (key_features or "").split(",") if f.strip()]
    if features:
        lines.append("Key features:")
        lines.extend(f"- {f}" for f in features)
    lines += [
        "",
        "The description should be engaging, highlight the benefits, "
        "and be suitable for an e-commerce platform.",
    ]
    return "\n".join(lines)


def register(mcp: FastMCP):
    @mcp.prompt()
    def generate_product_description(
        product_name: str,
        category: str,
        target_audience: str | None = None,
        key_features: str | None = None,
    ) -> str:
        """Write a product description for a Printify listing. key_features is a comma-separated list."""
        return product_description_prompt(product_name, category, target_audience, key_features)
