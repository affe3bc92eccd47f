from typing import Any

from mcp.server.fastmcp import FastMCP

from printify_studio.generation.defaults import DefaultsStore
from printify_studio.generation.models import ModelDescriptor, get_model, list_models
from printify_studio.tools._error_handler import handle_errors


def _describe(model: ModelDescriptor) -> dict:
    return {
        "id": model.id,
        "name": model.display_name,
        "description": model.description,
        "capabilities": sorted(model.capabilities),
    }


def _model_entries(selected: str | None) -> list[dict]:
    return [{**_describe(m), "selected": m.id == selected} for m in list_models()]


def register(mcp: FastMCP, defaults: DefaultsStore):
    @mcp.tool()
    @handle_errors
    async def get_defaults() -> dict:
        """Show the available image generation models and the current default parameters.

        These defaults are used by generate_image and generate_and_upload_image whenever a call omits a parameter."""
        return {
            "models": _model_entries(defaults.get("model")),
            "defaults": defaults.get_all(),
        }

    @mcp.tool()
    @handle_errors
    async def set_default(option: str, value: Any) -> dict:
        """Set a default image generation parameter (e.g. 'model', 'aspectRatio', 'raw', 'outputFormat').

        Setting 'aspectRatio' clears the default width/height, and setting 'width' or 'height' clears the
        default aspect ratio. Example: set_default(option="aspectRatio", value="16:9")."""
        defaults.set(option, value)
        result = {
            "success": True,
            "option": option,
            "value": value,
            "defaults": defaults.get_all(),
        }
        if option == "model":
            result["model"] = _describe(get_model(value))
        return result
