import base64
import logging
from pathlib import Path

import httpx
from mcp.server.fastmcp import FastMCP

from printify_studio.errors import UploadError
from printify_studio.services.printify import PrintifyService
from printify_studio.tools._error_handler import handle_errors

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 20 * 1024 * 1024

SOURCE_LABELS = {"url": "URL", "file": "file path", "base64": "base64 string"}

SOURCE_TIPS = {
    "url": [
        "Make sure the URL is publicly accessible and points directly to an image file",
        "The URL must start with http:// or https://",
    ],
    "file": [
        "Make sure the file exists and is readable",
        "Check that the path is correct and includes the full path to the file",
        "The file must be a valid image format (PNG, JPEG, SVG)",
        "Maximum file size is 20MB",
    ],
    "base64": ["Make sure the base64 string is valid and represents an image"],
}


def _is_base64(value: str) -> bool:
    try:
        base64.b64decode(value, validate=True)
    except ValueError:
        return False
    return True


def detect_source_type(source: str) -> str:
    if source.startswith(("http://", "https://")):
        return "url"
    if source.startswith(("file://", "~", "./", "../")) or ":\\" in source or ":/" in source or "\\" in source:
        return "file"
    # JPEG の base64 は "/9j/" で始まるので、先頭 "/" だけではパスと判定しない
    if source.startswith("/") and not _is_base64(source):
        return "file"
    return "base64"


def normalize_file_path(source: str) -> Path:
    if source.startswith("file://"):
        source = source[len("file://"):]
    return Path(source).expanduser()


def read_file_as_base64(path: Path) -> str:
    if not path.is_file():
        raise ValueError(f"File not found: {path}")
    size = path.stat().st_size
    if size > MAX_FILE_SIZE:
        raise ValueError(f"File is too large ({size // (1024 * 1024)}MB). Maximum size is 20MB.")
    logger.info(f"Uploading file to Printify: {path} ({size} bytes)")
    return base64.b64encode(path.read_bytes()).decode("ascii")


def register(mcp: FastMCP, service: PrintifyService):
    @mcp.tool()
    @handle_errors
    async def upload_image(file_name: str, source: str) -> dict:
        """Upload an image to Printify. source may be an image URL, a path to a local file, or base64-encoded image data.

        Returns the Printify image ID to use in a product's print_areas."""
        source_type = detect_source_type(source)
        logger.info(f"Uploading image {file_name} from {source_type} source")
        try:
            if source_type == "url":
                return await service.upload_image(file_name=file_name, url=source)
            if source_type == "file":
                contents = read_file_as_base64(normalize_file_path(source))
            else:
                contents = source
            return await service.upload_image(file_name=file_name, contents=contents)
        except (httpx.HTTPError, ValueError, OSError) as e:
            response = getattr(e, "response", None)
            raise UploadError(
                f"Error uploading image to Printify: {e}",
                method=source_type,
                response_data=response.text if response is not None else None,
                file_name=file_name,
                step=f"Printify Upload ({SOURCE_LABELS[source_type]})",
                tips=UploadError.default_tips + SOURCE_TIPS[source_type],
            ) from e
