import asyncio
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from printify_studio.errors import ConfigurationError, PipelineError
from printify_studio.generation.defaults import DefaultsStore
from printify_studio.generation.postprocess import final_file_name, process_image
from printify_studio.generation.resolver import resolve_input
from printify_studio.generation.transport import (
    METHOD_IMGBB,
    ensure_transport_available,
    select_and_upload,
)
from printify_studio.services.imgbb import ImgBBService
from printify_studio.services.printify import PrintifyService
from printify_studio.services.replicate import ReplicateService

logger = logging.getLogger(__name__)


class GeneratedImage(BaseModel):
    data: bytes
    mime_type: str
    file_name: str
    model_id: str | None
    width: int
    height: int
    parameters: dict[str, Any] = {}

    @property
    def model_name(self) -> str:
        return (self.model_id or "").split("/")[-1]


def usage_hint(image_id: str) -> str:
    return (
        f"You can now use this image ID ({image_id}) in the print_areas of create_product.\n\n"
        '"print_areas": {\n'
        f'  "front": {{ "position": "front", "imageId": "{image_id}" }}\n'
        "}"
    )


class ImagePipeline:
    """generate -> process -> upload を順に実行する。途中で失敗したらそこで止まる。"""

    def __init__(
        self,
        defaults: DefaultsStore,
        replicate: ReplicateService | None = None,
        printify: PrintifyService | None = None,
        hosting: ImgBBService | None = None,
    ):
        self.defaults = defaults
        self.replicate = replicate
        self.printify = printify
        self.hosting = hosting

    def _require_replicate(self) -> ReplicateService:
        if self.replicate is None:
            raise ConfigurationError(
                "Replicate API client is not initialized. "
                "The REPLICATE_API_TOKEN environment variable may not be set.",
                "REPLICATE_API_TOKEN",
            )
        return self.replicate

    def _require_printify(self) -> PrintifyService:
        if self.printify is None:
            raise ConfigurationError(
                "Printify API client is not initialized. "
                "The PRINTIFY_API_KEY environment variable may not be set.",
                "PRINTIFY_API_KEY",
            )
        return self.printify

    async def generate(self, prompt: str, file_name: str, options: dict[str, Any] | None = None) -> GeneratedImage:
        replicate = self._require_replicate()
        options = options or {}
        resolved = resolve_input(prompt, options, self.defaults)
        source = "override" if options.get("model") else "default"
        logger.info(f"Using model: {resolved.model_id} ({source})")

        data = await replicate.generate(resolved.model_id, resolved.input)

        output_format = resolved.input["output_format"]
        processed = await asyncio.to_thread(process_image, data, output_format)
        logger.info(f"Image processed successfully, buffer size: {len(processed.data)} bytes")

        return GeneratedImage(
            data=processed.data,
            mime_type=processed.mime_type,
            file_name=final_file_name(file_name, output_format),
            model_id=resolved.model_id,
            width=processed.width,
            height=processed.height,
            parameters={k: v for k, v in resolved.input.items() if k != "prompt"},
        )

    async def generate_to_file(self, prompt: str, output_path: str, options: dict[str, Any] | None = None) -> dict:
        path = Path(output_path)
        image = await self.generate(prompt, path.name, options)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(image.data)
        except OSError as e:
            raise PipelineError(
                f"Error saving image to {output_path}: {e}",
                step="Save Image",
                context={"output_path": output_path},
                tips=["Make sure the directory is writable", "Use an absolute path"],
            ) from e
        logger.info(f"Saved generated image to {path}")

        return {
            "success": True,
            "prompt": prompt,
            "model": image.model_name,
            "output_path": str(path),
            "file_name": image.file_name,
            "file_size": len(image.data),
            "mime_type": image.mime_type,
            "dimensions": f"{image.width}x{image.height}",
            "parameters": image.parameters,
        }

    async def generate_and_upload(self, prompt: str, file_name: str, options: dict[str, Any] | None = None) -> dict:
        printify = self._require_printify()
        options = options or {}
        # 生成の前に Ultra + ImgBB 未設定を弾く
        model_id = options.get("model") or self.defaults.get("model")
        ensure_transport_available(model_id, self.hosting)

        logger.info(f"Starting generate_and_upload_image with prompt: {prompt}")
        image = await self.generate(prompt, file_name, options)
        result = await select_and_upload(image.data, image.file_name, image.model_id, printify, self.hosting)

        descriptor = result.descriptor
        payload = {
            "success": True,
            "prompt": prompt,
            "model": image.model_name,
            "image": descriptor.model_dump(),
            "upload_method": "ImgBB URL" if result.method == METHOD_IMGBB else "Direct base64",
            "parameters": image.parameters,
            "usage": usage_hint(descriptor.id),
        }
        if result.staging_url:
            payload["staging_url"] = result.staging_url
        return payload
