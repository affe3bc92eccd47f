from typing import Literal

from mcp.server.fastmcp import FastMCP

from printify_studio.generation.pipeline import ImagePipeline
from printify_studio.tools._error_handler import handle_errors

OutputFormat = Literal["png", "jpeg", "jpg", "webp"]


def call_options(**overrides) -> dict:
    """ツール引数（snake_case）をデフォルト設定と同じ名前（camelCase）に変換し、未指定を除く"""
    options = {}
    for name, value in overrides.items():
        if value is None:
            continue
        head, *rest = name.split("_")
        options[head + "".join(part.title() for part in rest)] = value
    return options


def register(mcp: FastMCP, pipeline: ImagePipeline):
    @mcp.tool()
    @handle_errors
    async def generate_image(
        prompt: str,
        output_path: str,
        model: str | None = None,
        width: int | None = None,
        height: int | None = None,
        aspect_ratio: str | None = None,
        output_format: OutputFormat | None = None,
        safety_tolerance: int | None = None,
        seed: int | None = None,
        num_inference_steps: int | None = None,
        guidance_scale: float | None = None,
        negative_prompt: str | None = None,
        prompt_upsampling: bool | None = None,
        output_quality: int | None = None,
        raw: bool | None = None,
        image_prompt_strength: float | None = None,
    ) -> dict:
        """Generate an image with Replicate (Flux) and save it to output_path without uploading to Printify.

        Omitted parameters fall back to the defaults shown by get_defaults. aspect_ratio (e.g. '16:9') takes
        precedence over width/height. prompt_upsampling and output_quality apply to Flux 1.1 Pro only;
        raw and image_prompt_strength apply to Flux 1.1 Pro Ultra only."""
        options = call_options(
            model=model,
            width=width,
            height=height,
            aspect_ratio=aspect_ratio,
            output_format=output_format,
            safety_tolerance=safety_tolerance,
            seed=seed,
            num_inference_steps=num_inference_steps,
            guidance_scale=guidance_scale,
            negative_prompt=negative_prompt,
            prompt_upsampling=prompt_upsampling,
            output_quality=output_quality,
            raw=raw,
            image_prompt_strength=image_prompt_strength,
        )
        return await pipeline.generate_to_file(prompt, output_path, options)

    @mcp.tool()
    @handle_errors
    async def generate_and_upload_image(
        prompt: str,
        file_name: str,
        model: str | None = None,
        width: int | None = None,
        height: int | None = None,
        aspect_ratio: str | None = None,
        output_format: OutputFormat | None = None,
        safety_tolerance: int | None = None,
        seed: int | None = None,
        num_inference_steps: int | None = None,
        guidance_scale: float | None = None,
        negative_prompt: str | None = None,
        prompt_upsampling: bool | None = None,
        output_quality: int | None = None,
        raw: bool | None = None,
        image_prompt_strength: float | None = None,
    ) -> dict:
        """Generate an image with Replicate (Flux) and upload it to Printify. Returns the Printify image ID.

        The Flux 1.1 Pro Ultra model requires IMGBB_API_KEY: its images are staged on ImgBB and uploaded by URL.
        Other models use ImgBB when configured and otherwise upload base64 contents directly.
        Use the returned image ID in a product's print_areas."""
        options = call_options(
            model=model,
            width=width,
            height=height,
            aspect_ratio=aspect_ratio,
            output_format=output_format,
            safety_tolerance=safety_tolerance,
            seed=seed,
            num_inference_steps=num_inference_steps,
            guidance_scale=guidance_scale,
            negative_prompt=negative_prompt,
            prompt_upsampling=prompt_upsampling,
            output_quality=output_quality,
            raw=raw,
            image_prompt_strength=image_prompt_strength,
        )
        return await pipeline.generate_and_upload(prompt, file_name, options)
