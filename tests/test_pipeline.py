import io
import json

import httpx
import pytest
import respx
from PIL import Image

from printify_studio.errors import ConfigurationError, PipelineError
from printify_studio.generation.defaults import DefaultsStore
from printify_studio.generation.models import STANDARD_MODEL_ID, ULTRA_MODEL_ID
from printify_studio.generation.pipeline import GeneratedImage, ImagePipeline, usage_hint

API = "https://api.printify.com"
STAGED_URL = "https://i.ibb.co/abc123/design.png"
UPLOADED = {
    "id": "5e16d66791287a0006e522b2",
    "file_name": "design.png",
    "height": 48,
    "width": 64,
    "preview_url": "https://images.printify.com/5e16d66791287a0006e522b2",
}


@pytest.fixture
def pipeline(defaults, replicate_service, service, hosting):
    return ImagePipeline(defaults, replicate=replicate_service, printify=service, hosting=hosting)


class TestGeneratedImage:
    def test_model_name(self):
        image = GeneratedImage(
            data=b"", mime_type="image/png", file_name="a.png", model_id=ULTRA_MODEL_ID, width=1, height=1
        )
        assert image.model_name == "flux-1.1-pro-ultra"

    def test_usage_hint_mentions_image_id(self):
        assert '"imageId": "abc"' in usage_hint("abc")


class TestGenerate:
    async def test_processes_backend_bytes(self, pipeline: ImagePipeline, replicate_service, image_factory):
        replicate_service._client.async_run.return_value = image_factory("WEBP", size=(80, 60))

        image = await pipeline.generate("a red bicycle", "bike", {"outputFormat": "jpeg"})

        assert image.file_name == "bike.jpg"
        assert image.mime_type == "image/jpeg"
        assert (image.width, image.height) == (80, 60)
        assert Image.open(io.BytesIO(image.data)).format == "JPEG"
        assert "prompt" not in image.parameters
        assert image.parameters["output_format"] == "jpeg"

    async def test_sends_resolved_input_to_backend(self, pipeline: ImagePipeline, replicate_service, png_bytes):
        replicate_service._client.async_run.return_value = png_bytes

        await pipeline.generate("a red bicycle", "bike", {"aspectRatio": "16:9", "seed": 11})

        args, kwargs = replicate_service._client.async_run.call_args
        assert args == (ULTRA_MODEL_ID,)
        assert kwargs["input"]["aspect_ratio"] == "16:9"
        assert kwargs["input"]["seed"] == 11
        assert kwargs["input"]["raw"] is False

    async def test_missing_backend_is_configuration_error(self, defaults: DefaultsStore):
        pipeline = ImagePipeline(defaults)
        try:
            await pipeline.generate("p", "x")
            assert False, "Should have raised ConfigurationError"
        except ConfigurationError as e:
            assert e.setting == "REPLICATE_API_TOKEN"


class TestGenerateToFile:
    async def test_writes_file(self, pipeline: ImagePipeline, replicate_service, png_bytes, tmp_path):
        replicate_service._client.async_run.return_value = png_bytes
        target = tmp_path / "out" / "design.png"

        result = await pipeline.generate_to_file("a red bicycle", str(target))

        assert result["success"] is True
        assert result["output_path"] == str(target)
        assert result["model"] == "flux-1.1-pro-ultra"
        assert result["dimensions"] == "64x48"
        assert result["file_size"] == len(target.read_bytes())
        assert Image.open(target).format == "PNG"

    async def test_unwritable_path_is_pipeline_error(self, pipeline: ImagePipeline, replicate_service, png_bytes, tmp_path):
        replicate_service._client.async_run.return_value = png_bytes
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        try:
            await pipeline.generate_to_file("p", str(blocker / "design.png"))
            assert False, "Should have raised PipelineError"
        except PipelineError as e:
            assert e.step == "Save Image"


class TestGenerateAndUpload:
    async def test_ultra_without_hosting_fails_before_generation(self, defaults, replicate_service, service):
        pipeline = ImagePipeline(defaults, replicate=replicate_service, printify=service)
        try:
            await pipeline.generate_and_upload("a red bicycle", "bike")
            assert False, "Should have raised ConfigurationError"
        except ConfigurationError as e:
            assert "IMGBB_API_KEY" in e.message
            assert e.to_payload()["error"] is True
        replicate_service._client.async_run.assert_not_awaited()

    @respx.mock
    async def test_standard_model_with_hosting(self, pipeline: ImagePipeline, replicate_service, png_bytes):
        replicate_service._client.async_run.return_value = png_bytes
        respx.route(method="POST", host="api.imgbb.com", path="/1/upload").mock(
            return_value=httpx.Response(200, json={"data": {"url": STAGED_URL}})
        )
        uploads = respx.post(f"{API}/v1/uploads/images.json").mock(return_value=httpx.Response(200, json=UPLOADED))

        result = await pipeline.generate_and_upload("a red bicycle", "design", {"model": STANDARD_MODEL_ID})

        assert result["success"] is True
        assert result["model"] == "flux-1.1-pro"
        assert result["image"]["id"] == UPLOADED["id"]
        assert result["image"]["preview_url"] == UPLOADED["preview_url"]
        assert result["upload_method"] == "ImgBB URL"
        assert result["staging_url"] == STAGED_URL
        assert result["parameters"]["prompt_upsampling"] is True
        assert result["parameters"]["output_quality"] == 90
        assert "raw" not in result["parameters"]
        assert UPLOADED["id"] in result["usage"]
        assert json.loads(uploads.calls.last.request.content)["file_name"] == "design.png"

    @respx.mock
    async def test_standard_model_direct_upload(self, defaults, replicate_service, service, png_bytes):
        defaults.set("model", STANDARD_MODEL_ID)
        pipeline = ImagePipeline(defaults, replicate=replicate_service, printify=service)
        replicate_service._client.async_run.return_value = png_bytes
        respx.post(f"{API}/v1/uploads/images.json").mock(return_value=httpx.Response(200, json=UPLOADED))

        result = await pipeline.generate_and_upload("a red bicycle", "design")

        assert result["upload_method"] == "Direct base64"
        assert "staging_url" not in result

    async def test_missing_printify_is_configuration_error(self, defaults, replicate_service):
        pipeline = ImagePipeline(defaults, replicate=replicate_service)
        with pytest.raises(ConfigurationError):
            await pipeline.generate_and_upload("p", "x")
        replicate_service._client.async_run.assert_not_awaited()
