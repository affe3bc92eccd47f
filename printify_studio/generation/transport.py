import base64
import logging

import httpx
from pydantic import BaseModel

from printify_studio.errors import IMGBB_KEY_INSTRUCTION, ConfigurationError, UploadError
from printify_studio.generation.models import requires_hosted_upload
from printify_studio.services.imgbb import ImgBBService
from printify_studio.services.printify import PrintifyService

logger = logging.getLogger(__name__)

METHOD_IMGBB = "imgbb"
METHOD_DIRECT = "direct"


class UploadDescriptor(BaseModel):
    id: str
    file_name: str | None = None
    width: int | None = None
    height: int | None = None
    preview_url: str | None = None

    model_config = {"extra": "allow"}


class UploadResult(BaseModel):
    descriptor: UploadDescriptor
    method: str
    staging_url: str | None = None


def _response_data(exc: Exception):
    response = getattr(exc, "response", None)
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def ensure_transport_available(model_id: str | None, hosting: ImgBBService | None) -> None:
    if requires_hosted_upload(model_id) and hosting is None:
        raise ConfigurationError(
            f"The {model_id} model generates high-resolution images that are too large for "
            "direct base64 upload. You MUST set the IMGBB_API_KEY environment variable "
            f"when using this model. {IMGBB_KEY_INSTRUCTION}",
            "IMGBB_API_KEY",
            step="Transport Selection",
            context={"model": model_id},
        )


async def select_and_upload(
    data: bytes,
    file_name: str,
    model_id: str | None,
    printify: PrintifyService,
    hosting: ImgBBService | None,
) -> UploadResult:
    """ImgBB の URL か base64 で Printify にアップロードする

    高解像度モデルは ImgBB 必須。それ以外は ImgBB に失敗したら base64 にフォールバックする。
    """
    ensure_transport_available(model_id, hosting)
    hosted_only = requires_hosted_upload(model_id)

    staging_url = None
    if hosting is not None:
        try:
            staging_url = await hosting.upload(data)
        except (httpx.HTTPError, ValueError) as e:
            if hosted_only:
                raise UploadError(
                    f"Error uploading to ImgBB: {e}. When using the {model_id} model, "
                    "ImgBB upload is required and cannot be bypassed.",
                    method=METHOD_IMGBB,
                    response_data=_response_data(e),
                    file_name=file_name,
                    step="Image Hosting",
                    tips=["Check that your IMGBB_API_KEY is valid", "Try again in a few moments"],
                ) from e
            logger.warning(f"Error uploading to ImgBB: {e}. Falling back to direct base64 upload.")
    else:
        logger.info("No ImgBB API key found. Using direct base64 upload.")

    method = METHOD_IMGBB if staging_url else METHOD_DIRECT
    try:
        if staging_url:
            response = await printify.upload_image(file_name=file_name, url=staging_url)
        else:
            response = await printify.upload_image(
                file_name=file_name, contents=base64.b64encode(data).decode("ascii")
            )
        descriptor = UploadDescriptor.model_validate(response)
    except (httpx.HTTPError, ValueError) as e:
        raise UploadError(
            f"Error uploading to Printify: {e}",
            method=method,
            staging_url=staging_url,
            response_data=_response_data(e),
            file_name=file_name,
        ) from e

    logger.info(f"Successfully uploaded image to Printify using {method}. Image ID: {descriptor.id}")
    return UploadResult(descriptor=descriptor, method=method, staging_url=staging_url)
