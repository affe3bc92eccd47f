import io

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel

from printify_studio.errors import ImageProcessingError

MIME_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "webp": "image/webp",
}

# output format -> (Pillow format name, save options)
ENCODERS = {
    "png": ("PNG", {}),
    "jpeg": ("JPEG", {"quality": 100}),
    "jpg": ("JPEG", {"quality": 100}),
    "webp": ("WEBP", {"quality": 100}),
}


class ProcessedImage(BaseModel):
    data: bytes
    mime_type: str
    width: int
    height: int


def _open(data: bytes, output_format: str) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(
            f"Could not decode generated image as {output_format}: {e}", output_format
        ) from e
    return image


def process_image(data: bytes, output_format: str) -> ProcessedImage:
    """Re-encode ``data`` into ``output_format`` at maximum quality.

    Unknown formats keep the input bytes and report the decoded format's MIME type.
    """
    output_format = (output_format or "").lower()
    image = _open(data, output_format)

    encoder = ENCODERS.get(output_format)
    if encoder is None:
        mime_type = Image.MIME.get(image.format or "", "application/octet-stream")
        return ProcessedImage(data=data, mime_type=mime_type, width=image.width, height=image.height)

    pil_format, save_options = encoder
    if pil_format == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=pil_format, **save_options)
    except (OSError, ValueError) as e:
        raise ImageProcessingError(f"Could not encode image as {output_format}: {e}", output_format) from e

    encoded = buffer.getvalue()
    final = _open(encoded, output_format)
    return ProcessedImage(
        data=encoded,
        mime_type=MIME_TYPES[output_format],
        width=final.width,
        height=final.height,
    )


def final_file_name(file_name: str, output_format: str) -> str:
    extension = "jpg" if output_format == "jpeg" else output_format
    if not extension or file_name.endswith(f".{extension}"):
        return file_name
    return f"{file_name}.{extension}"
