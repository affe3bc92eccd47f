from pydantic import BaseModel

STANDARD_MODEL_ID = "black-forest-labs/flux-1.1-pro"
ULTRA_MODEL_ID = "black-forest-labs/flux-1.1-pro-ultra"

PROMPT_UPSAMPLING = "prompt_upsampling"
OUTPUT_QUALITY = "output_quality"
RAW_MODE = "raw_mode"
HIGH_RESOLUTION = "high_resolution"
IMAGE_PROMPT_STRENGTH = "image_prompt_strength"


class ModelDescriptor(BaseModel):
    id: str
    display_name: str
    description: str
    capabilities: frozenset[str]

    model_config = {"frozen": True}

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities


AVAILABLE_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        id=STANDARD_MODEL_ID,
        display_name="Flux 1.1 Pro",
        description="Standard quality image generation with prompt upsampling",
        capabilities=frozenset({PROMPT_UPSAMPLING, OUTPUT_QUALITY}),
    ),
    ModelDescriptor(
        id=ULTRA_MODEL_ID,
        display_name="Flux 1.1 Pro Ultra",
        description="High resolution image generation (up to 4MP) with raw mode option",
        capabilities=frozenset({RAW_MODE, HIGH_RESOLUTION, IMAGE_PROMPT_STRENGTH}),
    ),
)


def list_models() -> list[ModelDescriptor]:
    return list(AVAILABLE_MODELS)


def get_model(model_id: str | None) -> ModelDescriptor | None:
    return next((m for m in AVAILABLE_MODELS if m.id == model_id), None)


def is_known_model(model_id) -> bool:
    return get_model(model_id) is not None


def requires_hosted_upload(model_id: str | None) -> bool:
    """High resolution models produce payloads too large for inline base64 uploads."""
    model = get_model(model_id)
    return model is not None and model.supports(HIGH_RESOLUTION)
