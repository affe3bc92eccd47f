from typing import Any, Mapping

from pydantic import BaseModel

from printify_studio.generation.defaults import DefaultsStore
from printify_studio.generation.models import ULTRA_MODEL_ID

FALLBACK_ASPECT_RATIO = "1:1"
FALLBACK_OUTPUT_FORMAT = "png"

# call option / default name -> backend input field
COMMON_FIELDS = {
    "numInferenceSteps": "num_inference_steps",
    "guidanceScale": "guidance_scale",
    "negativePrompt": "negative_prompt",
    "safetyTolerance": "safety_tolerance",
}


class ResolvedInput(BaseModel):
    model_id: str | None
    input: dict[str, Any]


def _pick(name: str, options: Mapping[str, Any], defaults: Mapping[str, Any]):
    value = options.get(name)
    return value if value is not None else defaults.get(name)


def _resolve_geometry(options: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    if options.get("aspectRatio") is not None:
        return {"aspect_ratio": options["aspectRatio"]}
    if options.get("width") is not None and options.get("height") is not None:
        return {"width": options["width"], "height": options["height"]}
    if defaults.get("aspectRatio") is not None:
        return {"aspect_ratio": defaults["aspectRatio"]}
    if defaults.get("width") is not None and defaults.get("height") is not None:
        return {"width": defaults["width"], "height": defaults["height"]}
    return {"aspect_ratio": FALLBACK_ASPECT_RATIO}


def resolve_input(
    prompt: str,
    options: Mapping[str, Any] | None,
    defaults: DefaultsStore | Mapping[str, Any],
) -> ResolvedInput:
    """Merge per-call options over the stored defaults into a backend input.

    ``options`` and ``defaults`` use the defaults-store names (``aspectRatio``,
    ``numInferenceSteps``...); a ``None`` option counts as not provided. The
    defaults are read once, so a concurrent ``set`` cannot split a resolution.
    """
    options = options or {}
    if isinstance(defaults, DefaultsStore):
        defaults = defaults.get_all()

    model_id = _pick("model", options, defaults)
    payload: dict[str, Any] = {"prompt": prompt}

    if model_id == ULTRA_MODEL_ID:
        raw = _pick("raw", options, defaults)
        payload["raw"] = raw if raw is not None else False
        if options.get("imagePromptStrength") is not None:
            payload["image_prompt_strength"] = options["imagePromptStrength"]
    else:
        for name, field in (("promptUpsampling", "prompt_upsampling"), ("outputQuality", "output_quality")):
            value = _pick(name, options, defaults)
            if value is not None:
                payload[field] = value

    payload.update(_resolve_geometry(options, defaults))

    if options.get("seed") is not None:
        payload["seed"] = options["seed"]

    for name, field in COMMON_FIELDS.items():
        value = _pick(name, options, defaults)
        if value is not None:
            payload[field] = value

    payload["output_format"] = _pick("outputFormat", options, defaults) or FALLBACK_OUTPUT_FORMAT

    return ResolvedInput(model_id=model_id, input=payload)
