"""画像生成パラメータのデフォルト値（プロセス内で共有）

出力サイズは AspectRatio か Dimensions のどちらか一方だけを保持する。
aspectRatio を設定すると width/height は消え、width か height を設定すると aspectRatio が消える。
"""

import copy
import logging
import re
from typing import Any, Callable

from pydantic import BaseModel

from printify_studio.errors import InvalidParameterError
from printify_studio.generation.models import AVAILABLE_MODELS, ULTRA_MODEL_ID, is_known_model

logger = logging.getLogger(__name__)

ASPECT_RATIO_PATTERN = re.compile(r"^[1-9]\d*:[1-9]\d*$")
OUTPUT_FORMATS = ("png", "jpeg", "jpg", "webp")

GEOMETRY_KEYS = ("aspectRatio", "width", "height")

FACTORY_DEFAULTS: dict[str, Any] = {
    "model": ULTRA_MODEL_ID,
    "aspectRatio": "1:1",
    "outputFormat": "png",
    "numInferenceSteps": 25,
    "guidanceScale": 7.5,
    "negativePrompt": "low quality, bad quality, sketches",
    "safetyTolerance": 2,
    "raw": False,
    "promptUpsampling": True,
    "outputQuality": 90,
}


class AspectRatio(BaseModel):
    value: str

    model_config = {"frozen": True}


class Dimensions(BaseModel):
    width: int | float | None = None
    height: int | float | None = None

    model_config = {"frozen": True}


Geometry = AspectRatio | Dimensions


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _positive_number(value) -> bool:
    return _is_number(value) and value > 0


def _valid_model(value) -> bool:
    return isinstance(value, str) and is_known_model(value)


def _valid_aspect_ratio(value) -> bool:
    return isinstance(value, str) and ASPECT_RATIO_PATTERN.match(value) is not None


# name -> (check, expected constraint)
VALIDATION_RULES: dict[str, tuple[Callable[[Any], bool], str]] = {
    "model": (
        _valid_model,
        "one of the available models: " + ", ".join(m.id for m in AVAILABLE_MODELS),
    ),
    "aspectRatio": (_valid_aspect_ratio, 'format "width:height" (e.g., "16:9")'),
    "outputFormat": (
        lambda v: isinstance(v, str) and v in OUTPUT_FORMATS,
        "one of the supported formats: " + ", ".join(OUTPUT_FORMATS),
    ),
    "width": (_positive_number, "a positive number"),
    "height": (_positive_number, "a positive number"),
    "numInferenceSteps": (_positive_number, "a positive number"),
    "safetyTolerance": (_positive_number, "a positive number"),
    "outputQuality": (_positive_number, "a positive number"),
    "guidanceScale": (lambda v: _is_number(v) and 1 <= v <= 20, "a number between 1 and 20"),
    "raw": (lambda v: isinstance(v, bool), "a boolean"),
    "promptUpsampling": (lambda v: isinstance(v, bool), "a boolean"),
    "negativePrompt": (lambda v: isinstance(v, str), "a string"),
}


def validate_parameter(name: str, value: Any) -> None:
    rule = VALIDATION_RULES.get(name)
    if rule is None:
        return
    check, expected = rule
    if not check(value):
        raise InvalidParameterError(name, value, expected)


class DefaultsStore:
    def __init__(self, initial: dict[str, Any] | None = None):
        values = dict(FACTORY_DEFAULTS if initial is None else initial)
        self._geometry: Geometry = self._initial_geometry(values)
        self._values = {k: v for k, v in values.items() if k not in GEOMETRY_KEYS}

    @staticmethod
    def _initial_geometry(values: dict[str, Any]) -> Geometry:
        if values.get("aspectRatio") is not None:
            return AspectRatio(value=values["aspectRatio"])
        return Dimensions(width=values.get("width"), height=values.get("height"))

    def get(self, name: str) -> Any:
        if name in GEOMETRY_KEYS:
            return self._geometry_fields().get(name)
        return self._values.get(name)

    def get_all(self) -> dict[str, Any]:
        values = copy.deepcopy(self._values)
        values.update(self._geometry_fields())
        return values

    def set(self, name: str, value: Any) -> None:
        validate_parameter(name, value)

        if name == "aspectRatio":
            self._geometry = AspectRatio(value=value)
        elif name in ("width", "height"):
            current = self._geometry if isinstance(self._geometry, Dimensions) else Dimensions()
            self._geometry = current.model_copy(update={name: value})
        else:
            self._values[name] = value
        logger.info(f"Default {name} set to: {value}")

    def _geometry_fields(self) -> dict[str, Any]:
        if isinstance(self._geometry, AspectRatio):
            return {"aspectRatio": self._geometry.value}
        fields = {}
        if self._geometry.width is not None:
            fields["width"] = self._geometry.width
        if self._geometry.height is not None:
            fields["height"] = self._geometry.height
        return fields
