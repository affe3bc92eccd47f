from typing import Any

REPLICATE_TIPS = [
    "Check that your REPLICATE_API_TOKEN is valid",
    "Try a different model using set_default",
    "Try a more descriptive prompt",
    "Try a different aspect ratio",
]

IMGBB_KEY_INSTRUCTION = (
    "Get a free API key from https://api.imgbb.com/ and add it to your .env file: "
    "IMGBB_API_KEY=your_api_key_here"
)


class PipelineError(Exception):
    """Failure of one step of the generate -> process -> upload pipeline.

    Tools never let these escape; ``handle_errors`` turns them into the
    payload returned by ``to_payload``.
    """

    step = "Pipeline"
    default_tips: list[str] = []

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        tips: list[str] | None = None,
        step: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.tips = list(tips) if tips is not None else list(self.default_tips)
        if step is not None:
            self.step = step

    def to_payload(self) -> dict:
        return {
            "error": True,
            "step": self.step,
            "message": self.message,
            "context": self.context,
            "tips": self.tips,
        }


class InvalidParameterError(PipelineError, ValueError):
    step = "Set Default"
    default_tips = ["Use get_defaults to see the current values and available models"]

    def __init__(self, name: str, value: Any, expected: str):
        super().__init__(
            f"Invalid value for {name}: {value!r}. Expected {expected}.",
            context={"option": name, "value": value, "expected": expected},
        )
        self.name = name
        self.value = value
        self.expected = expected


class BackendError(PipelineError):
    step = "Image Generation"
    default_tips = REPLICATE_TIPS

    def __init__(
        self,
        message: str,
        *,
        prompt: str | None = None,
        options: dict | None = None,
        model_id: str | None = None,
    ):
        super().__init__(
            f"Replicate API error: {message}",
            context={"prompt": prompt, "model": model_id, "options": options or {}},
        )
        self.prompt = prompt
        self.options = options or {}
        self.model_id = model_id


class UnsupportedOutputError(BackendError):
    pass


class ImageProcessingError(PipelineError):
    step = "Image Processing"
    default_tips = [
        "Make sure Pillow is installed with PNG, JPEG and WEBP support",
        "Try a different output format",
    ]

    def __init__(self, message: str, output_format: str):
        super().__init__(message, context={"output_format": output_format})
        self.output_format = output_format


class ConfigurationError(PipelineError):
    step = "Configuration"
    default_tips = ["Set the missing variable in your environment or .env file and restart the server"]

    def __init__(self, message: str, setting: str, *, step: str | None = None, context: dict | None = None):
        super().__init__(message, context={"setting": setting, **(context or {})}, step=step)
        self.setting = setting


class UploadError(PipelineError):
    step = "Printify Upload"
    default_tips = [
        "Check that your Printify API key is valid",
        "Ensure your Printify account is properly connected",
    ]

    def __init__(
        self,
        message: str,
        *,
        method: str,
        staging_url: str | None = None,
        response_data: Any = None,
        file_name: str | None = None,
        step: str | None = None,
        tips: list[str] | None = None,
    ):
        context = {"file_name": file_name, "upload_method": method}
        if staging_url:
            context["staging_url"] = staging_url
        if response_data is not None:
            context["response_data"] = response_data
        super().__init__(message, context=context, step=step, tips=tips)
        self.method = method
        self.staging_url = staging_url
        self.response_data = response_data
