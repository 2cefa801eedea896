"""Image service dispatcher used by the gateway image operation.

Role in pipeline:
    - Receives a validated prompt plus optional provider options.
    - Forwards only the options the caller actually set, so provider
      defaults apply to everything else.
    - Reshapes the first generated image into `ImageResult`.

Base64 and temporary files:
    - Base64 payloads are passed through untouched (`b64Json`).
    - No temporary files are created.

Error handling strategy:
    - Exceptions from the image capability are intentionally propagated.
"""

from app.core.types import ImageResult
from app.llm.base import ImageModel


def _option(value: str | None) -> str | None:
    """Trimmed option value, or `None` when blank."""
    if value is None or not value.strip():
        return None
    return value.strip()


def generate_image(
    image_model: ImageModel,
    prompt: str,
    model: str | None = None,
    quality: str | None = None,
    style: str | None = None,
) -> ImageResult:
    """Generate one image for `prompt`.

    Args:
        image_model: Image capability.
        prompt: Normalized, non-blank prompt.
        model: Optional provider model override.
        quality: Optional quality hint (`standard`, `hd`, ...).
        style: Optional style hint (`vivid`, `natural`, ...).

    Returns:
        `ImageResult` carrying a URL and/or base64 payload.
    """
    image = image_model.generate_image(
        prompt,
        model=_option(model),
        quality=_option(quality),
        style=_option(style),
    )

    return ImageResult(prompt=prompt, url=image.get("url"), b64_json=image.get("b64_json"))
