"""Image generation for story illustrations.

Uses Google Gemini's image generation capability via the google-genai SDK.
Every failure is reported as ``None`` so callers can substitute a default.
"""

from __future__ import annotations

import logging
from pathlib import Path

from google import genai
from google.genai import types

from topstories.shared.files import atomic_write_bytes

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_TIMEOUT = 60


class ImageGenerator:
    """Generate story illustrations via Google Gemini."""

    def __init__(
        self,
        api_key: str = "",
        *,
        model: str = DEFAULT_MODEL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client: genai.Client | None = None

    def is_configured(self) -> bool:
        """Check whether an API key is available."""
        return bool(self.api_key.strip())

    def _get_client(self) -> genai.Client:
        """Lazy-create and cache the genai Client."""
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=self.timeout * 1000),
            )
        return self._client

    def generate(
        self,
        prompt: str,
        *,
        output_path: Path,
        aspect_ratio: str = "4:3",
    ) -> Path | None:
        """Generate an image from a text prompt and save it to disk.

        Args:
            prompt: Description of the desired image.
            output_path: Where to write the generated image file.
            aspect_ratio: Image aspect ratio (default "4:3").

        Returns:
            The output_path on success, or None if generation failed,
            the response carried no image, or the service is not configured.
        """
        if not self.is_configured():
            logger.warning("Image generation not configured, skipping")
            return None

        try:
            client = self._get_client()
            response = client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_modalities=["TEXT", "IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
                ),
            )
            blob = _first_image(response)
        except Exception:
            logger.warning("Image generation failed for prompt: %s", prompt[:80], exc_info=True)
            return None

        if blob is None:
            logger.warning("No image data in response for prompt: %s", prompt[:80])
            return None

        try:
            atomic_write_bytes(output_path, blob.data)
        except OSError as exc:
            logger.warning("Error writing image %s: %s", output_path, exc)
            return None
        logger.info("Saved generated image (%s) to %s", blob.mime_type, output_path)
        return output_path


def _first_image(response: types.GenerateContentResponse) -> types.Blob | None:
    """Return the first inline image of the first candidate, if any."""
    # response.parts is None when candidates, content or parts are missing.
    for part in response.parts or []:
        if part.inline_data is not None and part.inline_data.data:
            return part.inline_data
    return None
