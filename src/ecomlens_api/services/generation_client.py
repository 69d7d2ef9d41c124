"""Gemini image editing client."""

import base64
import binascii
import logging
import re
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ecomlens_api.config import get_settings
from ecomlens_api.errors.exceptions import (
    GenerationFailure,
    InvalidImageError,
    ModelUnavailableError,
    UpstreamServiceError,
)

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_OUTPUT_MIME_TYPE = "image/png"

_DATA_URI_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


def split_data_uri(image: str) -> tuple[str, str]:
    """
    Split an image string into (mime_type, base64 payload).

    Strings without a recognised data URI prefix are treated as bare JPEG
    base64.
    """
    match = _DATA_URI_PREFIX.match(image)
    if match is None:
        return DEFAULT_MIME_TYPE, image
    return f"image/{match.group(1)}", image[match.end() :]


def decode_image(image: str) -> tuple[str, bytes]:
    """
    Decode an image string into (mime_type, raw bytes).

    Raises:
        InvalidImageError: If the payload is not valid base64
    """
    mime_type, payload = split_data_uri(image)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError() from e
    if not data:
        raise InvalidImageError()
    return mime_type, data


def extract_first_image(response: Any) -> str | None:
    """Return the first inline image of a response as a data URI."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is None or not inline.data:
                continue
            mime_type = inline.mime_type or DEFAULT_OUTPUT_MIME_TYPE
            encoded = base64.b64encode(inline.data).decode("ascii")
            return f"data:{mime_type};base64,{encoded}"
    return None


class GenerationClient:
    """Edits a product image with a text instruction via Gemini."""

    def __init__(self, client: genai.Client | None = None, model: str | None = None):
        settings = get_settings()
        self._client = client
        self._api_key = settings.gemini_api_key
        self.model = model or settings.gemini_model

    @property
    def client(self) -> genai.Client:
        """Get the Gemini SDK client, creating it on first use."""
        if self._client is None:
            if not self._api_key:
                raise ModelUnavailableError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(self, source_image: str, instruction: str) -> str:
        """
        Run one edit and return the resulting image as a data URI.

        Args:
            source_image: Base64 image, optionally with a data URI prefix
            instruction: What to do with the product

        Raises:
            InvalidImageError: If the source image is not valid base64
            GenerationFailure: If the response holds no image
            UpstreamServiceError: If the SDK call fails
            ModelUnavailableError: If no API key is configured
        """
        mime_type, data = decode_image(source_image)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_text(text=instruction),
                    types.Part.from_bytes(data=data, mime_type=mime_type),
                ],
            )
        except genai_errors.APIError as e:
            logger.error("Gemini request failed (%s): %s", e.code, e.message)
            raise UpstreamServiceError(
                details={"upstream_status": e.code, "upstream_message": e.message}
            ) from e

        image = extract_first_image(response)
        if image is None:
            logger.warning("Gemini response held no image for instruction %.50r", instruction)
            raise GenerationFailure()
        return image


# Singleton instance
_generation_client: GenerationClient | None = None


def get_generation_client() -> GenerationClient:
    """Get generation client instance."""
    global _generation_client
    if _generation_client is None:
        _generation_client = GenerationClient()
    return _generation_client


def reset_generation_client() -> None:
    """Reset generation client (for testing)."""
    global _generation_client
    _generation_client = None
