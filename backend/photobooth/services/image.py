"""Image generation clients.

Two modes are supported by every provider:

- edit: transform the participant's photo according to the prompt.
- generate: synthesize an image from the prompt alone.

Providers return a ``GeneratedImage`` holding either the image bytes or a
transient hosted URL; hosted URLs are downloaded with ``download_image`` so
that only our own object storage is referenced afterwards.
"""
import base64
import logging
from contextlib import contextmanager
from enum import Enum
from io import BytesIO
from typing import Any, BinaryIO, Iterator, Optional, Protocol

import httpx
from openai import AsyncOpenAI
from pydantic import BaseModel

from photobooth.core.config import Settings

logger = logging.getLogger(__name__)

GEMINI_IMAGE_MODEL = "gemini-3-pro-image-preview"
DEFAULT_IMAGE_CONTENT_TYPE = "image/png"


class GenerationMode(str, Enum):
    """How the image generation service is invoked."""

    edit = "edit"
    generate = "generate"


class GeneratedImage(BaseModel):
    """Provider output: bytes, or a URL to fetch them from."""

    data: Optional[bytes] = None
    url: Optional[str] = None
    content_type: str = DEFAULT_IMAGE_CONTENT_TYPE


class ImageGenerationClient(Protocol):
    async def edit(self, image: BinaryIO, filename: str, mime_type: str, prompt: str) -> GeneratedImage:
        ...

    async def generate(self, prompt: str, size: str) -> GeneratedImage:
        ...

    async def close(self) -> None:
        ...


@contextmanager
def image_stream(data: bytes, filename: str) -> Iterator[BytesIO]:
    """File-like handle over an in-memory image, closed on exit.

    Edit endpoints take a named file upload; the handle never touches disk.
    """
    stream = BytesIO(data)
    stream.name = filename
    try:
        yield stream
    finally:
        stream.close()
        logger.debug("Released image stream %s", filename)


async def download_image(http_client: httpx.AsyncClient, url: str) -> bytes:
    """Fetch image bytes from a provider-hosted URL.

    Raises:
        httpx.HTTPError: Network failure or non-2xx status.
    """
    response = await http_client.get(url)
    response.raise_for_status()
    return response.content


class OpenAIImageClient:
    """OpenAI Images API: ``images.edit`` for edit mode, ``images.generate`` for generate mode."""

    def __init__(
        self,
        api_key: str = "",
        edit_model: str = "gpt-image-1",
        generate_model: str = "dall-e-3",
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.edit_model = edit_model
        self.generate_model = generate_model
        self._client = client if client is not None else AsyncOpenAI(api_key=api_key)

    async def edit(self, image: BinaryIO, filename: str, mime_type: str, prompt: str) -> GeneratedImage:
        """Edit the supplied image and return the decoded ``b64_json`` bytes.

        Raises:
            RuntimeError: When the API returns no image data.
        """
        result = await self._client.images.edit(
            model=self.edit_model,
            image=(filename, image, mime_type),
            prompt=prompt,
        )
        encoded = getattr(_first_item(result), "b64_json", None)
        if not encoded:
            raise RuntimeError("No image data returned by OpenAI images.edit")
        return GeneratedImage(data=base64.b64decode(encoded))

    async def generate(self, prompt: str, size: str) -> GeneratedImage:
        """Generate from text only; the result is a hosted URL.

        Raises:
            RuntimeError: When the API returns no URL.
        """
        result = await self._client.images.generate(
            model=self.generate_model,
            prompt=prompt,
            n=1,
            size=size,  # type: ignore[arg-type]
            response_format="url",
        )
        url = getattr(_first_item(result), "url", None)
        if not url:
            raise RuntimeError("No image URL returned by OpenAI images.generate")
        return GeneratedImage(url=url)

    async def close(self) -> None:
        await self._client.close()


def _first_item(result: Any) -> Any:
    data = getattr(result, "data", None)
    if not data:
        raise RuntimeError("Empty response from OpenAI Images API")
    return data[0]


class GeminiImageClient:
    """Gemini image model on Vertex AI; both modes return inline bytes."""

    def __init__(self, project_id: str, location: str = "global", client: Any = None) -> None:
        self.project_id = project_id
        self.location = location
        self._client = client

    def _genai_client(self) -> Any:
        if self._client is None:
            from google import genai  # type: ignore[import-untyped]

            self._client = genai.Client(
                vertexai=True,
                project=self.project_id,
                location=self.location,
            )
        return self._client

    async def edit(self, image: BinaryIO, filename: str, mime_type: str, prompt: str) -> GeneratedImage:
        from google.genai import types  # type: ignore[import-untyped]

        contents: object = [
            types.Part(inline_data=types.Blob(data=image.read(), mime_type=mime_type)),
            types.Part(text=prompt),
        ]
        return await self._call_image_api(contents)

    async def generate(self, prompt: str, size: str) -> GeneratedImage:
        # Gemini picks its own output resolution; ``size`` is accepted for
        # protocol compatibility only.
        return await self._call_image_api(prompt)

    async def _call_image_api(self, contents: object) -> GeneratedImage:
        """Call the Gemini image model and return the first inline image with its MIME type.

        Raises:
            RuntimeError: When the API returns no image data.
        """
        from google.genai import types  # type: ignore[import-untyped]

        response = await self._genai_client().aio.models.generate_content(
            model=GEMINI_IMAGE_MODEL,
            contents=contents,
            config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )

        candidates = response.candidates
        if not candidates or candidates[0].content is None:
            raise RuntimeError("No candidates returned by Gemini Image API")

        for part in candidates[0].content.parts:
            if getattr(part, "inline_data", None) is not None:
                blob = part.inline_data
                mime_type = getattr(blob, "mime_type", None) or DEFAULT_IMAGE_CONTENT_TYPE
                return GeneratedImage(data=bytes(blob.data), content_type=mime_type)

        raise RuntimeError("No image data returned by Gemini Image API")

    async def close(self) -> None:
        return None


def build_image_client(settings: Settings) -> ImageGenerationClient:
    """Construct the provider selected by ``IMAGE_PROVIDER``.

    Raises:
        RuntimeError: The OpenAI provider is selected without an API key.
    """
    if settings.image_provider == "gemini":
        return GeminiImageClient(
            project_id=settings.gcp_project_id,
            location=settings.vertex_ai_location,
        )
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is not configured.")
    return OpenAIImageClient(
        api_key=settings.openai_api_key,
        edit_model=settings.openai_edit_model,
        generate_model=settings.openai_generate_model,
    )
