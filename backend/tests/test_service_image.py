"""Tests for image generation clients and helpers."""
import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from photobooth.core.config import Settings
from photobooth.services.image import (
    GeminiImageClient,
    GeneratedImage,
    OpenAIImageClient,
    build_image_client,
    download_image,
    image_stream,
)


def _openai_client(result: object, method: str = "edit") -> MagicMock:
    client = MagicMock()
    setattr(client.images, method, AsyncMock(return_value=result))
    client.close = AsyncMock()
    return client


class TestImageStream:
    def test_named_handle_over_bytes(self) -> None:
        with image_stream(b"jpeg-bytes", "photo.jpeg") as stream:
            assert stream.name == "photo.jpeg"
            assert stream.read() == b"jpeg-bytes"
        assert stream.closed

    def test_closed_when_body_raises(self) -> None:
        with pytest.raises(RuntimeError):
            with image_stream(b"jpeg-bytes", "photo.jpeg") as stream:
                raise RuntimeError("generation failed")
        assert stream.closed


class TestDownloadImage:
    async def test_returns_body(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"hosted"))
        async with httpx.AsyncClient(transport=transport) as client:
            assert await download_image(client, "https://images.test/a.png") == b"hosted"

    async def test_raises_on_error_status(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await download_image(client, "https://images.test/expired.png")


class TestOpenAIImageClient:
    async def test_edit_decodes_b64(self) -> None:
        encoded = base64.b64encode(b"generated").decode()
        client = _openai_client(SimpleNamespace(data=[SimpleNamespace(b64_json=encoded)]))
        svc = OpenAIImageClient(client=client)

        with image_stream(b"photo", "photo.png") as stream:
            result = await svc.edit(stream, "photo.png", "image/png", "a prompt")

        assert result == GeneratedImage(data=b"generated")
        kwargs = client.images.edit.call_args.kwargs
        assert kwargs["model"] == "gpt-image-1"
        assert kwargs["prompt"] == "a prompt"
        assert kwargs["image"][0] == "photo.png"
        assert kwargs["image"][2] == "image/png"

    async def test_edit_without_image_data_raises(self) -> None:
        client = _openai_client(SimpleNamespace(data=[SimpleNamespace(b64_json=None)]))
        with pytest.raises(RuntimeError):
            await OpenAIImageClient(client=client).edit(MagicMock(), "p.png", "image/png", "x")

    async def test_generate_returns_hosted_url(self) -> None:
        client = _openai_client(
            SimpleNamespace(data=[SimpleNamespace(url="https://openai.test/img.png")]),
            method="generate",
        )
        result = await OpenAIImageClient(client=client).generate("a prompt", "1024x1024")

        assert result.url == "https://openai.test/img.png"
        assert result.data is None
        kwargs = client.images.generate.call_args.kwargs
        assert kwargs["model"] == "dall-e-3"
        assert kwargs["size"] == "1024x1024"
        assert kwargs["n"] == 1
        assert kwargs["response_format"] == "url"

    async def test_generate_empty_response_raises(self) -> None:
        client = _openai_client(SimpleNamespace(data=[]), method="generate")
        with pytest.raises(RuntimeError):
            await OpenAIImageClient(client=client).generate("x", "1024x1024")

    async def test_close_closes_sdk_client(self) -> None:
        client = _openai_client(None)
        await OpenAIImageClient(client=client).close()
        client.close.assert_awaited_once()


def _gemini_response(parts: list) -> SimpleNamespace:
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


class TestGeminiImageClient:
    async def test_edit_sends_image_and_prompt(self) -> None:
        genai_client = MagicMock()
        genai_client.aio.models.generate_content = AsyncMock(
            return_value=_gemini_response([SimpleNamespace(inline_data=SimpleNamespace(data=b"gem"))])
        )
        svc = GeminiImageClient(project_id="p", client=genai_client)

        with image_stream(b"photo", "photo.png") as stream:
            result = await svc.edit(stream, "photo.png", "image/png", "a prompt")

        assert result.data == b"gem"
        contents = genai_client.aio.models.generate_content.call_args.kwargs["contents"]
        assert contents[0].inline_data.data == b"photo"
        assert contents[1].text == "a prompt"

    async def test_generate_returns_bytes(self) -> None:
        genai_client = MagicMock()
        genai_client.aio.models.generate_content = AsyncMock(
            return_value=_gemini_response(
                [SimpleNamespace(inline_data=None), SimpleNamespace(inline_data=SimpleNamespace(data=b"gem"))]
            )
        )
        result = await GeminiImageClient(project_id="p", client=genai_client).generate("x", "1024x1024")
        assert result.data == b"gem"
        assert result.url is None

    async def test_returns_part_mime_type(self) -> None:
        genai_client = MagicMock()
        genai_client.aio.models.generate_content = AsyncMock(
            return_value=_gemini_response(
                [SimpleNamespace(inline_data=SimpleNamespace(data=b"jpg", mime_type="image/jpeg"))]
            )
        )
        result = await GeminiImageClient(project_id="p", client=genai_client).generate("x", "1024x1024")
        assert result.content_type == "image/jpeg"

    async def test_missing_mime_type_defaults_to_png(self) -> None:
        genai_client = MagicMock()
        genai_client.aio.models.generate_content = AsyncMock(
            return_value=_gemini_response([SimpleNamespace(inline_data=SimpleNamespace(data=b"x", mime_type=None))])
        )
        result = await GeminiImageClient(project_id="p", client=genai_client).generate("x", "1024x1024")
        assert result.content_type == "image/png"

    async def test_no_candidates_raises(self) -> None:
        genai_client = MagicMock()
        genai_client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(candidates=[]))
        with pytest.raises(RuntimeError):
            await GeminiImageClient(project_id="p", client=genai_client).generate("x", "1024x1024")


class TestBuildImageClient:
    def test_openai_by_default(self) -> None:
        assert isinstance(build_image_client(Settings(_env_file=None)), OpenAIImageClient)

    def test_openai_requires_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "")
        with pytest.raises(RuntimeError):
            build_image_client(Settings(_env_file=None))

    def test_gemini_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IMAGE_PROVIDER", "gemini")
        client = build_image_client(Settings(_env_file=None))
        assert isinstance(client, GeminiImageClient)
        assert client.project_id == "test-project"
