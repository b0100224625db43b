"""SubmissionService: the photo submission pipeline shared by every variant."""
import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, cast

import httpx

from photobooth.core.errors import ClientInputError, PhotoboothError, UpstreamServiceError
from photobooth.core.logging import setup_logging
from photobooth.models.config import VariantConfig
from photobooth.models.response import SubmissionResult
from photobooth.models.submission import SubmissionForm, UploadedImage
from photobooth.services.access import check_access_code
from photobooth.services.answers import parse_answers
from photobooth.services.image import (
    GeneratedImage,
    GenerationMode,
    ImageGenerationClient,
    download_image,
    image_stream,
)
from photobooth.services.prompt import render_prompt
from photobooth.services.storage import BlobStore, make_object_key

if TYPE_CHECKING:
    from photobooth.services.repository import ConfigRepository, ResponseRepository
    from photobooth.services.variants import Variant

logger = setup_logging("submission")

GENERIC_FAILURE_MESSAGE = "Internal server error"


class SubmissionStage(str, Enum):
    """Pipeline stages, in order. A submission never moves backwards."""

    received = "received"
    validated = "validated"
    code_checked = "code_checked"
    original_uploaded = "original_uploaded"
    prompt_rendered = "prompt_rendered"
    generation_requested = "generation_requested"
    generated_uploaded = "generated_uploaded"
    persisted = "persisted"
    responded = "responded"


class SubmissionService:
    """Orchestrates one photo submission end to end.

    Steps:
    1. Validate required fields (and the 5 answers for quiz variants)
    2. Load the variant configuration through its policy
    3. Check the access code (and that answers match the configured questions)
    4. Upload the original photo to object storage
    5. Map answers and render the prompt
    6. Call the image generation service (edit or generate mode)
    7. Upload the generated image to object storage
    8. Persist the submission record

    Failures in steps 1-3 are client errors and have no side effects.
    Failures from step 4 on surface as ``UpstreamServiceError``; anything
    already uploaded stays in storage, nothing is rolled back or retried.

    Collaborators are injected so each can be replaced in tests; no state
    is kept between submissions and the configuration is re-read every time.
    """

    def __init__(
        self,
        config_repository: "ConfigRepository",
        response_repository: "ResponseRepository",
        blob_store: BlobStore,
        image_client: ImageGenerationClient,
        http_client: httpx.AsyncClient,
        generate_size: str = "1024x1024",
    ) -> None:
        self.config_repository = config_repository
        self.response_repository = response_repository
        self.blob_store = blob_store
        self.image_client = image_client
        self.http_client = http_client
        self.generate_size = generate_size

    async def submit(self, variant: "Variant", form: SubmissionForm) -> SubmissionResult:
        """Run the pipeline for one submission.

        Args:
            variant: The product the submission belongs to.
            form: Raw submitted fields and the in-memory image.

        Returns:
            SubmissionResult with both image URLs and a success message.

        Raises:
            ClientInputError: Missing or malformed fields (400).
            AuthorizationError: Wrong code or no configuration (403).
            UpstreamServiceError: Storage, generation or persistence failed (500).
        """
        stage = SubmissionStage.received
        answers = self._validate(variant, form)
        # _validate guarantees these are present.
        name: str = form.name  # type: ignore[assignment]
        gender: str = form.gender  # type: ignore[assignment]
        code: str = form.code  # type: ignore[assignment]
        image: UploadedImage = form.image  # type: ignore[assignment]
        stage = self._advance(variant, SubmissionStage.validated)

        try:
            config: Optional[VariantConfig] = await asyncio.to_thread(
                variant.policy.load, self.config_repository, variant
            )
        except Exception as exc:
            raise self._upstream_failure(variant, stage, exc) from exc

        check_access_code(code, config)
        config = cast(VariantConfig, config)
        if variant.requires_answers and len(getattr(config, "questions", [])) != len(answers):
            raise ClientInputError("Le nombre de réponses ne correspond pas aux questions")
        stage = self._advance(variant, SubmissionStage.code_checked)

        try:
            original_key = make_object_key(variant.name, "original", image.content_type)
            original_url = await asyncio.to_thread(
                self.blob_store.upload, original_key, image.data, image.content_type
            )
            stage = self._advance(variant, SubmissionStage.original_uploaded)

            variables = variant.build_variables(name, gender, config, answers)
            prompt = render_prompt(config.prompt_template, variables)
            stage = self._advance(variant, SubmissionStage.prompt_rendered)

            generated = await self._request_generation(variant, image, original_key, prompt)
            stage = self._advance(variant, SubmissionStage.generation_requested)

            generated_url = await self._store_generated(variant, generated)
            stage = self._advance(variant, SubmissionStage.generated_uploaded)

            record_fields: dict[str, Any] = {
                "name": name,
                "gender": gender,
                "code": code,
                "original_image_url": original_url,
                "generated_image_url": generated_url,
                "prompt": prompt,
            }
            if variant.requires_answers:
                record_fields["answers"] = answers
            record = variant.response_model(**record_fields)
            response_id = await asyncio.to_thread(
                self.response_repository.add, variant.name, record.model_dump(exclude={"id"})
            )
            stage = self._advance(variant, SubmissionStage.persisted)
        except PhotoboothError:
            raise
        except Exception as exc:
            raise self._upstream_failure(variant, stage, exc) from exc

        logger.info(
            "Submission stored: variant=%s id=%s",
            variant.name,
            response_id,
            extra={"variant": variant.name, "response_id": response_id},
        )
        self._advance(variant, SubmissionStage.responded)
        return SubmissionResult(
            original_image_url=original_url,
            generated_image_url=generated_url,
            message=variant.success_message,
        )

    def _validate(self, variant: "Variant", form: SubmissionForm) -> list[str]:
        """Check presence of every required field before any external call.

        Returns:
            Parsed answer codes (empty for variants without a quiz).
        """
        if not (form.name and form.gender and form.code and form.image and form.image.data):
            if variant.requires_answers:
                raise ClientInputError("Nom, genre, code, réponses et image sont requis")
            raise ClientInputError("Nom, genre, code et image sont requis")

        answers: list[str] = []
        if variant.requires_answers:
            answers = parse_answers(form.answers)

        if variant.allowed_genders is not None and form.gender not in variant.allowed_genders:
            raise ClientInputError(f"Genre invalide, valeurs acceptées : {', '.join(variant.allowed_genders)}")
        return answers

    async def _request_generation(
        self,
        variant: "Variant",
        image: UploadedImage,
        filename: str,
        prompt: str,
    ) -> GeneratedImage:
        if variant.generation_mode is GenerationMode.edit:
            with image_stream(image.data, filename) as stream:
                return await self.image_client.edit(stream, filename, image.content_type, prompt)
        return await self.image_client.generate(prompt, self.generate_size)

    async def _store_generated(self, variant: "Variant", generated: GeneratedImage) -> str:
        """Upload generated bytes to our own storage, downloading hosted URLs first."""
        data = generated.data
        if data is None:
            if not generated.url:
                raise RuntimeError("Image generation returned neither bytes nor a URL")
            data = await download_image(self.http_client, generated.url)
        key = make_object_key(variant.name, "generated", generated.content_type)
        return await asyncio.to_thread(self.blob_store.upload, key, data, generated.content_type)

    def _advance(self, variant: "Variant", stage: SubmissionStage) -> SubmissionStage:
        logger.debug(
            "Submission stage: %s",
            stage.value,
            extra={"variant": variant.name, "stage": stage.value},
        )
        return stage

    def _upstream_failure(
        self,
        variant: "Variant",
        stage: SubmissionStage,
        exc: Exception,
    ) -> UpstreamServiceError:
        logger.error(
            "Submission failed after stage %s: %s: %s",
            stage.value,
            type(exc).__name__,
            exc,
            exc_info=True,
            extra={"variant": variant.name, "stage": stage.value, "error_type": type(exc).__name__},
        )
        return UpstreamServiceError(GENERIC_FAILURE_MESSAGE)
