"""Per-variant API router: config, submit, results."""
import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile

from photobooth.core.config import get_settings
from photobooth.core.errors import ClientInputError, PhotoboothError, UpstreamServiceError
from photobooth.models.config import ConfigUpdate
from photobooth.models.response import SubmissionResult
from photobooth.models.submission import SubmissionForm, UploadedImage
from photobooth.services.configuration import ConfigurationService
from photobooth.services.results import ResultsService
from photobooth.services.submission import GENERIC_FAILURE_MESSAGE, SubmissionService
from photobooth.services.variants import Variant

logger = logging.getLogger(__name__)


def _service_from_state(request: Request, attribute: str) -> Any:
    """Return a service from app.state, or HTTP 503 when startup failed."""
    svc = getattr(request.app.state, attribute, None)
    if svc is None:
        raise HTTPException(
            status_code=503,
            detail="Service unavailable. Backend services are not initialized.",
        )
    return svc


def get_submission_service(request: Request) -> SubmissionService:
    return _service_from_state(request, "submission_service")


def get_configuration_service(request: Request) -> ConfigurationService:
    return _service_from_state(request, "configuration_service")


def get_results_service(request: Request) -> ResultsService:
    return _service_from_state(request, "results_service")


async def read_upload(image: Optional[UploadFile], max_bytes: int) -> Optional[UploadedImage]:
    """Load an uploaded image into memory, enforcing type and size limits.

    Returns None when no file part was sent; the submission pipeline reports
    the missing field.

    Raises:
        ClientInputError: Not an ``image/*`` upload, or larger than ``max_bytes``.
    """
    if image is None:
        return None
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise ClientInputError("Seuls les fichiers image sont autorisés")
    data = await image.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ClientInputError(f"Fichier trop volumineux (maximum {max_bytes // (1024 * 1024)} Mo)")
    return UploadedImage(data=data, content_type=content_type, filename=image.filename or "")


def _raw_answers(answers: Optional[list[str]]) -> Union[str, list[str], None]:
    """A single ``answers`` part is a JSON-encoded list; repeated parts are the list."""
    if not answers:
        return None
    if len(answers) == 1:
        return answers[0]
    return answers


def _admin_failure(variant: Variant, action: str, exc: Exception) -> UpstreamServiceError:
    logger.error(
        "%s failed",
        action,
        exc_info=True,
        extra={"variant": variant.name, "error_type": type(exc).__name__},
    )
    return UpstreamServiceError(GENERIC_FAILURE_MESSAGE)


def build_router(variant: Variant) -> APIRouter:
    """Create the ``/{variant}`` router.

    Errors raised as ``PhotoboothError`` are rendered by the application's
    exception handler; anything else from a collaborator becomes a 500.
    """
    router = APIRouter(prefix=f"/{variant.name}", tags=[variant.name])

    @router.get("/config")
    def get_config(
        service: ConfigurationService = Depends(get_configuration_service),
    ) -> dict:
        """Current configuration (auto-created for variants that allow it)."""
        try:
            config = service.get_config(variant)
        except PhotoboothError:
            raise
        except Exception as exc:
            raise _admin_failure(variant, "get_config", exc) from exc
        return config.model_dump(by_alias=True, mode="json")

    @router.post("/config")
    def update_config(
        body: ConfigUpdate,
        service: ConfigurationService = Depends(get_configuration_service),
    ) -> dict:
        """Replace the configuration (code, template, and questions for quizzes)."""
        try:
            config, message = service.update_config(variant, body)
        except PhotoboothError:
            raise
        except Exception as exc:
            raise _admin_failure(variant, "update_config", exc) from exc
        return {"message": message, "config": config.model_dump(by_alias=True, mode="json")}

    @router.post("/submit", response_model=SubmissionResult)
    async def submit(
        name: Optional[str] = Form(None),
        gender: Optional[str] = Form(None),
        code: Optional[str] = Form(None),
        answers: Optional[list[str]] = Form(None),
        image: Optional[UploadFile] = File(None),
        service: SubmissionService = Depends(get_submission_service),
    ) -> SubmissionResult:
        """Submit a photo (and quiz answers) for generation.

        Raises:
            ClientInputError 400: Missing/malformed fields or rejected file.
            AuthorizationError 403: Wrong code or missing configuration.
            UpstreamServiceError 500: Storage, generation or persistence failure.
        """
        uploaded = await read_upload(image, get_settings().max_upload_bytes)
        form = SubmissionForm(
            name=name, gender=gender, code=code, answers=_raw_answers(answers), image=uploaded
        )
        return await service.submit(variant, form)

    @router.get("/results")
    def get_results(
        page: int = Query(1),
        limit: int = Query(10),
        service: ResultsService = Depends(get_results_service),
    ) -> dict:
        """Paginated submissions, newest first."""
        try:
            results = service.list_results(variant, page=page, limit=limit)
        except PhotoboothError:
            raise
        except Exception as exc:
            raise _admin_failure(variant, "get_results", exc) from exc
        return results.model_dump(by_alias=True, mode="json")

    @router.delete("/results/{result_id}")
    @router.delete("/delete/{result_id}")
    def delete_result(
        result_id: str,
        service: ResultsService = Depends(get_results_service),
    ) -> dict:
        """Delete one submission and return it."""
        try:
            deleted = service.delete_result(variant, result_id)
        except PhotoboothError:
            raise
        except Exception as exc:
            raise _admin_failure(variant, "delete_result", exc) from exc
        return deleted.model_dump(by_alias=True, mode="json")

    return router
