"""Paginated listing and deletion of stored submissions."""
import logging
import math
from typing import TYPE_CHECKING

from photobooth.core.errors import ClientInputError, NotFoundError
from photobooth.models.response import DeleteResult, ResultsPage

if TYPE_CHECKING:
    from photobooth.services.repository import ResponseRepository
    from photobooth.services.variants import Variant

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Réponse supprimée avec succès"


class ResultsService:
    def __init__(self, repository: "ResponseRepository") -> None:
        self.repository = repository

    def list_results(self, variant: "Variant", page: int = 1, limit: int = 10) -> ResultsPage:
        """Return one page of submissions, newest first.

        ``current_page`` echoes ``page`` even when it is past the last page.
        """
        if page < 1 or limit < 1:
            raise ClientInputError("page et limit doivent être positifs")
        documents = self.repository.find_page(variant.name, offset=(page - 1) * limit, limit=limit)
        total = self.repository.count(variant.name)
        return ResultsPage(
            results=[variant.response_model.model_validate(doc) for doc in documents],
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_results=total,
        )

    def delete_result(self, variant: "Variant", response_id: str) -> DeleteResult:
        """Delete one submission and return it.

        The deletion completes before the caller gets a response.

        Raises:
            NotFoundError: No submission with this id.
        """
        document = self.repository.get(variant.name, response_id)
        if document is None:
            raise NotFoundError("Réponse introuvable")
        self.repository.delete(variant.name, response_id)
        logger.info(
            "Deleted submission %s",
            response_id,
            extra={"variant": variant.name, "response_id": response_id},
        )
        return DeleteResult(
            result=variant.response_model.model_validate(document),
            message=DELETED_MESSAGE,
        )
