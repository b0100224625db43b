"""Read and replace per-variant configuration."""
import logging
from typing import TYPE_CHECKING, Any

from photobooth.core.errors import ClientInputError, NotFoundError
from photobooth.models.config import ConfigUpdate, VariantConfig
from photobooth.services.answers import ANSWER_COUNT

if TYPE_CHECKING:
    from photobooth.services.repository import ConfigRepository
    from photobooth.services.variants import Variant

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Nouvelle config créée avec succès"
UPDATED_MESSAGE = "Config mise à jour avec succès"


class ConfigurationService:
    """Administrative access to the configuration singletons."""

    def __init__(self, repository: "ConfigRepository") -> None:
        self.repository = repository

    def get_config(self, variant: "Variant") -> VariantConfig:
        """Return the configuration, letting the variant policy handle absence.

        Raises:
            NotFoundError: The variant requires an explicit configuration
                and none has been created yet.
        """
        config = variant.policy.load(self.repository, variant)
        if config is None:
            raise NotFoundError("Config not found")
        return config

    def update_config(self, variant: "Variant", payload: ConfigUpdate) -> tuple[VariantConfig, str]:
        """Replace every configuration field at once.

        Returns:
            The stored configuration and a created/updated message.

        Raises:
            ClientInputError: Code or template missing, or a quiz variant
                not given exactly ``ANSWER_COUNT`` questions.
        """
        questions = payload.questions or []
        if variant.requires_answers:
            if not (payload.code and payload.prompt_template) or len(questions) != ANSWER_COUNT:
                raise ClientInputError(
                    f"Le code, le template de prompt et {ANSWER_COUNT} questions sont requis."
                )
        elif not payload.code or not payload.prompt_template:
            raise ClientInputError("Le code et le template de prompt sont requis.")

        data: dict[str, Any] = {"code": payload.code, "prompt_template": payload.prompt_template}
        if variant.requires_answers:
            data["questions"] = [question.model_dump() for question in questions]

        existing = self.repository.get(variant.name)
        if existing is not None:
            data["created_at"] = existing.get("created_at")
        stored = self.repository.save(variant.name, data)

        message = UPDATED_MESSAGE if existing is not None else CREATED_MESSAGE
        logger.info("%s: %s", variant.name, message, extra={"variant": variant.name})
        return variant.config_model.model_validate(stored), message
