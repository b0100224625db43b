"""Per-variant configuration documents."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from photobooth.models.base import CamelModel


class QuestionOption(CamelModel):
    """One selectable answer: ``value`` is submitted, ``label`` is rendered."""

    label: str
    value: str


class Question(CamelModel):
    """Quiz question shown to adventurer participants."""

    text: str
    options: list[QuestionOption] = Field(default_factory=list)


class VariantConfig(CamelModel):
    """Singleton configuration shared by both variants."""

    code: str
    prompt_template: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class YearbookConfig(VariantConfig):
    """Yearbook configuration: access code and prompt template only."""


class AdventurerConfig(VariantConfig):
    """Adventurer configuration with its five quiz questions."""

    questions: list[Question] = Field(default_factory=list)


class ConfigUpdate(CamelModel):
    """Administrative replacement payload.

    Every field is optional here so that missing values are reported as a
    400 by the configuration service rather than a framework 422.
    """

    code: Optional[str] = None
    prompt_template: Optional[str] = None
    questions: Optional[list[Question]] = None
