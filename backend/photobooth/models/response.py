"""Submission records and API payloads."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field, SerializeAsAny

from photobooth.models.base import CamelModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Gender(str, Enum):
    """Genders accepted by the adventurer variant."""

    homme = "Homme"
    femme = "Femme"
    autre = "Autre"


class ResponseRecord(CamelModel):
    """One persisted submission.

    ``code`` is the code supplied at submission time, stored for audit and
    never re-validated. ``created_at`` drives the default newest-first order.
    """

    id: Optional[str] = None
    name: str
    gender: str
    code: str
    original_image_url: str
    generated_image_url: Optional[str] = None
    prompt: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class YearbookResponse(ResponseRecord):
    """Yearbook submission: gender is free text."""


class AdventurerResponse(ResponseRecord):
    """Adventurer submission with the raw quiz answer codes."""

    model_config = ConfigDict(use_enum_values=True)

    gender: Gender
    answers: list[str] = Field(default_factory=list)


class SubmissionResult(CamelModel):
    """Body returned to the participant after a successful submission."""

    original_image_url: str
    generated_image_url: str
    message: str


class ResultsPage(CamelModel):
    """One page of submissions, newest first."""

    results: list[SerializeAsAny[ResponseRecord]]
    current_page: int
    total_pages: int
    total_results: int


class DeleteResult(CamelModel):
    result: SerializeAsAny[ResponseRecord]
    message: str
