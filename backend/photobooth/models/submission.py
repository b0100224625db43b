"""Inbound submission form."""
from typing import Optional, Union

from pydantic import BaseModel


class UploadedImage(BaseModel):
    """Image payload held in memory after upload parsing."""

    data: bytes
    content_type: str
    filename: str = ""


class SubmissionForm(BaseModel):
    """Raw multipart fields as received.

    Presence is not enforced here: the orchestrator validates the form as its
    first stage so that every variant reports missing input the same way.
    ``answers`` is either the JSON-encoded list sent by browsers or an
    already-decoded list.
    """

    name: Optional[str] = None
    gender: Optional[str] = None
    code: Optional[str] = None
    image: Optional[UploadedImage] = None
    answers: Optional[Union[str, list[str]]] = None
