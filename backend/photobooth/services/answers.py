"""Quiz answer mapping and prompt variable construction."""
import json
from typing import Optional, Sequence, Union

from photobooth.core.errors import ClientInputError
from photobooth.models.config import Question

ANSWER_COUNT = 5
UNKNOWN_ANSWER_LABEL = "Réponse inconnue"
ANSWERS_SEPARATOR = "; "


def parse_answers(raw: Union[str, Sequence[str], None]) -> list[str]:
    """Decode submitted answers into exactly ``ANSWER_COUNT`` codes.

    Browsers send the list JSON-encoded inside the multipart form; API
    clients may already pass a list.

    Raises:
        ClientInputError: Answers are missing, undecodable, or not 5 entries.
    """
    if raw is None or raw == "":
        raise ClientInputError("Nom, genre, code, réponses et image sont requis")
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ClientInputError("Format des réponses invalide") from exc
    else:
        decoded = raw
    if not isinstance(decoded, list) or len(decoded) != ANSWER_COUNT:
        raise ClientInputError(f"{ANSWER_COUNT} réponses sont requises")
    return [str(answer) for answer in decoded]


def map_answers(answers: Sequence[str], questions: Sequence[Question]) -> list[str]:
    """Translate answer codes into option labels, position by position.

    An answer matching no option of its question yields
    ``UNKNOWN_ANSWER_LABEL``; a position with no question at all does too.
    """
    labels: list[str] = []
    for index, answer in enumerate(answers):
        label: Optional[str] = None
        if index < len(questions):
            label = next(
                (option.label for option in questions[index].options if option.value == answer),
                None,
            )
        labels.append(label if label is not None else UNKNOWN_ANSWER_LABEL)
    return labels


def build_answer_variables(labels: Sequence[str]) -> dict[str, str]:
    """Expose labels as ``answer1``..``answerN`` plus the joined ``answers``.

    Each label gets its own positional key; earlier deployments assigned
    ``answer4`` twice so the fourth label was lost and ``{{answer4}}`` showed
    the fifth one. That collision is not reproduced.
    """
    variables = {f"answer{index}": label for index, label in enumerate(labels, start=1)}
    variables["answers"] = ANSWERS_SEPARATOR.join(labels)
    return variables
