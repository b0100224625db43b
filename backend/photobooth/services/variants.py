"""Variant descriptors and their configuration policies.

Yearbook and adventurer run the same submission pipeline; a ``Variant``
captures everything that differs between them so the orchestrator, the
configuration service and the router stay generic.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Sequence

from photobooth.core.config import Settings
from photobooth.models.config import AdventurerConfig, Question, VariantConfig, YearbookConfig
from photobooth.models.response import AdventurerResponse, Gender, ResponseRecord, YearbookResponse
from photobooth.services.answers import build_answer_variables, map_answers
from photobooth.services.image import GenerationMode

if TYPE_CHECKING:
    from photobooth.services.repository import ConfigRepository

logger = logging.getLogger(__name__)

AnswerMapper = Callable[[Sequence[str], Sequence[Question]], list[str]]


class ConfigurationPolicy(Protocol):
    """Decides what a missing configuration means for a variant."""

    def load(self, repository: "ConfigRepository", variant: "Variant") -> Optional[VariantConfig]:
        ...


class RequireConfiguration:
    """The configuration must have been created by an administrator."""

    def load(self, repository: "ConfigRepository", variant: "Variant") -> Optional[VariantConfig]:
        data = repository.get(variant.name)
        if data is None:
            return None
        return variant.config_model.model_validate(data)


class AutoCreateConfiguration:
    """Persist and return defaults the first time the configuration is read."""

    def __init__(self, default_factory: Callable[[], VariantConfig]) -> None:
        self.default_factory = default_factory

    def load(self, repository: "ConfigRepository", variant: "Variant") -> Optional[VariantConfig]:
        data = repository.get(variant.name)
        if data is None:
            default = self.default_factory()
            data = repository.save(variant.name, default.model_dump())
            logger.info("Created default configuration", extra={"variant": variant.name})
        return variant.config_model.model_validate(data)


@dataclass(frozen=True)
class Variant:
    """One product sharing the submission pipeline."""

    name: str
    config_model: type[VariantConfig]
    response_model: type[ResponseRecord]
    policy: ConfigurationPolicy
    generation_mode: GenerationMode
    success_message: str
    answer_mapper: Optional[AnswerMapper] = None
    allowed_genders: Optional[tuple[str, ...]] = None

    @property
    def requires_answers(self) -> bool:
        return self.answer_mapper is not None

    def build_variables(
        self,
        name: str,
        gender: str,
        config: VariantConfig,
        answers: Sequence[str] = (),
    ) -> dict[str, str]:
        """Prompt variables for one submission."""
        variables = {"name": name, "gender": gender}
        if self.answer_mapper is not None:
            questions = getattr(config, "questions", [])
            variables.update(build_answer_variables(self.answer_mapper(answers, questions)))
        return variables


ADVENTURER_DEFAULT_CODE = "Mci"

ADVENTURER_DEFAULT_TEMPLATE = """Create a premium-quality profile image of an adventurer named {{name}}, of gender {{gender}}, based on the provided reference image for facial resemblance. 

Their style and context should be inspired by the following answers:
- Type of adventurer: {{answer1}}
- Companion: {{answer2}}
- Signature item: {{answer3}}
- Setting: {{answer4}}
- Clothing style: {{answer5}}

Use the reference image to ensure that the face, gender, and key physical features of the user are accurately represented. Do not significantly alter the person's apparent age or identity. The rest of the body, outfit, and background can be generated according to the answers to reflect an adventurous, colorful, and cinematic style.

The final image should evoke the spirit of adventure and discovery. Do not include any text in the image."""

_ADVENTURER_DEFAULT_QUESTIONS: list[tuple[str, list[str]]] = [
    (
        "Si tu étais un type d’aventurier, tu serais…",
        [
            "Un explorateur polaire en quête de terres inconnues",
            "Un archéologue intrépide à la Indiana Jones",
            "Un navigateur des mers à la recherche de trésors",
            "Un astronaute en mission vers une planète lointaine",
        ],
    ),
    (
        "Ton compagnon de route idéal serait…",
        [
            "Un loup fidèle et protecteur",
            "Un perroquet bavard et malin",
            "Un singe agile et farceur",
            "Un robot multifonction ultra-connecté",
        ],
    ),
    (
        "Ton objet fétiche pour partir à l’aventure ?",
        [
            "Une boussole ancienne transmise de génération en génération",
            "Un carnet de croquis rempli de cartes et de notes",
            "Un sabre ou une machette pour ouvrir la voie",
            "Un drone high-tech pour explorer à distance",
        ],
    ),
    (
        "Ton terrain de jeu favori ?",
        [
            "Une jungle luxuriante pleine de mystères",
            "Un désert brûlant et infini",
            "Une cité perdue enfouie sous la glace",
            "Une station spatiale abandonnée en orbite",
        ],
    ),
    (
        "Ton style vestimentaire d’aventurier ?",
        [
            "Manteau en cuir usé et chapeau à large bord",
            "Tenue camouflage avec sac à dos militaire",
            "Combinaison spatiale futuriste",
            "Vêtements légers et foulard coloré façon globe-trotter",
        ],
    ),
]


def default_adventurer_config() -> AdventurerConfig:
    """Configuration materialized on the first adventurer read."""
    questions = [
        Question(
            text=text,
            options=[{"label": label, "value": value} for value, label in zip("ABCD", labels)],
        )
        for text, labels in _ADVENTURER_DEFAULT_QUESTIONS
    ]
    return AdventurerConfig(
        code=ADVENTURER_DEFAULT_CODE,
        prompt_template=ADVENTURER_DEFAULT_TEMPLATE,
        questions=questions,
    )


def build_variants(settings: Settings) -> dict[str, Variant]:
    """Return the variants served by this deployment, keyed by URL name."""
    yearbook = Variant(
        name="yearbook",
        config_model=YearbookConfig,
        response_model=YearbookResponse,
        policy=RequireConfiguration(),
        generation_mode=GenerationMode(settings.yearbook_generation_mode),
        success_message="Image yearbook générée avec succès",
    )
    adventurer = Variant(
        name="adventurer",
        config_model=AdventurerConfig,
        response_model=AdventurerResponse,
        policy=AutoCreateConfiguration(default_adventurer_config),
        generation_mode=GenerationMode.edit,
        success_message="Avatar d'aventurier généré avec succès",
        answer_mapper=map_answers,
        allowed_genders=tuple(gender.value for gender in Gender),
    )
    return {variant.name: variant for variant in (yearbook, adventurer)}
