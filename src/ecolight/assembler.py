"""
Suitability verdicts and recommendation text for a measured average.

With a catalog requirement the verdict is an inclusive range check and the
text picks one of three templates (ideal / too little / too much light).
Without one, a small rule set keyed on words in the plant name is used:

    cactus, suculenta, succulent   ->  suitable above 5000 lx
    helecho, fern                  ->  suitable below 2000 lx
    anything else                  ->  suitable above 500 lx
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from .catalog import PlantLightRequirement
from .matcher import PlantMatcher
from .records import PersistedRequestRecord
from .storage import PersistenceGateway

NO_SPECIES_DATA_NOTE = "no species-specific data found"

SUITABLE_TEMPLATE = (
    "Excelente! La luz promedio ({avg} lx) durante {duration} segundos es ideal para "
    "{name} ({min_lux}-{max_lux} lx). {description}"
)
TOO_LITTLE_TEMPLATE = (
    "Muy poca luz promedio ({avg} lx). {name} necesita al menos {min_lux} lx "
    "(rango ideal {min_lux}-{max_lux} lx). {description}"
)
TOO_MUCH_TEMPLATE = (
    "Demasiada luz promedio ({avg} lx). {name} prefiere menos de {max_lux} lx "
    "(rango ideal {min_lux}-{max_lux} lx). {description}"
)
FALLBACK_TEMPLATE = "{advice} (Promedio de {duration} s - " + NO_SPECIES_DATA_NOTE + ")"


@dataclass(frozen=True)
class HeuristicRule:
    """Threshold rule applied when the catalog has no entry for a plant."""

    markers: tuple[str, ...]
    threshold: float
    wants_more_light: bool
    suitable_advice: str
    unsuitable_advice: str

    def applies_to(self, name: str) -> bool:
        plant = name.strip().lower()
        return any(marker in plant for marker in self.markers)

    def is_suitable(self, lux: float) -> bool:
        return lux > self.threshold if self.wants_more_light else lux < self.threshold


FALLBACK_RULES: tuple[HeuristicRule, ...] = (
    HeuristicRule(
        markers=("cactus", "suculenta", "succulent"),
        threshold=5000,
        wants_more_light=True,
        suitable_advice="Luz adecuada para plantas de sol directo.",
        unsuitable_advice="Muy poca luz para una planta de sol. Necesita sol directo.",
    ),
    HeuristicRule(
        markers=("helecho", "fern"),
        threshold=2000,
        wants_more_light=False,
        suitable_advice="Luz adecuada para plantas de sombra.",
        unsuitable_advice="Demasiada luz para una planta de sombra. Prefiere sombra.",
    ),
)

GENERIC_RULE = HeuristicRule(
    markers=(),
    threshold=500,
    wants_more_light=True,
    suitable_advice="Luz aceptable para la mayoría de plantas de interior.",
    unsuitable_advice="Luz baja, busca plantas de sombra.",
)


@dataclass(frozen=True)
class Verdict:
    """Outcome of judging one average against a plant."""

    is_suitable: bool
    recommendation: str
    requirement: PlantLightRequirement | None = None

    @property
    def from_catalog(self) -> bool:
        return self.requirement is not None


def _format_lux(lux: float) -> str:
    return f"{lux:.1f}"


def evaluate_requirement(
    requirement: PlantLightRequirement,
    average_lux: float,
    duration_seconds: int,
) -> Verdict:
    """Range verdict against a catalog requirement (bounds inclusive)."""
    if requirement.contains(average_lux):
        template = SUITABLE_TEMPLATE
    elif average_lux < requirement.min_lux:
        template = TOO_LITTLE_TEMPLATE
    else:
        template = TOO_MUCH_TEMPLATE

    text = template.format(
        avg=_format_lux(average_lux),
        duration=duration_seconds,
        name=requirement.canonical_name,
        min_lux=requirement.min_lux,
        max_lux=requirement.max_lux,
        description=requirement.description,
    )
    return Verdict(requirement.contains(average_lux), text.strip(), requirement)


def fallback_rule(plant_name: str, rules: Sequence[HeuristicRule] = FALLBACK_RULES) -> HeuristicRule:
    """First rule whose marker appears in the name, else the generic rule."""
    for rule in rules:
        if rule.applies_to(plant_name):
            return rule
    return GENERIC_RULE


def evaluate_fallback(plant_name: str, average_lux: float, duration_seconds: int) -> Verdict:
    """Heuristic verdict for plants the catalog does not know."""
    rule = fallback_rule(plant_name)
    suitable = rule.is_suitable(average_lux)
    advice = rule.suitable_advice if suitable else rule.unsuitable_advice
    return Verdict(suitable, FALLBACK_TEMPLATE.format(advice=advice, duration=duration_seconds))


class ResultAssembler:
    """
    Turn a finished measurement into a stored record.

    ``assemble`` runs the (slow) plant search, judges the average, builds the
    record and appends it to the gateway. StorageError from the gateway
    propagates to the caller.
    """

    def __init__(
        self,
        matcher: PlantMatcher,
        gateway: PersistenceGateway,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.matcher = matcher
        self.gateway = gateway
        self._clock = clock

    def judge(self, plant_name: str, average_lux: float, duration_seconds: int) -> Verdict:
        """Search the catalog and produce a verdict (no persistence)."""
        requirement = self.matcher.search(plant_name)
        if requirement is not None:
            return evaluate_requirement(requirement, average_lux, duration_seconds)
        return evaluate_fallback(plant_name, average_lux, duration_seconds)

    def build_record(
        self,
        plant_name: str,
        average_lux: float,
        duration_seconds: int,
        verdict: Verdict,
        readings: Sequence[float] = (),
        image_ref: str | None = None,
    ) -> PersistedRequestRecord:
        requirement = verdict.requirement
        return PersistedRequestRecord(
            plant_name=requirement.canonical_name if requirement else plant_name,
            average_lux=float(average_lux),
            duration_seconds=duration_seconds,
            timestamp=self._clock(),
            recommendation=verdict.recommendation,
            readings_trace=tuple(float(v) for v in readings),
            is_suitable=verdict.is_suitable,
            min_light_level=float(requirement.min_lux) if requirement else None,
            max_light_level=float(requirement.max_lux) if requirement else None,
            image_ref=image_ref,
        )

    def assemble(
        self,
        plant_name: str,
        average_lux: float,
        duration_seconds: int,
        readings: Sequence[float] = (),
        image_ref: str | None = None,
    ) -> PersistedRequestRecord:
        verdict = self.judge(plant_name, average_lux, duration_seconds)
        record = self.build_record(plant_name, average_lux, duration_seconds, verdict, readings, image_ref)
        return self.gateway.append(record)
