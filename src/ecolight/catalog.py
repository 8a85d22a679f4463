"""
Plant light requirement catalog.

Keywords are lowercase plant names in Spanish and English; several aliases
may point at the same species. Iteration follows insertion order, which is
also the order the matcher scans in.

Rough bands used by the built-in table:
    > 5000 lx:      direct sun (cacti, herbs, fruiting plants)
    1000-5000 lx:   bright indirect light / partial shade
    < 1000 lx:      low light / shade tolerant
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


class CatalogError(ValueError):
    """Invalid catalog content."""


@dataclass(frozen=True)
class PlantLightRequirement:
    """Illuminance range a species thrives in."""

    canonical_name: str
    min_lux: int
    max_lux: int
    description: str

    def __post_init__(self) -> None:
        if self.min_lux > self.max_lux:
            raise CatalogError(
                f"{self.canonical_name}: min_lux {self.min_lux} is above max_lux {self.max_lux}"
            )

    def contains(self, lux: float) -> bool:
        """Inclusive range check."""
        return self.min_lux <= lux <= self.max_lux

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlantLightRequirement:
        try:
            return cls(
                canonical_name=str(data["canonical_name"]),
                min_lux=int(data["min_lux"]),
                max_lux=int(data["max_lux"]),
                description=str(data.get("description", "")),
            )
        except (KeyError, TypeError, ValueError) as e:
            if isinstance(e, CatalogError):
                raise
            raise CatalogError(f"malformed requirement {data!r}: {e}") from e


def normalize_keyword(text: str) -> str:
    return text.strip().lower()


class PlantCatalog:
    """Ordered keyword -> PlantLightRequirement table."""

    def __init__(self, entries: Iterable[tuple[str, PlantLightRequirement]] = ()):
        self._entries: dict[str, PlantLightRequirement] = {}
        for keyword, requirement in entries:
            self.add(keyword, requirement)

    def add(self, keyword: str, requirement: PlantLightRequirement) -> None:
        """Append an entry. Re-adding a keyword with a different requirement is an error."""
        key = normalize_keyword(keyword)
        if not key:
            raise CatalogError("catalog keywords must not be blank")
        existing = self._entries.get(key)
        if existing is not None and existing != requirement:
            raise CatalogError(f"duplicate keyword {key!r} maps to different requirements")
        self._entries[key] = requirement

    def get(self, keyword: str) -> PlantLightRequirement | None:
        """Exact keyword lookup."""
        return self._entries.get(normalize_keyword(keyword))

    def keywords(self) -> list[str]:
        return list(self._entries)

    def species(self) -> list[PlantLightRequirement]:
        """Distinct requirements in first-seen order."""
        seen: list[PlantLightRequirement] = []
        for requirement in self._entries.values():
            if requirement not in seen:
                seen.append(requirement)
        return seen

    def __iter__(self) -> Iterator[tuple[str, PlantLightRequirement]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, keyword: object) -> bool:
        return isinstance(keyword, str) and normalize_keyword(keyword) in self._entries

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {keyword: req.to_dict() for keyword, req in self._entries.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlantCatalog:
        if not isinstance(data, dict):
            raise CatalogError("catalog must be a JSON object of keyword -> requirement")
        return cls((keyword, PlantLightRequirement.from_dict(req)) for keyword, req in data.items())

    @classmethod
    def load(cls, path: Path) -> PlantCatalog:
        """Load a catalog from a JSON file (keyword order is preserved)."""
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"cannot read catalog {path}: {e}") from e
        return cls.from_dict(data)


def _req(name: str, min_lux: int, max_lux: int, description: str) -> PlantLightRequirement:
    return PlantLightRequirement(name, min_lux, max_lux, description)


DEFAULT_ENTRIES: list[tuple[str, PlantLightRequirement]] = [
    # High light / direct sun (> 5000 lx)
    ("cactus", _req("Cactus", 5000, 50000, "Necesita luz directa y muy brillante.")),
    ("suculenta", _req("Suculenta", 5000, 50000, "Requiere mucha luz, preferiblemente sol directo.")),
    ("succulent", _req("Succulent", 5000, 50000, "Requires lots of light, preferably direct sun.")),
    ("lavanda", _req("Lavanda", 10000, 100000, "Sol directo intenso.")),
    ("lavender", _req("Lavender", 10000, 100000, "Intense direct sun.")),
    ("albahaca", _req("Albahaca", 5000, 50000, "Sol directo al menos 6 horas.")),
    ("basil", _req("Basil", 5000, 50000, "Direct sun at least 6 hours.")),
    ("romero", _req("Romero", 10000, 80000, "Necesita pleno sol para crecer bien.")),
    ("rosemary", _req("Rosemary", 10000, 80000, "Needs full sun to thrive.")),
    ("geranio", _req("Geranio", 4000, 30000, "Luz solar directa o muy brillante.")),
    ("geranium", _req("Geranium", 4000, 30000, "Direct sunlight or very bright light.")),
    ("olivo", _req("Olivo", 10000, 90000, "Sol directo, ideal para exteriores soleados.")),
    ("olive tree", _req("Olive Tree", 10000, 90000, "Direct sun, ideal for sunny outdoors.")),
    ("tomate", _req("Tomate", 20000, 100000, "Requiere mucha luz solar para dar fruto.")),
    ("tomato", _req("Tomato", 20000, 100000, "Requires lots of sunlight to fruit.")),
    # Bright indirect light / partial shade (1000-5000 lx)
    ("monstera", _req("Monstera (Costilla de Adán)", 1000, 4000, "Prefiere luz indirecta brillante.")),
    ("ficus", _req("Ficus", 2000, 10000, "Necesita luz brillante pero indirecta.")),
    ("ficus elastica", _req("Ficus Elástica (Hule)", 1500, 5000, "Luz brillante indirecta, tolera algo de sombra.")),
    ("orquidea", _req("Orquídea", 1500, 3500, "Luz filtrada o indirecta brillante.")),
    ("orchid", _req("Orchid", 1500, 3500, "Filtered or bright indirect light.")),
    ("aloe vera", _req("Aloe Vera", 4000, 15000, "Luz brillante, algo de sol directo está bien.")),
    ("jade", _req("Árbol de Jade", 3000, 10000, "Luz brillante, algunas horas de sol directo.")),
    ("photos", _req("Potos", 800, 3000, "Prefiere luz media, pero tolera baja luz.")),
    ("pothos", _req("Pothos", 800, 3000, "Prefers medium light, but tolerates low light.")),
    ("dracaena", _req("Dracaena (Palo de Brasil)", 1000, 3000, "Luz filtrada, evitar sol directo que quema las hojas.")),
    ("croton", _req("Crotón", 2000, 8000, "Necesita luz brillante para mantener sus colores.")),
    ("violeta africana", _req("Violeta Africana", 1000, 2500, "Luz indirecta media, ideal cerca de ventanas.")),
    ("african violet", _req("African Violet", 1000, 2500, "Medium indirect light, ideal near windows.")),
    ("begonia", _req("Begonia", 1000, 3000, "Luz brillante indirecta, sombra parcial.")),
    ("bambu", _req("Bambú de la Suerte", 1000, 3000, "Luz brillante filtrada.")),
    ("lucky bamboo", _req("Lucky Bamboo", 1000, 3000, "Bright filtered light.")),
    ("hiedra", _req("Hiedra Inglesa", 1000, 4000, "Luz indirecta media a brillante.")),
    ("english ivy", _req("English Ivy", 1000, 4000, "Medium to bright indirect light.")),
    ("pilea", _req("Pilea (Planta China del Dinero)", 1500, 4000, "Luz brillante indirecta.")),
    # Low light / shade (< 1000 lx)
    ("helecho", _req("Helecho", 500, 2500, "Prefiere sombra o luz indirecta baja.")),
    ("fern", _req("Fern", 500, 2500, "Prefers shade or low indirect light.")),
    ("sansevieria", _req("Sansevieria (Lengua de suegra)", 500, 5000, "Muy tolerante, desde sombra hasta luz brillante.")),
    ("snake plant", _req("Snake Plant", 500, 5000, "Very tolerant, low to bright light.")),
    ("espatifilo", _req("Espatifilo (Cuna de Moisés)", 500, 2000, "Luz baja a media, evitar sol directo.")),
    ("peace lily", _req("Peace Lily", 500, 2000, "Low to medium light, avoid direct sun.")),
    ("calathea", _req("Calathea", 400, 1500, "Sombra parcial, luz indirecta baja.")),
    ("zamioculca", _req("Zamioculca (ZZ Plant)", 300, 2500, "Tolera muy poca luz, excelente para oficinas.")),
    ("zz plant", _req("ZZ Plant", 300, 2500, "Tolerates very low light, great for offices.")),
    ("dieffenbachia", _req("Dieffenbachia (Lotería)", 500, 2000, "Luz filtrada baja a media.")),
    ("aglaonema", _req("Aglaonema", 500, 2000, "Tolera poca luz, aunque los colores mejoran con más luz.")),
    ("cinta", _req("Cinta (Malamadre/Spider Plant)", 800, 2500, "Se adapta bien a luz media y baja.")),
    ("spider plant", _req("Spider Plant", 800, 2500, "Adapts well to medium and low light.")),
    ("filodendro", _req("Filodendro", 500, 2500, "Luz indirecta media o baja.")),
    ("philodendron", _req("Philodendron", 500, 2500, "Medium or low indirect light.")),
    ("bromelia", _req("Bromelia", 800, 3000, "Luz indirecta, tolera sombra parcial.")),
]


def default_catalog() -> PlantCatalog:
    """Fresh copy of the built-in catalog."""
    return PlantCatalog(DEFAULT_ENTRIES)
