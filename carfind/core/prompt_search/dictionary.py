"""Entity dictionary for Hebrew and English vehicle search.

Canonical values are Hebrew, matching what the government vehicle registry
expects. Each canonical value maps to its aliases: Hebrew spellings,
transliterations and English equivalents. Matching is case-insensitive.

Aliases are unique within a class. Collisions across classes are not checked
here; keep them out of the tables below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .types import EntityType

EntityMap = Mapping[str, tuple[str, ...]]


# The sanitizer deletes quote marks and abbreviation dots, so canonical values
# that contain them also carry the stripped spelling (פיגו, גפמ, במוו).
MANUFACTURERS: dict[str, list[str]] = {
    "טויוטה": ["toyota", "טיוטה", "טוטה"],
    "פורד": ["ford", "פורד גרמניה"],
    "מאזדה": ["mazda", "מזדה"],
    "הונדה": ["honda", "הונדא"],
    "סובארו": ["subaru", "סוברו"],
    "יונדאי": ["hyundai", "הונדאי", "יונדאי מוטור"],
    "קיה": ["kia"],
    "ניסאן": ["nissan", "ניסן"],
    "מיצובישי": ["mitsubishi", "מיצובישי מוטורס"],
    "מרצדס-בנץ": ["mercedes", "benz", "מרצדס בנץ", "מרצדס"],
    "ב.מ.וו": ["bmw", "במוו"],
    "פולקסווגן": ["volkswagen", "vw", "פולקסוואגן"],
    "אאודי": ["audi", "אודי"],
    "שברולט": ["chevrolet", "שברוולט", "chevy"],
    "פיג'ו": ["peugeot", "פיגו", "פיזו"],
    "רנו": ["renault", "רנאו"],
    "סיטרואן": ["citroen", "סיטרואן"],
    "סקודה": ["skoda", "סקודא"],
    "סיאט": ["seat", "סיט"],
    "אופל": ["opel"],
    "פיאט": ["fiat"],
    "וולוו": ["volvo", "וולבו"],
    "טסלה": ["tesla"],
    "לקסוס": ["lexus", "לכסוס"],
}

COLORS: dict[str, list[str]] = {
    "לבן": ["white", "לבנה"],
    "שחור": ["black", "שחורה"],
    "אדום": ["red", "אדומה"],
    "כחול": ["blue", "כחולה"],
    "אפור": ["gray", "grey", "אפורה"],
    "כסוף": ["silver", "כסופה"],
    "ירוק": ["green", "ירוקה"],
    "צהוב": ["yellow", "צהובה"],
    "חום": ["brown", "חומה"],
    "סגול": ["purple", "סגולה"],
    "תכלת": ["cyan", "תכולה"],
    "ורוד": ["pink", "ורודה"],
    "זהב": ["gold", "זהובה"],
    "כתום": ["orange", "כתומה"],
}

FUEL_TYPES: dict[str, list[str]] = {
    "בנזין": ["gasoline", "petrol", "gas"],
    "דיזל": ["diesel"],
    "חשמלי": ["electric", "חשמל", "חשמלית"],
    "היברידי": ["hybrid", "היברדי", "היבריד"],
    'גפ"מ': ["גפמ", "gpm", "lpg", "גז"],
    "אתנול": ["ethanol"],
}

OWNERSHIP: dict[str, list[str]] = {
    "פרטי": ["private", "פרטית"],
    "ציבורי": ["public", "ציבורית"],
    "מוניות": ["taxi", "מונית", "תחבורה ציבורית"],
    "מסחרי": ["commercial", "מסחרית"],
    "חקלאי": ["agricultural", "חקלאית", "חקלאות"],
}

YEAR_KEYWORD_ROLES = ("from", "to", "between", "and")

# Keywords that mark year phrases, by role. Hebrew prefix forms keep their
# hyphen (מ-2015, ל-2020); the sanitizer preserves it.
YEAR_KEYWORDS: dict[str, list[str]] = {
    "from": ["משנת", "משנה", "מאז", "from", "since", "מ-"],
    "to": ["עד", "ועד", "to", "until", "ל-", "ל"],
    "between": ["בין", "between"],
    "and": ["and", "to", "עד", "ועד", "ל-", "ל", "ו-", "ו"],
}


def build_entity_map(entries: Mapping[str, Iterable[str]]) -> EntityMap:
    """Freeze a canonical -> aliases table.

    The canonical value is placed first in its own alias list, aliases are
    lowercased and de-duplicated in order.

    Args:
        entries: Mapping of canonical value to alias iterable

    Returns:
        Read-only mapping of canonical value to alias tuple
    """
    frozen: dict[str, tuple[str, ...]] = {}
    for canonical, aliases in entries.items():
        seen: dict[str, None] = {}
        for alias in (canonical, *aliases):
            seen.setdefault(alias.lower(), None)
        frozen[canonical] = tuple(seen)
    return MappingProxyType(frozen)


def build_keyword_map(entries: Mapping[str, Iterable[str]]) -> EntityMap:
    """Freeze a role -> year keywords table.

    Keywords are lowercased and de-duplicated in order. Roles missing from
    ``entries`` get no keywords, which disables the phrase rules using them.

    Raises:
        ValueError: If a role is not one of YEAR_KEYWORD_ROLES
    """
    unknown = sorted(set(entries) - set(YEAR_KEYWORD_ROLES))
    if unknown:
        raise ValueError(f"Unknown year keyword roles: {unknown}")

    frozen: dict[str, tuple[str, ...]] = {}
    for role in YEAR_KEYWORD_ROLES:
        seen: dict[str, None] = {}
        for keyword in entries.get(role, ()):
            seen.setdefault(keyword.lower(), None)
        frozen[role] = tuple(seen)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class EntityDictionary:
    """Read-only lookup tables for the four dictionary-backed entity classes.

    ``year_keywords`` maps each year-phrase role (from, to, between, and) to
    the words that mark it; the year rules are built from it.

    Built once at import time and shared; never mutated afterwards, so it is
    safe for any number of concurrent readers.
    """

    manufacturers: EntityMap
    colors: EntityMap
    fuel_types: EntityMap
    ownership: EntityMap
    year_keywords: EntityMap = field(default_factory=lambda: build_keyword_map({}))

    @classmethod
    def from_tables(
        cls,
        manufacturers: Mapping[str, Iterable[str]],
        colors: Mapping[str, Iterable[str]],
        fuel_types: Mapping[str, Iterable[str]],
        ownership: Mapping[str, Iterable[str]],
        year_keywords: Mapping[str, Iterable[str]] | None = None,
    ) -> "EntityDictionary":
        """Build a dictionary from plain canonical -> aliases tables."""
        return cls(
            manufacturers=build_entity_map(manufacturers),
            colors=build_entity_map(colors),
            fuel_types=build_entity_map(fuel_types),
            ownership=build_entity_map(ownership),
            year_keywords=build_keyword_map(year_keywords or {}),
        )

    def classes(self) -> Iterator[tuple[EntityType, EntityMap]]:
        """Yield (entity type, table) pairs in resolution order."""
        yield EntityType.MANUFACTURER, self.manufacturers
        yield EntityType.COLOR, self.colors
        yield EntityType.FUEL_TYPE, self.fuel_types
        yield EntityType.OWNERSHIP, self.ownership

    def table(self, entity_type: EntityType) -> EntityMap:
        """Get the table for a dictionary-backed entity type.

        Raises:
            KeyError: If the type has no dictionary (model, year)
        """
        for kind, table in self.classes():
            if kind == entity_type:
                return table
        raise KeyError(f"No dictionary for entity type '{entity_type.value}'")

    def aliases_for(self, entity_type: EntityType, canonical: str) -> tuple[str, ...]:
        """Get the aliases of a canonical value, or () if unknown."""
        return self.table(entity_type).get(canonical, ())

    def canonical_for(self, entity_type: EntityType, alias: str) -> str | None:
        """Reverse lookup: exact alias (case-insensitive) to canonical value."""
        needle = alias.strip().lower()
        for canonical, aliases in self.table(entity_type).items():
            if needle in aliases:
                return canonical
        return None


ENTITY_DICTIONARY = EntityDictionary.from_tables(
    manufacturers=MANUFACTURERS,
    colors=COLORS,
    fuel_types=FUEL_TYPES,
    ownership=OWNERSHIP,
    year_keywords=YEAR_KEYWORDS,
)


__all__ = [
    "COLORS",
    "ENTITY_DICTIONARY",
    "EntityDictionary",
    "EntityMap",
    "FUEL_TYPES",
    "MANUFACTURERS",
    "OWNERSHIP",
    "YEAR_KEYWORDS",
    "YEAR_KEYWORD_ROLES",
    "build_entity_map",
    "build_keyword_map",
]
