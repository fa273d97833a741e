"""Tests for carfind deterministic prompt parsing.

Tests cover:
- Entity dictionary construction and lookups
- Sanitization
- Year range rules and their priority
- Dictionary entity resolution (Hebrew, English, mixed)
- Confidence calculation
- Confidence gate and suggestions
"""

from __future__ import annotations

from datetime import datetime

import pytest

from carfind.core.prompt_search import (
    DEFAULT_MIN_CONFIDENCE,
    ENTITY_DICTIONARY,
    ConfidenceEvaluator,
    DeterministicExtractor,
    EntityDictionary,
    EntityPosition,
    EntityType,
    ExtractedEntity,
    ParsedPrompt,
    ParseSource,
    PromptSearchConfig,
    VehicleSearchFilters,
    YearRangeExtractor,
    build_entity_map,
    build_keyword_map,
    calculate_confidence,
    sanitize_prompt,
)
from carfind.core.prompt_search.confidence import (
    SUGGEST_COLOR,
    SUGGEST_MANUFACTURER,
    SUGGEST_MORE_SPECIFIC_EN,
    SUGGEST_MORE_SPECIFIC_HE,
    SUGGEST_YEAR,
)


def fixed_clock() -> datetime:
    return datetime(2026, 6, 1)


@pytest.fixture
def extractor() -> DeterministicExtractor:
    return DeterministicExtractor(clock=fixed_clock)


def parse(extractor: DeterministicExtractor, prompt: str) -> ParsedPrompt:
    return extractor.extract(sanitize_prompt(prompt), prompt)


FILTER_ATTR = {
    EntityType.MANUFACTURER: "manufacturer",
    EntityType.COLOR: "color",
    EntityType.FUEL_TYPE: "fuel_type",
    EntityType.OWNERSHIP: "ownership",
}

ALL_ALIASES = [
    (entity_type, canonical, alias)
    for entity_type, table in ENTITY_DICTIONARY.classes()
    for canonical, aliases in table.items()
    for alias in aliases
]


# ============================================================================
# Entity Dictionary Tests
# ============================================================================


class TestEntityDictionary:
    """Tests for the entity dictionary."""

    def test_canonical_in_own_aliases(self) -> None:
        """Every canonical value is also one of its aliases."""
        for _, table in ENTITY_DICTIONARY.classes():
            for canonical, aliases in table.items():
                assert canonical.lower() in aliases

    def test_aliases_unique_per_class(self) -> None:
        """No alias maps to two canonical values within a class."""
        for _, table in ENTITY_DICTIONARY.classes():
            seen: dict[str, str] = {}
            for canonical, aliases in table.items():
                for alias in aliases:
                    assert alias not in seen, f"{alias} in {seen.get(alias)} and {canonical}"
                    seen[alias] = canonical

    def test_build_entity_map_dedupes_and_prepends(self) -> None:
        """build_entity_map lowercases, de-duplicates and puts canonical first."""
        table = build_entity_map({"Foo": ["bar", "BAR", "foo"]})
        assert table["Foo"] == ("foo", "bar")

    def test_tables_are_read_only(self) -> None:
        """Dictionary tables cannot be mutated."""
        with pytest.raises(TypeError):
            ENTITY_DICTIONARY.manufacturers["new"] = ("new",)  # type: ignore[index]

    def test_dictionary_is_frozen(self) -> None:
        """Dictionary attributes cannot be reassigned."""
        with pytest.raises(AttributeError):
            ENTITY_DICTIONARY.colors = {}  # type: ignore[misc]

    def test_canonical_for(self) -> None:
        """Reverse lookup is case-insensitive."""
        assert ENTITY_DICTIONARY.canonical_for(EntityType.MANUFACTURER, "Toyota") == "טויוטה"
        assert ENTITY_DICTIONARY.canonical_for(EntityType.COLOR, "grey") == "אפור"
        assert ENTITY_DICTIONARY.canonical_for(EntityType.COLOR, "toyota") is None

    def test_aliases_for(self) -> None:
        assert "benz" in ENTITY_DICTIONARY.aliases_for(EntityType.MANUFACTURER, "מרצדס-בנץ")
        assert ENTITY_DICTIONARY.aliases_for(EntityType.FUEL_TYPE, "unknown") == ()

    def test_table_for_undictionaried_type(self) -> None:
        """Model and year have no dictionary."""
        with pytest.raises(KeyError):
            ENTITY_DICTIONARY.table(EntityType.MODEL)

    def test_year_keywords_by_role(self) -> None:
        """Year keywords are grouped by role and cover both languages."""
        keywords = ENTITY_DICTIONARY.year_keywords
        assert set(keywords) == {"from", "to", "between", "and"}
        assert {"משנת", "from", "since", "מ-"} <= set(keywords["from"])
        assert {"עד", "ועד", "to", "until"} <= set(keywords["to"])
        assert {"בין", "between"} <= set(keywords["between"])
        assert {"and", "ו-", "ל-"} <= set(keywords["and"])

    def test_build_keyword_map_fills_missing_roles(self) -> None:
        keywords = build_keyword_map({"from": ["After", "after"]})
        assert keywords["from"] == ("after",)
        assert keywords["to"] == ()

    def test_build_keyword_map_rejects_unknown_role(self) -> None:
        with pytest.raises(ValueError):
            build_keyword_map({"during": ["in"]})


# ============================================================================
# Sanitizer Tests
# ============================================================================


class TestSanitize:
    """Tests for prompt sanitization."""

    def test_strips_symbols(self) -> None:
        assert sanitize_prompt("Toyota!!! @white#") == "Toyota white"

    def test_keeps_hebrew_latin_digits(self) -> None:
        assert sanitize_prompt("טויוטה Toyota 2020") == "טויוטה Toyota 2020"

    def test_keeps_hyphen(self) -> None:
        assert sanitize_prompt("2015-2020") == "2015-2020"
        assert sanitize_prompt("מ-2015") == "מ-2015"

    def test_symbols_between_years_split_tokens(self) -> None:
        assert sanitize_prompt("2015/2020") == "2015 2020"

    def test_hebrew_abbreviation_marks_removed(self) -> None:
        assert sanitize_prompt("פיג'ו") == "פיגו"
        assert sanitize_prompt('גפ"מ') == "גפמ"
        assert sanitize_prompt("ב.מ.וו") == "במוו"

    def test_trims_and_collapses_whitespace(self) -> None:
        assert sanitize_prompt("   white    car   ") == "white car"

    def test_only_symbols_is_empty(self) -> None:
        assert sanitize_prompt("!@#$%^&*()") == ""
        assert sanitize_prompt("") == ""

    @pytest.mark.parametrize("prompt", ["-", "--- !!", " - - ", "'-'"])
    def test_hyphens_without_words_are_empty(self, prompt: str) -> None:
        """Hyphens alone do not count as content."""
        assert sanitize_prompt(prompt) == ""

    def test_hyphen_with_word_kept(self) -> None:
        assert sanitize_prompt("- toyota -") == "- toyota -"


# ============================================================================
# Year Range Tests
# ============================================================================


class TestYearRangeExtractor:
    """Tests for year range rules."""

    @pytest.fixture
    def years(self) -> YearRangeExtractor:
        return YearRangeExtractor(max_year_diff=50, clock=fixed_clock)

    def test_bounds(self, years: YearRangeExtractor) -> None:
        """Valid years run from 50 years back to next year."""
        assert years.bounds == (1976, 2027)
        assert years.is_valid_year(1976)
        assert years.is_valid_year(2027)
        assert not years.is_valid_year(1975)
        assert not years.is_valid_year(2028)

    def test_dashed_range(self, years: YearRangeExtractor) -> None:
        result = years.extract("2015-2020")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, 2020)
        assert result.rule == "dashed"

    def test_dashed_range_with_spaces(self, years: YearRangeExtractor) -> None:
        result = years.extract("2015 - 2020")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, 2020)

    def test_dashed_range_entity_spans(self, years: YearRangeExtractor) -> None:
        result = years.extract("רכב 2015-2020")
        assert result is not None
        assert [e.position for e in result.entities] == [
            EntityPosition(4, 8),
            EntityPosition(9, 13),
        ]
        assert all(e.confidence == 1.0 for e in result.entities)

    def test_dashed_range_wins_over_bare_years(self, years: YearRangeExtractor) -> None:
        """Rule priority, not scan order, decides."""
        result = years.extract("2000 2015-2020 2025")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, 2020)

    def test_invalid_dashed_range_falls_through(self, years: YearRangeExtractor) -> None:
        """A dashed range with an out-of-bounds year is not used."""
        result = years.extract("1800-2020")
        assert result is not None
        assert result.rule == "bare"
        assert (result.year_from, result.year_to) == (2020, None)

    def test_from_to_hebrew(self, years: YearRangeExtractor) -> None:
        result = years.extract("משנת 2018 עד 2022")
        assert result is not None
        assert (result.year_from, result.year_to) == (2018, 2022)
        assert result.rule == "from_to"

    def test_from_to_english(self, years: YearRangeExtractor) -> None:
        result = years.extract("from 2015 to 2020")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, 2020)

    def test_from_to_prefix_form(self, years: YearRangeExtractor) -> None:
        result = years.extract("מ-2016 עד 2019")
        assert result is not None
        assert (result.year_from, result.year_to) == (2016, 2019)

    def test_between_hebrew(self, years: YearRangeExtractor) -> None:
        result = years.extract("בין 2015 ל-2020")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, 2020)
        assert result.rule == "between"

    def test_between_english(self, years: YearRangeExtractor) -> None:
        result = years.extract("between 2012 and 2016")
        assert result is not None
        assert (result.year_from, result.year_to) == (2012, 2016)

    def test_single_from_hebrew(self, years: YearRangeExtractor) -> None:
        result = years.extract("משנת 2015")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, None)
        assert result.rule == "from"

    def test_single_since_english(self, years: YearRangeExtractor) -> None:
        result = years.extract("since 2019")
        assert result is not None
        assert (result.year_from, result.year_to) == (2019, None)

    def test_from_to_with_conjunction(self, years: YearRangeExtractor) -> None:
        """"ועד" reads as a to-keyword."""
        result = years.extract("משנת 2015 ועד 2020")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, 2020)
        assert result.rule == "from_to"

    def test_keywords_drive_phrase_rules(self) -> None:
        """Phrase rules use the keywords they are given."""
        years = YearRangeExtractor(
            clock=fixed_clock, keywords={"from": ["after"], "to": ["before"]}
        )
        result = years.extract("after 2015 before 2020")
        assert result is not None
        assert result.rule == "from_to"
        assert (result.year_from, result.year_to) == (2015, 2020)

        # No between/and keywords: that rule is skipped, bare years still apply
        result = years.extract("between 2012 and 2016")
        assert result is not None
        assert result.rule == "bare"

    def test_single_bare_year(self, years: YearRangeExtractor) -> None:
        result = years.extract("2020")
        assert result is not None
        assert (result.year_from, result.year_to) == (2020, None)
        assert result.entities[0].confidence == 0.9

    def test_multiple_bare_years_become_range(self, years: YearRangeExtractor) -> None:
        """Unmarked years are read as a range from min to max."""
        result = years.extract("2020 2015 2018")
        assert result is not None
        assert (result.year_from, result.year_to) == (2015, 2020)
        assert len(result.entities) == 3

    def test_out_of_bounds_year_ignored(self, years: YearRangeExtractor) -> None:
        assert years.extract("1800") is None
        assert years.extract("9999") is None

    def test_longer_numbers_are_not_years(self, years: YearRangeExtractor) -> None:
        assert years.extract("20152020") is None
        assert years.extract("phone 052123456") is None

    def test_no_years(self, years: YearRangeExtractor) -> None:
        assert years.extract("white car") is None

    @pytest.mark.parametrize(
        "year_from,year_to",
        [(1976, 2027), (2000, 2001), (2010, 2024), (2025, 2026)],
    )
    def test_any_valid_dashed_pair(
        self, years: YearRangeExtractor, year_from: int, year_to: int
    ) -> None:
        result = years.extract(f"{year_from}-{year_to}")
        assert result is not None
        assert (result.year_from, result.year_to) == (year_from, year_to)

    def test_custom_max_year_diff(self) -> None:
        years = YearRangeExtractor(max_year_diff=10, clock=fixed_clock)
        assert years.extract("2010") is None
        result = years.extract("2017")
        assert result is not None and result.year_from == 2017


# ============================================================================
# Deterministic Extractor Tests
# ============================================================================


class TestDeterministicExtractorHebrew:
    """Tests for Hebrew prompts."""

    def test_manufacturer(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "טויוטה")
        assert result.filters.manufacturer == "טויוטה"
        assert len(result.extracted_entities) == 1
        assert result.extracted_entities[0].type == EntityType.MANUFACTURER

    def test_color(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "רכב לבן")
        assert result.filters.color == "לבן"
        assert len(result.extracted_entities) == 1

    def test_manufacturer_and_inflected_color(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "טויוטה לבנה")
        assert result.filters.manufacturer == "טויוטה"
        assert result.filters.color == "לבן"
        assert len(result.extracted_entities) == 2
        assert result.confidence > 0.5

    def test_year_range_with_dash(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "רכב משנת 2015-2020")
        assert result.filters.year_from == 2015
        assert result.filters.year_to == 2020
        assert len(result.entities_of(EntityType.YEAR)) == 2

    def test_from_year_only(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "משנת 2015")
        assert result.filters.year_from == 2015
        assert result.filters.year_to is None

    def test_fuel_type(self, extractor: DeterministicExtractor) -> None:
        assert parse(extractor, "רכב חשמלי").filters.fuel_type == "חשמלי"

    def test_ownership(self, extractor: DeterministicExtractor) -> None:
        assert parse(extractor, "רכב פרטי").filters.ownership == "פרטי"

    def test_full_prompt(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "טויוטה לבנה משנת 2018 עד 2022 בנזין פרטי")
        assert result.filters == VehicleSearchFilters(
            manufacturer="טויוטה",
            color="לבן",
            year_from=2018,
            year_to=2022,
            fuel_type="בנזין",
            ownership="פרטי",
        )
        assert len(result.extracted_entities) >= 5
        assert result.confidence > 0.7
        assert result.source == ParseSource.DETERMINISTIC

    def test_prefixed_manufacturer(self, extractor: DeterministicExtractor) -> None:
        """Hebrew prefix letters attached to an alias still match."""
        assert parse(extractor, "הטויוטה שלי").filters.manufacturer == "טויוטה"

    def test_prefixed_color(self, extractor: DeterministicExtractor) -> None:
        assert parse(extractor, "רכב בלבן").filters.color == "לבן"

    def test_prefix_not_in_span(self, extractor: DeterministicExtractor) -> None:
        """The span covers the alias, not its attached prefix letter."""
        result = parse(extractor, "הטויוטה")
        assert result.extracted_entities[0].position == EntityPosition(1, 7)

    def test_alias_inside_longer_word_ignored(self, extractor: DeterministicExtractor) -> None:
        """Hebrew aliases do not match inside unrelated words."""
        result = parse(extractor, "רוצה פרטים על מאזדה")
        assert result.filters.manufacturer == "מאזדה"
        assert result.filters.ownership is None

        result = parse(extractor, "טויוטה עם ארגז")
        assert result.filters.manufacturer == "טויוטה"
        assert result.filters.fuel_type is None

    def test_longest_alias_wins(self, extractor: DeterministicExtractor) -> None:
        """הונדאי (Hyundai) is not read as הונדא (Honda)."""
        assert parse(extractor, "הונדאי").filters.manufacturer == "יונדאי"
        assert parse(extractor, "סיטרואן").filters.manufacturer == "סיטרואן"
        assert parse(extractor, "תחבורה ציבורית").filters.ownership == "מוניות"

    def test_abbreviated_names(self, extractor: DeterministicExtractor) -> None:
        assert parse(extractor, "ב.מ.וו").filters.manufacturer == "ב.מ.וו"
        assert parse(extractor, "פיג'ו").filters.manufacturer == "פיג'ו"
        assert parse(extractor, 'גפ"מ').filters.fuel_type == 'גפ"מ'


class TestDeterministicExtractorEnglish:
    """Tests for English and mixed prompts."""

    def test_manufacturer(self, extractor: DeterministicExtractor) -> None:
        assert parse(extractor, "Toyota").filters.manufacturer == "טויוטה"

    def test_color(self, extractor: DeterministicExtractor) -> None:
        assert parse(extractor, "white car").filters.color == "לבן"

    def test_year_range(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "from 2015 to 2020")
        assert result.filters.year_from == 2015
        assert result.filters.year_to == 2020

    def test_full_prompt(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "white Toyota from 2018 gasoline private")
        assert result.filters.manufacturer == "טויוטה"
        assert result.filters.color == "לבן"
        assert result.filters.year_from == 2018
        assert result.filters.year_to is None
        assert result.filters.fuel_type == "בנזין"
        assert result.filters.ownership == "פרטי"

    def test_mixed_languages(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "Toyota לבנה 2020")
        assert result.filters.manufacturer == "טויוטה"
        assert result.filters.color == "לבן"
        assert result.filters.year_from == 2020

    def test_latin_alias_needs_word_boundary(self, extractor: DeterministicExtractor) -> None:
        """Short Latin aliases do not match inside other words."""
        result = parse(extractor, "reddish kiawah seating")
        assert result.filters.color is None
        assert result.filters.manufacturer is None

    @pytest.mark.parametrize(
        "prompt,expected",
        [
            ("ford", "פורד"),
            ("פורד", "פורד"),
            ("mazda", "מאזדה"),
            ("מאזדה", "מאזדה"),
            ("מזדה", "מאזדה"),
            ("mercedes", "מרצדס-בנץ"),
            ("benz", "מרצדס-בנץ"),
            ("מרצדס", "מרצדס-בנץ"),
            ("VW", "פולקסווגן"),
            ("chevy", "שברולט"),
        ],
    )
    def test_manufacturer_variations(
        self, extractor: DeterministicExtractor, prompt: str, expected: str
    ) -> None:
        assert parse(extractor, prompt).filters.manufacturer == expected


class TestDeterministicExtractorProperties:
    """Properties that hold across inputs."""

    @pytest.mark.parametrize(
        "entity_type,canonical,alias",
        ALL_ALIASES,
        ids=[f"{t.value}:{a}" for t, _, a in ALL_ALIASES],
    )
    def test_every_alias_resolves(
        self,
        extractor: DeterministicExtractor,
        entity_type: EntityType,
        canonical: str,
        alias: str,
    ) -> None:
        """A prompt holding only an alias resolves to its canonical value."""
        result = parse(extractor, alias)
        assert getattr(result.filters, FILTER_ATTR[entity_type]) == canonical

    @pytest.mark.parametrize("prompt", ["xyz abc 123", "unknown text", "1800", "qwerty"])
    def test_unrecognized_prompt(self, extractor: DeterministicExtractor, prompt: str) -> None:
        result = parse(extractor, prompt)
        assert result.confidence == 0
        assert result.extracted_entities == []
        assert result.filters.is_empty()

    def test_below_window_year_sets_no_filter(self, extractor: DeterministicExtractor) -> None:
        result = parse(extractor, "1800")
        assert result.filters.year_from is None
        assert result.filters.year_to is None

    def test_idempotent(self, extractor: DeterministicExtractor) -> None:
        prompt = "טויוטה לבנה משנת 2018 עד 2022 בנזין פרטי"
        assert parse(extractor, prompt) == parse(extractor, prompt)

    def test_more_fields_more_confidence(self, extractor: DeterministicExtractor) -> None:
        one = parse(extractor, "טויוטה").confidence
        two = parse(extractor, "טויוטה לבנה").confidence
        three = parse(extractor, "טויוטה לבנה 2020").confidence
        assert two > one
        assert three > two

    def test_one_value_per_class(self, extractor: DeterministicExtractor) -> None:
        """Only the first match per class is kept."""
        result = parse(extractor, "toyota mazda white black")
        assert len(result.entities_of(EntityType.MANUFACTURER)) == 1
        assert len(result.entities_of(EntityType.COLOR)) == 1

    def test_original_prompt_kept(self, extractor: DeterministicExtractor) -> None:
        result = extractor.extract("Toyota", "Toyota!!!")
        assert result.original_prompt == "Toyota!!!"

    def test_entity_span_points_at_alias(self, extractor: DeterministicExtractor) -> None:
        text = "רכב toyota"
        result = extractor.extract(text, text)
        entity = result.extracted_entities[0]
        assert text[entity.position.start : entity.position.end].lower() == "toyota"

    def test_custom_dictionary(self) -> None:
        dictionary = EntityDictionary.from_tables(
            manufacturers={"Acme": ["acme motors"]},
            colors={},
            fuel_types={},
            ownership={},
        )
        custom = DeterministicExtractor(dictionary, PromptSearchConfig(), clock=fixed_clock)
        assert custom.extract("acme motors", "acme motors").filters.manufacturer == "Acme"
        assert custom.extract("toyota", "toyota").filters.manufacturer is None

    def test_custom_dictionary_year_keywords(self, extractor: DeterministicExtractor) -> None:
        """Year phrases follow the injected dictionary's keywords."""
        dictionary = EntityDictionary.from_tables(
            manufacturers={},
            colors={},
            fuel_types={},
            ownership={},
            year_keywords={"from": ["after"], "to": ["before"]},
        )
        custom = DeterministicExtractor(dictionary, clock=fixed_clock)
        text = "after 2015 before 2020"

        custom_years = custom.extract(text, text).entities_of(EntityType.YEAR)
        default_years = extractor.extract(text, text).entities_of(EntityType.YEAR)

        # Phrase match for the custom keywords, bare-year fallback otherwise
        assert [e.confidence for e in custom_years] == [1.0, 1.0]
        assert [e.confidence for e in default_years] == [0.9, 0.9]

        # Without its keywords, "משנת" is no longer a from-phrase
        hebrew = custom.extract("משנת 2015", "משנת 2015")
        assert hebrew.filters.year_from == 2015
        assert hebrew.extracted_entities[0].confidence == 0.9


# ============================================================================
# Confidence Tests
# ============================================================================


def _entity(confidence: float, entity_type: EntityType = EntityType.COLOR) -> ExtractedEntity:
    return ExtractedEntity(type=entity_type, value="x", confidence=confidence)


class TestCalculateConfidence:
    """Tests for the overall confidence formula."""

    def test_no_entities(self) -> None:
        assert calculate_confidence([]) == 0

    def test_single_entity(self) -> None:
        assert calculate_confidence([_entity(0.5)]) == pytest.approx(0.6)

    def test_bonus_capped(self) -> None:
        entities = [_entity(0.4) for _ in range(6)]
        assert calculate_confidence(entities) == pytest.approx(0.7)

    def test_capped_at_one(self) -> None:
        assert calculate_confidence([_entity(1.0), _entity(1.0)]) == 1.0

    def test_mean_of_mixed(self) -> None:
        assert calculate_confidence([_entity(0.6), _entity(0.8)]) == pytest.approx(0.9)


# ============================================================================
# Confidence Gate and Suggestion Tests
# ============================================================================


class TestConfidenceEvaluator:
    """Tests for has_minimum_confidence, get_suggestions and evaluate."""

    @pytest.fixture
    def evaluator(self) -> ConfidenceEvaluator:
        return ConfidenceEvaluator(0.5)

    def test_threshold_is_inclusive(self, evaluator: ConfidenceEvaluator) -> None:
        assert evaluator.has_minimum_confidence(ParsedPrompt(confidence=0.5))
        assert not evaluator.has_minimum_confidence(ParsedPrompt(confidence=0.49))

    def test_gate_depends_only_on_confidence(self, evaluator: ConfidenceEvaluator) -> None:
        full = ParsedPrompt(
            filters=VehicleSearchFilters(manufacturer="טויוטה"),
            confidence=0.3,
            extracted_entities=[_entity(0.3)],
        )
        assert evaluator.has_minimum_confidence(full) is False
        assert evaluator.has_minimum_confidence(ParsedPrompt(confidence=0.9)) is True

    def test_all_suggestions_in_order(self, evaluator: ConfidenceEvaluator) -> None:
        suggestions = evaluator.get_suggestions(ParsedPrompt(confidence=0.1))
        assert suggestions == [
            SUGGEST_MORE_SPECIFIC_HE,
            SUGGEST_MORE_SPECIFIC_EN,
            SUGGEST_MANUFACTURER,
            SUGGEST_YEAR,
            SUGGEST_COLOR,
        ]

    def test_manufacturer_suggestion(self, extractor: DeterministicExtractor, evaluator) -> None:
        suggestions = evaluator.get_suggestions(parse(extractor, "לבן 2020"))
        assert any("יצרן" in s for s in suggestions)

    def test_year_suggestion(self, extractor: DeterministicExtractor, evaluator) -> None:
        suggestions = evaluator.get_suggestions(parse(extractor, "טויוטה לבנה"))
        assert any("שנת ייצור" in s for s in suggestions)

    def test_color_suggestion(self, extractor: DeterministicExtractor, evaluator) -> None:
        suggestions = evaluator.get_suggestions(parse(extractor, "טויוטה 2020"))
        assert any("צבע" in s for s in suggestions)

    def test_year_to_alone_counts_as_year(self, evaluator: ConfidenceEvaluator) -> None:
        parsed = ParsedPrompt(filters=VehicleSearchFilters(year_to=2020), confidence=0.9)
        assert SUGGEST_YEAR not in evaluator.get_suggestions(parsed)

    def test_complete_prompt_has_few_suggestions(
        self, extractor: DeterministicExtractor, evaluator
    ) -> None:
        parsed = parse(extractor, "טויוטה לבנה 2020")
        assert evaluator.has_minimum_confidence(parsed)
        assert len(evaluator.get_suggestions(parsed)) < 3

    def test_evaluate_accepts(self, extractor: DeterministicExtractor, evaluator) -> None:
        decision = evaluator.evaluate(parse(extractor, "טויוטה לבנה 2020"))
        assert decision.should_search is True
        assert decision.suggestions == []
        assert decision.filters == {"manufacturer": "טויוטה", "color": "לבן", "yearFrom": 2020}

    def test_evaluate_rejects_with_suggestions(self, evaluator: ConfidenceEvaluator) -> None:
        decision = evaluator.evaluate(ParsedPrompt(confidence=0.0))
        assert decision.should_search is False
        assert SUGGEST_MORE_SPECIFIC_EN in decision.suggestions
        assert decision.to_dict()["shouldSearch"] is False

    def test_default_threshold_shared(self) -> None:
        """Evaluator and config default to the same threshold."""
        assert ConfidenceEvaluator().min_confidence_threshold == DEFAULT_MIN_CONFIDENCE
        assert PromptSearchConfig().min_confidence_threshold == DEFAULT_MIN_CONFIDENCE
