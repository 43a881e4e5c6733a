# tests/test_localization.py
"""
Tests for Localization and LocalizationBuilder.

Covers:
- text() lookup and key fallback
- language switching
- builder chaining, overwriting and single use
- conversions and copies
"""
import logging

import pytest

from dictionary import Dictionary
from localization_errors import BuilderConsumedError, ParseError
from localization import Localization, LocalizationBuilder


DE_DE = """
Dictionary(
    words: {
        "hello": "Hallo",
        "world": "Welt",
    }
)
"""

EN_US = """
Dictionary(
    words: {
        "hello": "Hello",
        "world": "World",
        "only_en": "English only",
    }
)
"""


@pytest.fixture
def localization():
    return (
        Localization.create()
        .language("de_DE")
        .dictionary("de_DE", DE_DE)
        .dictionary("en_US", EN_US)
        .build()
    )


class TestText:

    def test_translates_known_keys(self, localization):
        assert localization.text("hello") == "Hallo"
        assert localization.text("world") == "Welt"

    def test_unknown_key_returns_key(self, localization):
        assert localization.text("test") == "test"

    def test_key_of_other_language_is_not_used(self, localization):
        assert localization.text("only_en") == "only_en"

    def test_repeated_lookups_are_stable(self, localization):
        results = {localization.text("hello") for _ in range(3)}
        missing = {localization.text("nope") for _ in range(3)}
        assert results == {"Hallo"}
        assert missing == {"nope"}

    def test_no_dictionaries_at_all(self):
        localization = Localization.create().language("en_US").build()
        assert localization.text("anything") == "anything"

    def test_empty_key(self, localization):
        assert localization.text("") == ""

    def test_has_translation(self, localization):
        assert localization.has_translation("hello")
        assert not localization.has_translation("only_en")

    def test_missing_key_logged_once(self, localization, caplog):
        caplog.set_level(logging.DEBUG, logger="localization")
        localization.text("nope")
        localization.text("nope")
        missing = [r for r in caplog.records if "Missing translation key 'nope'" in r.message]
        assert len(missing) == 1


class TestLanguage:

    def test_initial_language(self, localization):
        assert localization.language == "de_DE"

    def test_set_language_switches_dictionary(self, localization):
        localization.set_language("en_US")
        assert localization.language == "en_US"
        assert localization.text("hello") == "Hello"
        assert localization.text("only_en") == "English only"

    def test_unknown_language_falls_back_for_every_key(self, localization):
        localization.set_language("fr_FR")
        assert localization.language == "fr_FR"
        for key in ("hello", "world", "only_en"):
            assert localization.text(key) == key

    def test_language_is_read_only_property(self, localization):
        with pytest.raises(AttributeError):
            localization.language = "en_US"

    def test_languages_lists_dictionaries(self, localization):
        assert localization.languages() == ["de_DE", "en_US"]


class TestBuilder:

    def test_default_builder(self):
        localization = Localization.create().build()
        assert localization.language == ""
        assert localization.languages() == []
        assert localization == Localization()

    def test_chaining_returns_same_builder(self):
        builder = Localization.create()
        assert builder.language("de_DE") is builder
        assert builder.dictionary("de_DE", DE_DE) is builder

    def test_same_key_twice_keeps_last(self):
        localization = (
            Localization.create()
            .language("de_DE")
            .dictionary("de_DE", EN_US)
            .dictionary("de_DE", DE_DE)
            .build()
        )
        assert localization.text("hello") == "Hallo"
        assert localization.text("only_en") == "only_en"
        assert localization.dictionaries["de_DE"] == Dictionary.from_text(DE_DE)

    def test_language_without_dictionary_is_allowed(self):
        localization = Localization.create().language("xx").dictionary("de_DE", DE_DE).build()
        assert localization.language == "xx"
        assert localization.text("hello") == "hello"

    def test_parse_error_propagates(self):
        with pytest.raises(ParseError):
            Localization.create().dictionary("de_DE", "Dictionary(words: [])")

    def test_builder_cannot_be_reused(self):
        builder = Localization.create().language("de_DE")
        builder.build()
        with pytest.raises(BuilderConsumedError):
            builder.build()
        with pytest.raises(BuilderConsumedError):
            builder.language("en_US")
        with pytest.raises(BuilderConsumedError):
            builder.dictionary("en_US", EN_US)

    def test_builder_type(self):
        assert isinstance(Localization.create(), LocalizationBuilder)


class TestConversions:

    def test_from_dictionary_uses_key_as_language(self):
        localization = Localization.from_dictionary("de_DE", DE_DE)
        assert localization.language == "de_DE"
        assert localization.text("hello") == "Hallo"

    def test_from_builder(self):
        builder = Localization.create().language("de_DE").dictionary("de_DE", DE_DE)
        localization = Localization.from_builder(builder)
        assert localization.text("world") == "Welt"
        with pytest.raises(BuilderConsumedError):
            builder.build()

    def test_copy_is_independent(self, localization):
        clone = localization.copy()
        assert clone == localization
        clone.set_language("en_US")
        assert localization.language == "de_DE"
        assert localization.text("hello") == "Hallo"
        assert clone.text("hello") == "Hello"
        assert clone != localization

    def test_dictionaries_view_is_read_only(self, localization):
        with pytest.raises(TypeError):
            localization.dictionaries["fr_FR"] = Dictionary()  # type: ignore[index]
