"""
Localization service backed by RON dictionaries.

Usage::

    from localization import Localization

    localization = Localization.create().language("de_DE").dictionary("de_DE", DE_DE).build()
    localization.text("hello")   # "Hallo"
    localization.text("missing") # "missing"

A Localization is a plain value without internal locking. Share it read-only
between threads, or serialize set_language() calls yourself.
"""
import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Set, Tuple

from dictionary import Dictionary
from localization_errors import BuilderConsumedError


logger = logging.getLogger(__name__)


class LocalizationBuilder:
    """Collects dictionaries and the initial language, then builds a Localization once."""

    def __init__(self):
        self._language: str = ""
        self._dictionaries: Dict[str, Dictionary] = {}
        self._consumed = False

    def _ensure_usable(self) -> None:
        if self._consumed:
            raise BuilderConsumedError("LocalizationBuilder was already built, start over with Localization.create()")

    def dictionary(self, key: str, blob: str) -> "LocalizationBuilder":
        """Adds the dictionary for the language `key`. A second call for the same key replaces the first."""
        self._ensure_usable()
        dictionary = Dictionary.from_text(blob)
        if key in self._dictionaries:
            logger.warning(f"Dictionary for language '{key}' replaced ({len(dictionary)} words)")
        else:
            logger.debug(f"Dictionary for language '{key}' added ({len(dictionary)} words)")
        self._dictionaries[key] = dictionary
        return self

    def language(self, key: str) -> "LocalizationBuilder":
        """Sets the initial language."""
        self._ensure_usable()
        self._language = key
        return self

    def build(self) -> "Localization":
        self._ensure_usable()
        self._consumed = True
        localization = Localization(self._language, self._dictionaries)
        self._dictionaries = {}
        logger.info(f"Localization built: language='{localization.language}', languages={localization.languages()}")
        return localization


class Localization:
    def __init__(self, language: str = "", dictionaries: Optional[Mapping[str, Dictionary]] = None):
        self._language = language
        self._dictionaries: Dict[str, Dictionary] = dict(dictionaries or {})
        self._missing_keys_logged: Set[Tuple[str, str]] = set()

    @staticmethod
    def create() -> LocalizationBuilder:
        """Entry point: an empty builder."""
        return LocalizationBuilder()

    # ------------------------------------------------------------------ #
    # Conversions                                                        #
    # ------------------------------------------------------------------ #
    @classmethod
    def from_dictionary(cls, key: str, blob: str) -> "Localization":
        """Single-language localization with `key` as the active language."""
        return cls.create().dictionary(key, blob).language(key).build()

    @classmethod
    def from_builder(cls, builder: LocalizationBuilder) -> "Localization":
        return builder.build()

    def copy(self) -> "Localization":
        # dictionaries are write-once, sharing them is safe
        return Localization(self._language, self._dictionaries)

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    @property
    def language(self) -> str:
        """The active language key, e.g. `en_US` or `de_DE`."""
        return self._language

    def set_language(self, key: str) -> None:
        """Sets the active language. Unknown keys are accepted; lookups then fall back to the key."""
        if key not in self._dictionaries:
            logger.debug(f"No dictionary for language '{key}', lookups will return the key")
        logger.info(f"Language changed: '{self._language}' -> '{key}'")
        self._language = key

    @property
    def dictionaries(self) -> Mapping[str, Dictionary]:
        return MappingProxyType(self._dictionaries)

    def languages(self) -> List[str]:
        return sorted(self._dictionaries)

    def has_translation(self, key: str) -> bool:
        dictionary = self._dictionaries.get(self._language)
        return dictionary is not None and key in dictionary

    def text(self, key: str) -> str:
        """
        Returns the translation of `key` in the active language.
        If there is no translation the key itself is returned.
        """
        dictionary = self._dictionaries.get(self._language)
        if dictionary is not None:
            word = dictionary.get(key)
            if word is not None:
                return word

        if (self._language, key) not in self._missing_keys_logged:
            logger.debug(f"Missing translation key '{key}' (lang={self._language})")
            self._missing_keys_logged.add((self._language, key))
        return key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Localization):
            return NotImplemented
        return self._language == other._language and self._dictionaries == other._dictionaries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Localization(language={self._language!r}, languages={self.languages()!r})"
