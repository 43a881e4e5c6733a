import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from dictionary_model import DictionaryModel
from localization_errors import ParseError
from ron_reader import RonStruct, parse_ron


logger = logging.getLogger(__name__)

STRUCT_NAME = "Dictionary"


def _describe(value: Any) -> str:
    if isinstance(value, RonStruct):
        return f"struct '{value.name}'" if value.name else "anonymous struct"
    if value is None:
        return "None"
    return type(value).__name__


def _validation_summary(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def load_and_validate_dictionary(blob: str) -> DictionaryModel:
    """
    Reads a RON dictionary blob and validates it with the DictionaryModel schema.
    Raises ParseError if the text is malformed or does not match the schema.
    """
    try:
        raw = parse_ron(blob)
    except ParseError as e:
        logger.error(f"Failed to read dictionary blob: {e}")
        raise

    if not isinstance(raw, RonStruct) or raw.items:
        logger.error(f"Dictionary blob holds {_describe(raw)}, expected a {STRUCT_NAME} struct")
        raise ParseError(f"expected a {STRUCT_NAME} struct, found {_describe(raw)}")
    if raw.name not in (None, STRUCT_NAME):
        logger.error(f"Dictionary blob holds struct '{raw.name}', expected '{STRUCT_NAME}'")
        raise ParseError(f"expected struct '{STRUCT_NAME}', found '{raw.name}'")

    try:
        return DictionaryModel.model_validate(raw.fields)
    except ValidationError as e:
        summary = _validation_summary(e)
        logger.error(f"Dictionary validation failed: {summary}")
        raise ParseError(f"invalid dictionary: {summary}") from e


class Dictionary:
    """Write-once mapping from word key to translated text for one language."""

    def __init__(self, words: Optional[Mapping[str, str]] = None):
        self._words: Dict[str, str] = dict(words or {})

    @classmethod
    def from_text(cls, blob: str) -> "Dictionary":
        model = load_and_validate_dictionary(blob)
        logger.debug(f"Parsed dictionary with {len(model.words)} words")
        return cls(model.words)

    @classmethod
    def empty(cls) -> "Dictionary":
        return cls()

    @property
    def words(self) -> Mapping[str, str]:
        return MappingProxyType(self._words)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._words.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dictionary):
            return NotImplemented
        return self._words == other._words

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Dictionary(words={self._words!r})"
