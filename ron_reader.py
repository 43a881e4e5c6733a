"""
Reader for RON (Rusty Object Notation) text.

Only reading is supported. The reader understands the parts of RON that
dictionary files use (structs, maps, lists, tuples, strings, numbers,
booleans, options, comments, trailing commas) and turns them into plain
Python values.
"""
import logging
import re
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from localization_errors import ParseError


logger = logging.getLogger(__name__)

MAX_DEPTH = 128

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_RADIX_INT_RE = re.compile(r"[+-]?0(?:x_*[0-9A-Fa-f][0-9A-Fa-f_]*|o_*[0-7][0-7_]*|b_*[01][01_]*)")
_DECIMAL_RE = re.compile(r"[+-]?(?:\d[\d_]*)?(?:\.(?:\d[\d_]*)?)?(?:[eE][+-]?\d[\d_]*)?")
_SPECIAL_FLOATS = {"inf": float("inf"), "NaN": float("nan")}

_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "/": "/",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "b": "\b",
    "f": "\f",
}


class RonStruct(NamedTuple):
    """A RON struct. name is None for anonymous structs, items holds tuple-struct values."""
    name: Optional[str]
    fields: Dict[str, Any]
    items: Tuple[Any, ...] = ()


class RonReader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.depth = 0

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #
    def location(self, pos: Optional[int] = None) -> Tuple[int, int]:
        if pos is None:
            pos = self.pos
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def error(self, message: str, pos: Optional[int] = None) -> ParseError:
        line, column = self.location(pos)
        return ParseError(message, line, column)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def expect(self, ch: str) -> None:
        if self.peek() != ch:
            found = repr(self.peek()) if self.peek() else "end of input"
            raise self.error(f"expected {ch!r}, found {found}")
        self.pos += 1

    def skip_ws(self) -> None:
        text = self.text
        while self.pos < len(text):
            c = text[self.pos]
            if c.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                self.skip_block_comment()
            else:
                break

    def skip_block_comment(self) -> None:
        # block comments nest
        start = self.pos
        level = 0
        while self.pos < len(self.text):
            if self.text.startswith("/*", self.pos):
                level += 1
                self.pos += 2
            elif self.text.startswith("*/", self.pos):
                level -= 1
                self.pos += 2
                if level == 0:
                    return
            else:
                self.pos += 1
        raise self.error("unterminated block comment", start)

    def skip_attributes(self) -> None:
        while self.text.startswith("#![", self.pos):
            end = self.text.find("]", self.pos)
            if end == -1:
                raise self.error("unterminated attribute")
            self.pos = end + 1
            self.skip_ws()

    def read_ident(self) -> Optional[str]:
        match = _IDENT_RE.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return match.group()

    def enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise self.error("nesting too deep")

    def leave(self) -> None:
        self.depth -= 1

    def end_of_item(self, closing: str) -> bool:
        """Consume a separator after a container item. True when the container is closed."""
        self.skip_ws()
        c = self.peek()
        if c == ",":
            self.pos += 1
            self.skip_ws()
            if self.peek() == closing:
                self.pos += 1
                return True
            return False
        if c == closing:
            self.pos += 1
            return True
        found = repr(c) if c else "end of input"
        raise self.error(f"expected ',' or {closing!r}, found {found}")

    # ------------------------------------------------------------------ #
    # Values                                                             #
    # ------------------------------------------------------------------ #
    def read_document(self) -> Any:
        self.skip_ws()
        self.skip_attributes()
        value = self.read_value()
        self.skip_ws()
        if self.pos < len(self.text):
            raise self.error("trailing characters after value")
        return value

    def read_value(self) -> Any:
        self.skip_ws()
        c = self.peek()
        if not c:
            raise self.error("unexpected end of input")
        if c == '"':
            return self.read_string()
        if c == "r" and self.peek(1) in ('"', "#"):
            return self.read_raw()
        if c == "'":
            return self.read_char()
        if c == "(":
            return self.read_parenthesized(None)
        if c == "{":
            return self.read_map()
        if c == "[":
            return self.read_list()
        if c.isdigit() or c in "+-.":
            return self.read_number()
        if _IDENT_RE.match(c):
            return self.read_named()
        raise self.error(f"unexpected character {c!r}")

    def read_named(self) -> Any:
        start = self.pos
        ident = self.read_ident()
        if ident == "true":
            return True
        if ident == "false":
            return False
        if ident in _SPECIAL_FLOATS:
            return _SPECIAL_FLOATS[ident]
        if ident == "None":
            return None
        self.skip_ws()
        if ident == "Some":
            if self.peek() != "(":
                raise self.error("expected '(' after Some")
            self.pos += 1
            self.enter()
            value = self.read_value()
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
                self.skip_ws()
            self.expect(")")
            self.leave()
            return value
        if self.peek() == "(":
            return self.read_parenthesized(ident)
        logger.debug(f"Unit variant '{ident}' at offset {start}")
        return RonStruct(ident, {})

    def read_parenthesized(self, name: Optional[str]) -> Any:
        self.expect("(")
        self.enter()
        self.skip_ws()
        if self.peek() == ")":
            self.pos += 1
            self.leave()
            return RonStruct(name, {}) if name else ()

        if self.looks_like_field():
            value = RonStruct(name, self.read_fields())
        else:
            items = self.read_items(")")
            value = RonStruct(name, {}, tuple(items)) if name else tuple(items)
        self.leave()
        return value

    def looks_like_field(self) -> bool:
        saved = self.pos
        try:
            if self.read_ident() is None:
                return False
            self.skip_ws()
            return self.peek() == ":" and self.peek(1) != ":"
        finally:
            self.pos = saved

    def read_fields(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        while True:
            self.skip_ws()
            field_pos = self.pos
            name = self.read_ident()
            if name is None:
                raise self.error("expected field name")
            if name in fields:
                raise self.error(f"duplicate field '{name}'", field_pos)
            self.skip_ws()
            self.expect(":")
            fields[name] = self.read_value()
            if self.end_of_item(")"):
                return fields

    def read_items(self, closing: str) -> List[Any]:
        items: List[Any] = []
        while True:
            items.append(self.read_value())
            if self.end_of_item(closing):
                return items

    def read_list(self) -> List[Any]:
        self.expect("[")
        self.enter()
        self.skip_ws()
        if self.peek() == "]":
            self.pos += 1
            items: List[Any] = []
        else:
            items = self.read_items("]")
        self.leave()
        return items

    def read_map(self) -> Dict[Any, Any]:
        self.expect("{")
        self.enter()
        result: Dict[Any, Any] = {}
        self.skip_ws()
        if self.peek() == "}":
            self.pos += 1
            self.leave()
            return result
        while True:
            self.skip_ws()
            key_pos = self.pos
            key = self.read_value()
            try:
                hash(key)
            except TypeError:
                raise self.error("map key must be a scalar or a tuple of scalars", key_pos) from None
            self.skip_ws()
            self.expect(":")
            value = self.read_value()
            if key in result:
                logger.debug(f"Duplicate map key {key!r} at offset {key_pos}, keeping the last value")
            result[key] = value
            if self.end_of_item("}"):
                break
        self.leave()
        return result

    # ------------------------------------------------------------------ #
    # Scalars                                                            #
    # ------------------------------------------------------------------ #
    def read_string(self) -> str:
        start = self.pos
        self.pos += 1
        chunks: List[str] = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self.error("unterminated string", start)
            c = text[self.pos]
            if c == '"':
                self.pos += 1
                return "".join(chunks)
            if c == "\\":
                chunks.append(self.read_escape())
            else:
                chunks.append(c)
                self.pos += 1

    def read_escape(self) -> str:
        escape_pos = self.pos
        self.pos += 1
        c = self.peek()
        if c in _ESCAPES:
            self.pos += 1
            return _ESCAPES[c]
        if c == "x":
            return self.read_hex_escape(escape_pos, 2)
        if c == "u":
            if self.peek(1) == "{":
                end = self.text.find("}", self.pos)
                digits = self.text[self.pos + 2:end] if end != -1 else ""
                if not 1 <= len(digits) <= 6 or not all(d in "0123456789abcdefABCDEF" for d in digits):
                    raise self.error("invalid unicode escape", escape_pos)
                self.pos = end + 1
                return self.code_point(int(digits, 16), escape_pos)
            return self.read_hex_escape(escape_pos, 4)
        if c == "\n" or (c == "\r" and self.peek(1) == "\n"):
            # line continuation, LF or CRLF
            self.pos += 1
            while self.peek() and self.peek().isspace():
                self.pos += 1
            return ""
        if not c:
            raise self.error("unterminated escape sequence", escape_pos)
        sequence = "\\" + c
        raise self.error(f"invalid escape sequence {sequence!r}", escape_pos)

    def read_hex_escape(self, escape_pos: int, width: int) -> str:
        digits = self.text[self.pos + 1:self.pos + 1 + width]
        if len(digits) != width or not all(d in "0123456789abcdefABCDEF" for d in digits):
            raise self.error("invalid hex escape", escape_pos)
        self.pos += 1 + width
        return self.code_point(int(digits, 16), escape_pos)

    def code_point(self, value: int, pos: int) -> str:
        if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
            raise self.error(f"invalid code point {value:#x}", pos)
        return chr(value)

    def read_raw(self) -> Any:
        start = self.pos
        self.pos += 1
        hashes = 0
        while self.peek() == "#":
            hashes += 1
            self.pos += 1
        if self.peek() != '"':
            if hashes == 1 and _IDENT_RE.match(self.peek() or " "):
                # raw identifier, r#name
                ident = self.read_ident()
                self.skip_ws()
                if self.peek() == "(":
                    return self.read_parenthesized(ident)
                return RonStruct(ident, {})
            raise self.error("expected '\"' to open raw string", start)
        self.pos += 1
        terminator = '"' + "#" * hashes
        end = self.text.find(terminator, self.pos)
        if end == -1:
            raise self.error("unterminated raw string", start)
        value = self.text[self.pos:end]
        self.pos = end + len(terminator)
        return value

    def read_char(self) -> str:
        start = self.pos
        self.pos += 1
        c = self.peek()
        if not c or c == "'":
            raise self.error("empty or unterminated char literal", start)
        if c == "\\":
            value = self.read_escape()
        else:
            value = c
            self.pos += 1
        if self.peek() != "'":
            raise self.error("char literal must hold a single character", start)
        self.pos += 1
        return value

    def read_number(self) -> Any:
        start = self.pos
        sign = self.peek() if self.peek() in "+-" else ""
        rest = self.text[self.pos + len(sign):]
        for special, value in _SPECIAL_FLOATS.items():
            if rest.startswith(special):
                self.pos += len(sign) + len(special)
                self.check_number_end(start)
                return -value if sign == "-" else value

        match = _RADIX_INT_RE.match(self.text, self.pos)
        if match:
            literal = match.group().replace("_", "")
            self.pos = match.end()
            self.check_number_end(start)
            digits = literal.lstrip("+-")
            value = int(digits[2:], {"x": 16, "o": 8, "b": 2}[digits[1]])
            return -value if literal.startswith("-") else value

        match = _DECIMAL_RE.match(self.text, self.pos)
        literal = match.group() if match else ""
        if not any(ch.isdigit() for ch in literal):
            raise self.error("invalid number", start)
        self.pos = match.end()
        self.check_number_end(start)
        literal = literal.replace("_", "")
        if any(ch in literal for ch in ".eE"):
            return float(literal)
        return int(literal)

    def check_number_end(self, start: int) -> None:
        c = self.peek()
        if c and (c.isalnum() or c in "_."):
            raise self.error("invalid number", start)


def parse_ron(text: str) -> Any:
    """Parse one RON value from text. Raises ParseError on malformed input."""
    if not isinstance(text, str):
        raise ParseError(f"expected RON text, got {type(text).__name__}")
    return RonReader(text).read_document()
