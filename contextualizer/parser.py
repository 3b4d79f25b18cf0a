"""Tokenizer for document text containing {{key}} / {{key:suffix}} markers."""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import MalformedDocument, UnknownMarkerKey

OPEN_DELIMITER = "{{"
CLOSE_DELIMITER = "}}"

# Keys that are never looked up in the marker table
SOURCE_KEY = "source"
IMAGE_KEY = "image"
PARAGRAPH_BREAK_KEY = "paragraph-break"
RESERVED_KEYS = frozenset({SOURCE_KEY, IMAGE_KEY, PARAGRAPH_BREAK_KEY})

MARKER_BODY = re.compile(r"([a-z0-9-]+)(?::([a-z0-9-]+))?")
MARKER_REFERENCE = re.compile(r"\{\{([a-z0-9-]+)(?::([a-z0-9-]+))?\}\}")

# Any whitespace run containing at least one newline
BREAK_PATTERN = re.compile(r"[^\S\n]*\n\s*")

SNIPPET_RADIUS = 20

TEXT = "text"
MARKER = "marker"
PARAGRAPH_BREAK = "paragraph-break"


@dataclass(frozen=True)
class Token:
    """A piece of tokenized document text."""

    kind: str  # text, marker or paragraph-break
    value: str
    start: int
    end: int
    key: Optional[str] = None
    suffix: Optional[str] = None

    @property
    def is_reference(self) -> bool:
        """True for {{source:id}} / {{image:id}} tokens."""
        return self.kind == MARKER and self.key in (SOURCE_KEY, IMAGE_KEY)


def _snippet(text: str, index: int) -> str:
    return text[max(0, index - SNIPPET_RADIUS) : index + SNIPPET_RADIUS]


def _split_literal(text: str, offset: int) -> list[Token]:
    """Split a literal run into text and paragraph-break tokens."""
    tokens = []
    pos = 0
    for match in BREAK_PATTERN.finditer(text):
        if match.start() > pos:
            tokens.append(Token(TEXT, text[pos : match.start()], offset + pos, offset + match.start()))
        tokens.append(Token(PARAGRAPH_BREAK, "", offset + match.start(), offset + match.end()))
        pos = match.end()
    if pos < len(text):
        tokens.append(Token(TEXT, text[pos:], offset + pos, offset + len(text)))
    return tokens


def _normalize_breaks(tokens: list[Token]) -> list[Token]:
    """Collapse consecutive breaks and drop leading/trailing ones."""
    result: list[Token] = []
    for token in tokens:
        if token.kind == PARAGRAPH_BREAK and (not result or result[-1].kind == PARAGRAPH_BREAK):
            continue
        result.append(token)
    while result and result[-1].kind == PARAGRAPH_BREAK:
        result.pop()
    return result


def tokenize(
    text: str,
    valid_keys: Optional[Iterable[str]] = None,
    document_id: Optional[str] = None,
) -> list[Token]:
    """Tokenize document text into literal runs, markers and paragraph breaks.

    Characters between markers are preserved exactly, so adjacent markers
    produce no extra whitespace.

    Args:
        text: Raw document text
        valid_keys: Marker table keys; when given, unknown keys are rejected
        document_id: Used in error messages

    Returns:
        Ordered list of tokens

    Raises:
        MalformedDocument: On unmatched, nested or invalid delimiters
        UnknownMarkerKey: If valid_keys is given and a key is not in it
    """
    allowed = None if valid_keys is None else frozenset(valid_keys) | RESERVED_KEYS
    tokens: list[Token] = []
    pos = 0

    while pos < len(text):
        open_idx = text.find(OPEN_DELIMITER, pos)
        close_idx = text.find(CLOSE_DELIMITER, pos)

        if close_idx != -1 and (open_idx == -1 or close_idx < open_idx):
            raise MalformedDocument("unmatched closing delimiter", _snippet(text, close_idx), document_id)

        if open_idx == -1:
            tokens.extend(_split_literal(text[pos:], pos))
            break

        end_idx = text.find(CLOSE_DELIMITER, open_idx + len(OPEN_DELIMITER))
        if end_idx == -1:
            raise MalformedDocument("unmatched opening delimiter", _snippet(text, open_idx), document_id)

        body_start = open_idx + len(OPEN_DELIMITER)
        if text.find(OPEN_DELIMITER, body_start, end_idx) != -1:
            raise MalformedDocument("nested marker", _snippet(text, open_idx), document_id)

        body = text[body_start:end_idx]
        match = MARKER_BODY.fullmatch(body)
        if match is None:
            raise MalformedDocument(f"invalid marker {{{{{body}}}}}", _snippet(text, open_idx), document_id)

        if open_idx > pos:
            tokens.extend(_split_literal(text[pos:open_idx], pos))

        key, suffix = match.group(1), match.group(2)
        marker_end = end_idx + len(CLOSE_DELIMITER)

        if key == PARAGRAPH_BREAK_KEY:
            tokens.append(Token(PARAGRAPH_BREAK, "", open_idx, marker_end))
        else:
            if allowed is not None and key not in allowed:
                raise UnknownMarkerKey(key, document_id)
            tokens.append(Token(MARKER, text[open_idx:marker_end], open_idx, marker_end, key, suffix))

        pos = marker_end

    return _normalize_breaks(tokens)


def marker_references(text: str) -> list[tuple[str, Optional[str]]]:
    """List every (key, suffix) referenced in text, in order of appearance.

    Explicit {{paragraph-break}} markers are layout, not references, and are skipped.
    """
    return [
        (m.group(1), m.group(2))
        for m in MARKER_REFERENCE.finditer(text)
        if m.group(1) != PARAGRAPH_BREAK_KEY
    ]


def has_markers(text: str) -> bool:
    """Check if a string contains any markers."""
    return MARKER_REFERENCE.search(text) is not None
