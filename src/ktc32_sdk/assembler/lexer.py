"""
KTC32 Assembly Line Scanner
===========================

This module splits KTC32 assembly source into token lines and classifies
each one. The source language is strictly line-oriented: every line holds
at most one instruction, label or constant.

Line Kinds
----------
| Kind        | Form                         | Example              |
|-------------|------------------------------|----------------------|
| INSTRUCTION | mnemonic operand[, operand]  | ``addi r1, r1, 1``   |
| LABEL       | single token ending in ``:`` | ``loop:``            |
| CONSTANT    | single token starting ``0x`` | ``0xdeadbeef``       |

Blank lines and lines whose first non-whitespace characters are ``//``
are comments; they produce no token line and occupy no address.

Tokenization
------------
Commas are interchangeable with whitespace, so ``add r1, r2`` and
``add r1 r2`` scan identically. Every token is lowercased, which makes
mnemonics, registers, labels and hex digits case-insensitive.

Example
-------
>>> from ktc32_sdk.assembler.lexer import Lexer
>>> for line in Lexer("loop:\\n  ADDI r1, r1, 1").tokenize():
...     print(line)
TokenLine(LABEL, ('loop:',), 1)
TokenLine(INSTRUCTION, ('addi', 'r1', 'r1', '1'), 2)
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from ktc32_sdk.assembler.opcodes import is_valid_instruction
from ktc32_sdk.errors import AssemblySyntaxError, SourceLocation


COMMENT_PREFIX = "//"
LABEL_SUFFIX = ":"
HEX_PREFIX = "0x"

_TOKEN_RE = re.compile(r"\S+")


# =============================================================================
# Line Kind Enumeration
# =============================================================================

class LineKind(Enum):
    """Classification of a non-empty, non-comment source line."""
    INSTRUCTION = auto()
    LABEL = auto()
    CONSTANT = auto()


# =============================================================================
# Token Line Data Class
# =============================================================================

@dataclass(frozen=True)
class TokenLine:
    """
    One scanned source line.

    Attributes:
        kind: Line classification
        tokens: Lowercase tokens in source order
        columns: 1-based column of each token in the original text
        line: Line number in source (1-indexed)
        filename: Name of the source file
        text: Original line text, without the line terminator
    """
    kind: LineKind
    tokens: tuple[str, ...]
    columns: tuple[int, ...]
    line: int
    filename: str = "<input>"
    text: str = ""

    def __repr__(self) -> str:
        return f"TokenLine({self.kind.name}, {self.tokens!r}, {self.line})"

    def location(self, index: int = 0) -> SourceLocation:
        """Return a SourceLocation pointing at token ``index``."""
        column = self.columns[index] if index < len(self.columns) else 0
        return SourceLocation(self.filename, self.line, column)


# =============================================================================
# Lexer Implementation
# =============================================================================

def split_tokens(text: str) -> list[tuple[str, int]]:
    """
    Split a raw line into lowercase tokens with their 1-based columns.

    Commas count as whitespace. Replacing them with spaces keeps every
    character at its original offset, so columns refer to the raw text.
    """
    normalized = text.replace(",", " ")
    return [(m.group().lower(), m.start() + 1) for m in _TOKEN_RE.finditer(normalized)]


def is_comment(text: str) -> bool:
    """Return True for lines that are blank or start with ``//``."""
    stripped = text.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def scan_line(text: str, line: int, filename: str = "<input>") -> Optional[TokenLine]:
    """
    Scan and classify a single source line.

    Args:
        text: Raw line text
        line: 1-based line number
        filename: Source file name for error reporting

    Returns:
        A TokenLine, or None for blank and comment lines

    Raises:
        AssemblySyntaxError: If the first token is not a known mnemonic
    """
    if is_comment(text):
        return None

    pairs = split_tokens(text)
    tokens = tuple(token for token, _ in pairs)
    columns = tuple(column for _, column in pairs)
    first = tokens[0]

    if len(tokens) == 1 and first.endswith(LABEL_SUFFIX):
        kind = LineKind.LABEL
    elif len(tokens) == 1 and first.startswith(HEX_PREFIX):
        kind = LineKind.CONSTANT
    elif is_valid_instruction(first):
        kind = LineKind.INSTRUCTION
    else:
        raise AssemblySyntaxError(
            f"unknown mnemonic '{first}'",
            location=SourceLocation(filename, line, columns[0]),
            source_line=text.rstrip(),
            tokens=tokens,
        )

    return TokenLine(
        kind=kind,
        tokens=tokens,
        columns=columns,
        line=line,
        filename=filename,
        text=text.rstrip("\r\n"),
    )


class Lexer:
    """
    Tokenizes KTC32 assembly source text into TokenLines.

    Usage:
        lexer = Lexer(source_text, filename)
        lines = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def tokenize(self) -> Iterator[TokenLine]:
        """
        Yield one TokenLine per instruction, label or constant line.

        Lines end at LF only, with an optional trailing CR. Other line
        breaks such as form feed count as whitespace inside a line.

        Raises:
            AssemblySyntaxError: On the first line with an unknown mnemonic
        """
        for number, text in enumerate(self.source.split("\n"), start=1):
            text = text.removesuffix("\r")
            token_line = scan_line(text, number, self.filename)
            if token_line is not None:
                yield token_line
