"""
KTC32 SDK Error Hierarchy
=========================

This module defines the exception hierarchy for the KTC32 SDK.
All exceptions inherit from Ktc32Error, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
Ktc32Error (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - unknown mnemonic, wrong operand count,
    │                         malformed label or constant
    ├── UnknownRegisterError - register token is not a name or alias
    ├── ImmediateParseError - immediate does not parse at the field's
    │                         width/signedness
    └── ImmediateRangeError - immediate parsed but exceeds the field

Every assembler error is fatal. The assembler raises the first error it
meets and produces no output; there is no error recovery.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Ktc32Error(Exception):
    """
    Base exception for all KTC32 SDK errors.

        try:
            assembler.assemble_file("program.asm")
        except Ktc32Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Ktc32Error):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Source line number of the error, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            loop.asm:3:9: error: unknown register 'r32'
                addi r32, r1, 1
                     ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Raised by the line scanner and the record builder when a line cannot
    be turned into an instruction record.

    Examples:
        - Unknown mnemonic
        - Wrong number of operands for a mnemonic
        - Label with an empty name (a bare ':')
        - Constant token that is not a 32-bit hex literal

    Attributes:
        tokens: The tokens of the offending line
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        tokens: Optional[tuple[str, ...]] = None,
    ):
        self.tokens = tuple(tokens) if tokens else ()
        super().__init__(message, location=location, hint=hint, source_line=source_line)


class UnknownRegisterError(AssemblerError):
    """
    Register operand matches neither a numeric name nor an alias.

    Valid registers are r0..r31 plus the aliases zero, ra, gp, sp, fp,
    a0-a3, t0-t4 and flag.
    """

    def __init__(
        self,
        register: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.register = register
        super().__init__(
            f"unknown register '{register}'",
            location=location,
            hint="registers are r0-r31 or zero, ra, gp, sp, fp, a0-a3, t0-t4, flag",
            source_line=source_line,
        )


class ImmediateParseError(AssemblerError):
    """
    Immediate operand could not be parsed.

    Raised when a literal does not parse at the width and signedness the
    instruction format expects, or when a symbol-bearing operand is
    neither a known label nor a valid literal.
    """

    def __init__(
        self,
        token: str,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.token = token
        self.expected = expected
        super().__init__(
            f"could not parse immediate '{token}' as {expected}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class ImmediateRangeError(AssemblerError):
    """
    Immediate value does not fit its instruction field.

    The I16 format holds a 5-bit unsigned value (0 to 31); the J format
    holds a signed offset strictly between -2^19 and 2^19 - 1.
    """

    def __init__(
        self,
        value: int,
        valid_range: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        target: Optional[str] = None,
    ):
        self.value = value
        self.valid_range = valid_range
        self.target = target

        if target is not None:
            message = f"jump target '{target}' is out of range (offset: {value})"
        else:
            message = f"immediate {value} is out of range"

        super().__init__(
            message,
            location=location,
            hint=f"valid range is {valid_range}",
            source_line=source_line,
        )
