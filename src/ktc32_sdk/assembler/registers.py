"""
KTC32 Register Names
====================

KTC32 has 32 general-purpose registers, r0 through r31, each addressed by
a 5-bit index. A subset has ABI aliases:

| Alias     | Register  | Role                  |
|-----------|-----------|-----------------------|
| zero      | r0        | hardwired zero        |
| ra        | r1        | return address        |
| gp        | r2        | global pointer        |
| sp        | r3        | stack pointer         |
| fp        | r4        | frame pointer         |
| a0 - a3   | r5 - r8   | arguments             |
| t0 - t4   | r9 - r13  | temporaries           |
| flag      | r31       | comparison flag       |

Registers r14 to r30 have no alias.
"""

from typing import Optional

from ktc32_sdk.errors import SourceLocation, UnknownRegisterError


NUM_REGISTERS = 32

# Canonical names r0..r31
REGISTERS: dict[str, int] = {f"r{i}": i for i in range(NUM_REGISTERS)}

REGISTER_ALIASES: dict[str, int] = {
    "zero": 0,
    "ra": 1,
    "gp": 2,
    "sp": 3,
    "fp": 4,
    "a0": 5,
    "a1": 6,
    "a2": 7,
    "a3": 8,
    "t0": 9,
    "t1": 10,
    "t2": 11,
    "t3": 12,
    "t4": 13,
    "flag": 31,
}

_ALL_NAMES: dict[str, int] = {**REGISTERS, **REGISTER_ALIASES}


def lookup_register(name: str) -> Optional[int]:
    """
    Look up a register index by name or alias.

    Args:
        name: Register token (case-insensitive)

    Returns:
        Register index 0-31, or None if the name is unknown
    """
    return _ALL_NAMES.get(name.lower())


def resolve_register(
    name: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> int:
    """
    Resolve a register token to its 5-bit index.

    Raises:
        UnknownRegisterError: If the token is not a register name or alias
    """
    index = lookup_register(name)
    if index is None:
        raise UnknownRegisterError(name, location=location, source_line=source_line)
    return index


def register_name(index: int) -> str:
    """Return the canonical name (``rN``) of a register index."""
    if not 0 <= index < NUM_REGISTERS:
        raise ValueError(f"register index {index} out of range 0-{NUM_REGISTERS - 1}")
    return f"r{index}"
