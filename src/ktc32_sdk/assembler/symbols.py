"""
KTC32 Symbol Table
==================

Labels are collected during the layout pass and read during the second
pass. Once the layout pass has finished, the table is frozen: further
definitions raise RuntimeError.

Duplicate labels are accepted. A lookup scans the declarations and the
last matching one wins, so in

    here:
        addi r1, r1, 1
    here:
        jal r0, here

the jump targets the second ``here``.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from ktc32_sdk.errors import SourceLocation


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name without the trailing colon
        address: Address at the point of declaration
        location: Where the label was declared
    """
    name: str
    address: int
    location: SourceLocation


class SymbolTable:
    """
    Ordered collection of label declarations.

    Declarations are kept in source order, duplicates included, so that
    lookups can reproduce last-declaration-wins resolution.
    """

    def __init__(self) -> None:
        self._entries: list[Symbol] = []
        self._frozen = False

    def define(self, name: str, address: int, location: SourceLocation) -> Symbol:
        """
        Append a label declaration.

        Raises:
            RuntimeError: If the table has been frozen
        """
        if self._frozen:
            raise RuntimeError(f"cannot define '{name}': symbol table is frozen")

        previous = self.lookup(name)
        if previous is not None:
            logger.warning(
                f"{location}: label '{name}' redefined "
                f"(first defined at {previous.location}); later definition wins"
            )

        symbol = Symbol(name, address, location)
        self._entries.append(symbol)
        logger.debug(f"Defined label '{name}' at 0x{address:04x}")
        return symbol

    def freeze(self) -> None:
        """Make the table read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Optional[Symbol]:
        """Return the last declaration of ``name``, or None."""
        for symbol in reversed(self._entries):
            if symbol.name == name:
                return symbol
        return None

    def duplicates(self) -> list[str]:
        """Return names declared more than once, in first-declaration order."""
        seen: dict[str, int] = {}
        for symbol in self._entries:
            seen[symbol.name] = seen.get(symbol.name, 0) + 1
        return [name for name, count in seen.items() if count > 1]

    def as_dict(self) -> dict[str, int]:
        """Map each name to the address a lookup would return."""
        return {symbol.name: symbol.address for symbol in self._entries}

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
