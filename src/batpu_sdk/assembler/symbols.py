"""
Symbol Tables
=============

The assembler keeps two independent write-once tables:

- **labels**: label name -> instruction index (its address)
- **defines**: define name -> replacement text

Both are filled during pass 1 and only read during pass 2. A second binding
for a name raises DuplicateSymbolError and leaves the first binding in place.
"""

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Generic, Iterator, Optional, TypeVar

from batpu_sdk.errors import DuplicateSymbolError


V = TypeVar("V")


@dataclass(frozen=True)
class Symbol(Generic[V]):
    """
    A bound name.

    Attributes:
        name: Symbol name (case-sensitive)
        value: Bound value (int for labels, str for defines)
        line: Line of the definition, or None for predefined symbols
    """
    name: str
    value: V
    line: Optional[int] = None

    @property
    def is_predefined(self) -> bool:
        return self.line is None


class SymbolTable(Generic[V]):
    """
    Write-once mapping from names to values.

    Usage:
        labels = SymbolTable[int]("label")
        labels.define("loop", 3, line=7)
        labels["loop"]            # 3
        labels.define("loop", 9)  # raises DuplicateSymbolError
    """

    def __init__(self, kind: str):
        """
        Args:
            kind: "label" or "define", used in error messages
        """
        self.kind = kind
        self._symbols: dict[str, Symbol[V]] = {}

    def define(self, name: str, value: V, line: Optional[int] = None) -> Symbol[V]:
        """
        Bind a name.

        Raises:
            DuplicateSymbolError: If the name is already bound
        """
        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateSymbolError(
                name,
                kind=self.kind,
                line=line,
                original_line=existing.line,
            )

        symbol = Symbol(name, value, line)
        self._symbols[name] = symbol
        return symbol

    def get(self, name: str, default: Optional[V] = None) -> Optional[V]:
        symbol = self._symbols.get(name)
        return symbol.value if symbol is not None else default

    def lookup(self, name: str) -> Optional[Symbol[V]]:
        """Return the full Symbol record for a name, or None."""
        return self._symbols.get(name)

    def similar(self, name: str, limit: int = 3) -> list[str]:
        """Names close to `name`, for "did you mean" hints."""
        return get_close_matches(name, list(self._symbols), n=limit)

    def as_dict(self) -> dict[str, V]:
        return {name: symbol.value for name, symbol in self._symbols.items()}

    def symbols(self) -> list[Symbol[V]]:
        return list(self._symbols.values())

    def clear(self) -> None:
        self._symbols.clear()

    def __getitem__(self, name: str) -> V:
        return self._symbols[name].value

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"SymbolTable({self.kind!r}, {len(self._symbols)} symbols)"
