"""
# NMD: incompatibilities.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Incompatibility sets.

An incompatibility set says which constructs may not act on a piece of text.
It is in one of three states:
- EVERYTHING: no construct may act
- LISTED: the listed construct identifiers may not act
- NOTHING: every construct may act
"""

from typing import Iterable

EVERYTHING = 'EVERYTHING'
LISTED = 'LISTED'
NOTHING = 'NOTHING'


class IncompatibilitySet:
    """
    Three-state set of construct identifiers, forming a monoid under `combine`.

    ````
    EVERYTHING + «any» = EVERYTHING
    LISTED(a) + LISTED(b) = LISTED(a ∪ b)
    NOTHING + «any» = «any»
    ````
    """
    _state: str
    _identifiers: tuple[str, ...]

    def __init__(self, state: str, identifiers: Iterable[str] = ()):
        if state not in (EVERYTHING, LISTED, NOTHING):
            raise ValueError(f'error: invalid incompatibility state `{state}`')

        self._state = state
        self._identifiers = tuple(dict.fromkeys(identifiers)) if state == LISTED else ()

    @staticmethod
    def everything() -> 'IncompatibilitySet':
        return IncompatibilitySet(EVERYTHING)

    @staticmethod
    def listed(identifiers: Iterable[str]) -> 'IncompatibilitySet':
        return IncompatibilitySet(LISTED, identifiers)

    @staticmethod
    def nothing() -> 'IncompatibilitySet':
        return IncompatibilitySet(NOTHING)

    @property
    def state(self) -> str:
        return self._state

    @property
    def identifiers(self) -> tuple[str, ...]:
        return self._identifiers

    @property
    def is_everything(self) -> bool:
        return self._state == EVERYTHING

    @property
    def is_nothing(self) -> bool:
        return self._state == NOTHING

    def contains(self, identifier: str) -> bool:
        if self._state == EVERYTHING:
            return True

        if self._state == LISTED:
            return identifier in self._identifiers

        return False

    def combine(self, other: 'IncompatibilitySet') -> 'IncompatibilitySet':
        if self._state == EVERYTHING or other._state == EVERYTHING:
            return IncompatibilitySet.everything()

        if self._state == NOTHING:
            return other

        if other._state == NOTHING:
            return self

        return IncompatibilitySet.listed(self._identifiers + other._identifiers)

    def __add__(self, other: 'IncompatibilitySet') -> 'IncompatibilitySet':
        return self.combine(other)

    def __contains__(self, identifier: str) -> bool:
        return self.contains(identifier)

    def __eq__(self, other) -> bool:
        if not isinstance(other, IncompatibilitySet):
            return NotImplemented

        return self._state == other._state and set(self._identifiers) == set(other._identifiers)

    def __hash__(self) -> int:
        return hash((self._state, frozenset(self._identifiers)))

    def __repr__(self) -> str:
        if self._state == LISTED:
            return f'IncompatibilitySet.listed({list(self._identifiers)!r})'

        return f'IncompatibilitySet.{self._state.lower()}()'
