"""
# NMD: compilables.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Compilable text: partially rewritten text held as an ordered list of parts.

A part is either
- fixed, i.e. already final output that no construct may touch, or
- compilable, i.e. text that constructs may still rewrite,
  together with the incompatibility set of constructs that may not.

Rules are applied one at a time through `CompilableText.apply_rule`,
which matches against the concatenated compilable content visible to the rule
and splices the rule's output back between the untouched parts.
"""

import logging
from typing import Iterable, Optional

from nmd.exceptions import ContentOverflowException
from nmd.incompatibilities import IncompatibilitySet

logger = logging.getLogger(__name__)

FIXED = 'FIXED'
COMPILABLE = 'COMPILABLE'

BOUNDARY_NONE = 'none'
BOUNDARY_LEFT = 'left'
BOUNDARY_RIGHT = 'right'
BOUNDARY_BOTH = 'both'
BOUNDARY_POLICIES = (BOUNDARY_NONE, BOUNDARY_LEFT, BOUNDARY_RIGHT, BOUNDARY_BOTH)


class CompilableTextPart:
    """
    A fixed or compilable piece of text.
    """
    _content: str
    _kind: str
    _incompatible: IncompatibilitySet

    def __init__(self, content: str, kind: str, incompatible: Optional[IncompatibilitySet] = None):
        self._content = content
        self._kind = kind
        self._incompatible = incompatible if incompatible is not None else IncompatibilitySet.nothing()

    @staticmethod
    def fixed(content: str) -> 'CompilableTextPart':
        return CompilableTextPart(content, FIXED)

    @staticmethod
    def compilable(content: str, incompatible: Optional[IncompatibilitySet] = None) -> 'CompilableTextPart':
        return CompilableTextPart(content, COMPILABLE, incompatible)

    @property
    def content(self) -> str:
        return self._content

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def incompatible(self) -> IncompatibilitySet:
        return self._incompatible

    @property
    def is_fixed(self) -> bool:
        return self._kind == FIXED

    @property
    def is_compilable(self) -> bool:
        return self._kind == COMPILABLE

    def with_content(self, content: str) -> 'CompilableTextPart':
        return CompilableTextPart(content, self._kind, self._incompatible)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CompilableTextPart):
            return NotImplemented

        return (
            self._content == other._content
            and self._kind == other._kind
            and self._incompatible == other._incompatible
        )

    def __hash__(self) -> int:
        return hash((self._content, self._kind, self._incompatible))

    def __repr__(self) -> str:
        if self.is_fixed:
            return f'CompilableTextPart.fixed({self._content!r})'

        return f'CompilableTextPart.compilable({self._content!r}, {self._incompatible!r})'


class CompilableText:
    """
    Ordered list of parts, with an optional NUID and an optional scope.

    The scope is the identifier of the construct currently looking at the text:
    compilable parts whose incompatibility set contains the scope are invisible to it,
    and are treated like fixed parts by `compilable_content`, `ends` and `slice`.
    """
    _parts: tuple[CompilableTextPart, ...]
    _nuid: Optional[str]
    _scope: Optional[str]

    def __init__(self, parts: Iterable[CompilableTextPart] = (), nuid: Optional[str] = None, scope: Optional[str] = None):
        self._parts = tuple(parts)
        self._nuid = nuid
        self._scope = scope

    @staticmethod
    def of_compilable(
        content: str,
        incompatible: Optional[IncompatibilitySet] = None,
        nuid: Optional[str] = None,
    ) -> 'CompilableText':
        return CompilableText([CompilableTextPart.compilable(content, incompatible)], nuid)

    @staticmethod
    def of_fixed(content: str, nuid: Optional[str] = None) -> 'CompilableText':
        return CompilableText([CompilableTextPart.fixed(content)], nuid)

    @property
    def parts(self) -> tuple[CompilableTextPart, ...]:
        return self._parts

    @property
    def nuid(self) -> Optional[str]:
        return self._nuid

    @property
    def scope(self) -> Optional[str]:
        return self._scope

    def with_nuid(self, nuid: Optional[str]) -> 'CompilableText':
        return CompilableText(self._parts, nuid, self._scope)

    def with_scope(self, scope: Optional[str]) -> 'CompilableText':
        return CompilableText(self._parts, self._nuid, scope)

    def is_visible(self, part: CompilableTextPart) -> bool:
        if not part.is_compilable:
            return False

        return self._scope is None or not part.incompatible.contains(self._scope)

    def content(self) -> str:
        return ''.join(part.content for part in self._parts)

    def compilable_content(self) -> str:
        return ''.join(part.content for part in self._parts if self.is_visible(part))

    def ends(self) -> list[int]:
        """
        Cumulative end offset, in compilable content, of every visible compilable part.
        """
        ends = []
        position = 0
        for part in self._parts:
            if self.is_visible(part):
                position += len(part.content)
                ends.append(position)

        return ends

    def slice(self, start: int, end: int, boundary: str = BOUNDARY_BOTH) -> list[CompilableTextPart]:
        """
        Return the parts covering `[start, end)` of the compilable content.

        Compilable parts are cut at `start` and `end`.
        A part invisible to the scope sitting at compilable offset `p` is kept
        - always, if `start < p < end`;
        - if `p == start`, only when the left boundary is included;
        - if `p == end`, only when the right boundary is included.
        When a boundary is not included, it first moves inward to the nearest edge of a compilable part,
        so that the slice never starts or ends in the middle of a compilable part.
        """
        if boundary not in BOUNDARY_POLICIES:
            raise ValueError(f'error: invalid boundary policy `{boundary}`')

        compilable_length = len(self.compilable_content())
        if start > end:
            raise ContentOverflowException(f'slice start {start} is past slice end {end}')
        if end > compilable_length:
            raise ContentOverflowException(f'slice end {end} overflows compilable content of length {compilable_length}')

        include_left = boundary in (BOUNDARY_LEFT, BOUNDARY_BOTH)
        include_right = boundary in (BOUNDARY_RIGHT, BOUNDARY_BOTH)

        if not include_left or not include_right:
            edges = self.compute_edges()
            if not include_left:
                start = min((edge for edge in edges if edge >= start), default=start)
            if not include_right:
                end = max((edge for edge in edges if edge <= end), default=end)
            if start > end:
                return []

        parts = []
        position = 0
        for part in self._parts:
            if self.is_visible(part):
                part_start = position
                part_end = position + len(part.content)
                position = part_end

                overlap_start = max(part_start, start)
                overlap_end = min(part_end, end)
                if overlap_start < overlap_end:
                    parts.append(part.with_content(part.content[overlap_start - part_start:overlap_end - part_start]))

            elif (
                start < position < end
                or (position == start and include_left)
                or (position == end and include_right)
            ):
                parts.append(part)

        return parts

    def compute_edges(self) -> list[int]:
        edges = []
        position = 0
        for part in self._parts:
            if self.is_visible(part) and len(part.content) > 0:
                edges.append(position)
                position += len(part.content)
                edges.append(position)

        return edges

    def apply_rule(self, rule_id: str, rule, configuration, context) -> 'CompilableText':
        """
        Apply one rule to this text.

        Matches are searched in the compilable content visible to `rule_id`.
        Parts outside matches are kept (cut at match boundaries if needed).
        The parts inside each match, invisible ones included, are handed to the rule,
        and the rule's output takes their place.
        A part invisible to the rule that sits exactly at a match boundary stays outside the match.
        """
        view = self.with_scope(rule_id)
        compilable_content = view.compilable_content()

        matches = [
            match.span()
            for match in rule.modifier.regex.finditer(compilable_content)
            if match.end() > match.start()
        ]
        if len(matches) == 0:
            return self

        logger.debug('applying `%s` on %d match(es)', rule_id, len(matches))

        compiled_parts = []
        matched_parts = []
        match_index = 0
        position = 0

        for part in self._parts:
            if not view.is_visible(part):
                if len(matched_parts) > 0:
                    matched_parts.append(part)
                else:
                    compiled_parts.append(part)
                continue

            part_start = position
            part_end = position + len(part.content)
            position = part_end

            cursor = part_start
            while cursor < part_end:
                if match_index >= len(matches):
                    compiled_parts.append(part.with_content(part.content[cursor - part_start:]))
                    break

                match_start, match_end = matches[match_index]
                if cursor < match_start:
                    chunk_end = min(match_start, part_end)
                    compiled_parts.append(part.with_content(part.content[cursor - part_start:chunk_end - part_start]))
                    cursor = chunk_end
                    continue

                chunk_end = min(match_end, part_end)
                matched_parts.append(part.with_content(part.content[cursor - part_start:chunk_end - part_start]))
                cursor = chunk_end

                if cursor == match_end:
                    matched_text = CompilableText(matched_parts, self._nuid, scope=rule_id)
                    compiled_parts.extend(rule.compile(matched_text, configuration, context).parts)
                    matched_parts = []
                    match_index += 1

        assert len(matched_parts) == 0, f'unclosed match while applying `{rule_id}`'

        return CompilableText(compiled_parts, self._nuid, self._scope)

    def compile(self, codex, configuration, context) -> 'CompilableText':
        """
        Apply every inline construct of the codex, in priority order.
        """
        excluded_modifiers = configuration.excluded_modifiers
        if excluded_modifiers.is_everything:
            return self

        compiled_text = self
        for rule_id, entry in codex.ordered_inline():
            if excluded_modifiers.contains(rule_id):
                continue

            compiled_text = compiled_text.apply_rule(rule_id, entry.rule, configuration, context)

        return compiled_text

    def __eq__(self, other) -> bool:
        if not isinstance(other, CompilableText):
            return NotImplemented

        return self._parts == other._parts and self._nuid == other._nuid

    def __hash__(self) -> int:
        return hash((self._parts, self._nuid))

    def __repr__(self) -> str:
        return f'CompilableText({list(self._parts)!r}, nuid={self._nuid!r})'
