"""
# NMD: rules.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Compilation rules: the rewrite half of every inline construct.

A rule receives the compilable text covered by exactly one match of its modifier
and returns the replacement compilable text.
Replacement rules build their output from a list of replacer parts:
- fixed parts, i.e. templates whose `\\g<«group»>` references are expanded from the match
- capture parts, i.e. the compilable text of a capture group, kept compilable
- closure parts, computed by an arbitrary function
- pass-through parts, i.e. the matched compilable text, unchanged
"""

import abc
import logging
import re
from typing import Callable, Iterable, Optional, Union

from nmd.compilables import BOUNDARY_BOTH, CompilableText, CompilableTextPart
from nmd.exceptions import (
    InvalidGreekLetterException,
    UnmatchedRuleException,
    UnresolvedCitationException,
    UnresolvedReferenceException,
)
from nmd.modifiers import Modifier
from nmd.references import ResourceReference
from nmd.utilities import escape_attribute_value_html, escape_html, html_nuid_attribute, none_to_empty_string

logger = logging.getLogger(__name__)

GroupKey = Union[int, str]

NUID_TEMPLATE_GROUP = 'nuid'

GREEK_LETTER_FROM_KEY = {
    'a': 'alpha',
    'b': 'beta',
    'g': 'gamma',
    'd': 'delta',
    'e': 'epsilon',
    'z': 'zeta',
    'n': 'eta',
    'th': 'theta',
    'i': 'iota',
    'k': 'kappa',
    'l': 'lambda',
    'm': 'mu',
    'nu': 'nu',
    'x': 'xi',
    'o': 'omicron',
    'p': 'pi',
    'r': 'rho',
    's': 'sigma',
    't': 'tau',
    'u': 'upsilon',
    'phi': 'phi',
    'chi': 'chi',
    'psi': 'psi',
    'w': 'omega',
    'A': 'Alpha',
    'B': 'Beta',
    'G': 'Gamma',
    'D': 'Delta',
    'E': 'Epsilon',
    'Z': 'Zeta',
    'N': 'Eta',
    'Th': 'Theta',
    'I': 'Iota',
    'K': 'Kappa',
    'L': 'Lambda',
    'M': 'Mu',
    'Nu': 'Nu',
    'X': 'Xi',
    'O': 'Omicron',
    'P': 'Pi',
    'R': 'Rho',
    'S': 'Sigma',
    'T': 'Tau',
    'U': 'Upsilon',
    'Phi': 'Phi',
    'Chi': 'Chi',
    'Psi': 'Psi',
    'W': 'Omega',
}
GREEK_LETTER_KEYS_LONGEST_FIRST = tuple(sorted(GREEK_LETTER_FROM_KEY, key=len, reverse=True))


class CompilationRule(abc.ABC):
    """
    Base class for a compilation rule.
    """
    _modifier: Modifier

    def __init__(self, modifier: Modifier):
        self._modifier = modifier

    @property
    def modifier(self) -> Modifier:
        return self._modifier

    def search(self, compilable: CompilableText) -> re.Match:
        compilable_content = compilable.compilable_content()
        match = self._modifier.regex.search(compilable_content)
        if match is None:
            raise UnmatchedRuleException(
                f'`{self._modifier.identifier}` does not match compilable content `{compilable_content}`'
            )

        return match

    @abc.abstractmethod
    def compile(self, compilable: CompilableText, configuration, context) -> CompilableText:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._modifier.identifier!r})'


class ReplacerPart(abc.ABC):
    """
    Base class for a piece of the output of a replacement rule.
    """

    @abc.abstractmethod
    def build(
        self,
        rule: CompilationRule,
        compilable: CompilableText,
        match: re.Match,
        configuration,
        context,
    ) -> list[CompilableTextPart]:
        raise NotImplementedError


class FixedReplacerPart(ReplacerPart):
    """
    Fixed output expanded from a template.

    `\\g<«group»>` in the template is replaced by the matched group (empty if it did not participate),
    and `\\g<nuid>`, unless the modifier has a group of that name, by the `data-nuid` attribute of the text.
    Groups listed in `references_at` are built as resource references (`href`, `src`),
    groups listed in `identifiers_at` as anchor identifiers (`id`);
    both are escaped for use as attribute values.
    `post_replacements` are `(pattern, replacement)` pairs applied to the expansion.
    """
    _template: str
    _references_at: tuple[GroupKey, ...]
    _identifiers_at: tuple[GroupKey, ...]
    _post_replacements: tuple[tuple[str, str], ...]

    def __init__(
        self,
        template: str,
        references_at: Iterable[GroupKey] = (),
        identifiers_at: Iterable[GroupKey] = (),
        post_replacements: Iterable[tuple[str, str]] = (),
    ):
        self._template = template
        self._references_at = tuple(references_at)
        self._identifiers_at = tuple(identifiers_at)
        self._post_replacements = tuple(post_replacements)

    @property
    def template(self) -> str:
        return self._template

    def build(self, rule, compilable, match, configuration, context) -> list[CompilableTextPart]:
        def substitute_group(group_match: re.Match) -> str:
            group_name = group_match.group('group')
            if group_name == NUID_TEMPLATE_GROUP and group_name not in match.re.groupindex:
                return html_nuid_attribute(compilable.nuid)

            group_key = int(group_name) if group_name.isdigit() else group_name
            value = none_to_empty_string(match.group(group_key))

            if group_key in self._references_at:
                value = ResourceReference.of(value, context.document_name).build()
                return escape_attribute_value_html(value)

            if group_key in self._identifiers_at:
                reference = ResourceReference.of_internal_without_sharp(value, context.document_name)
                return escape_attribute_value_html(reference.build_without_internal_sharp())

            return value

        content = re.sub(pattern=r'\\g<(?P<group>\w+)>', repl=substitute_group, string=self._template)
        for pattern, replacement in self._post_replacements:
            content = re.sub(pattern=pattern, repl=replacement, string=content)

        return [CompilableTextPart.fixed(content)]


class CaptureReplacerPart(ReplacerPart):
    """
    The compilable text covered by a capture group.

    Compilable pieces inherit the incompatibility of the rule's modifier,
    and are HTML-escaped if `escape` is set.
    """
    _group: GroupKey
    _escape: bool

    def __init__(self, group: GroupKey, escape: bool = False):
        self._group = group
        self._escape = escape

    @property
    def group(self) -> GroupKey:
        return self._group

    def build(self, rule, compilable, match, configuration, context) -> list[CompilableTextPart]:
        start, end = match.span(self._group)
        if start < 0:
            return []

        incompatible = rule.modifier.incompatible
        parts = []
        for part in compilable.slice(start, end, BOUNDARY_BOTH):
            if part.is_compilable:
                content = part.content
                if self._escape and compilable.is_visible(part):
                    content = escape_html(content)
                part = CompilableTextPart.compilable(content, part.incompatible.combine(incompatible))
            parts.append(part)

        return parts


class ClosureReplacerPart(ReplacerPart):
    _function: Callable[..., list[CompilableTextPart]]

    def __init__(self, function: Callable[..., list[CompilableTextPart]]):
        self._function = function

    def build(self, rule, compilable, match, configuration, context) -> list[CompilableTextPart]:
        return list(self._function(compilable, match, configuration, context))


class PassThroughReplacerPart(ReplacerPart):
    def build(self, rule, compilable, match, configuration, context) -> list[CompilableTextPart]:
        return list(compilable.parts)


class ReplacementRule(CompilationRule):
    """
    Rule whose output is the concatenation of its replacer parts.
    """
    _replacer_parts: tuple[ReplacerPart, ...]

    def __init__(self, modifier: Modifier, replacer_parts: Iterable[ReplacerPart]):
        super().__init__(modifier)
        self._replacer_parts = tuple(replacer_parts)

    @property
    def replacer_parts(self) -> tuple[ReplacerPart, ...]:
        return self._replacer_parts

    def compile(self, compilable: CompilableText, configuration, context) -> CompilableText:
        match = self.search(compilable)

        parts = []
        for replacer_part in self._replacer_parts:
            parts.extend(replacer_part.build(self, compilable, match, configuration, context))

        return CompilableText(parts, compilable.nuid)


def decompose_greek_letters(letters: str) -> tuple[str, list[str]]:
    """
    Decompose «letters» into LaTeX Greek letter commands, longest key first.

    Returns the LaTeX string and the characters that are not Greek letter keys (kept as they are).
    """
    latex = ''
    unknown_characters = []
    index = 0
    while index < len(letters):
        for key in GREEK_LETTER_KEYS_LONGEST_FIRST:
            if letters.startswith(key, index):
                latex += f'\\{GREEK_LETTER_FROM_KEY[key]}'
                index += len(key)
                break
        else:
            latex += letters[index]
            unknown_characters.append(letters[index])
            index += 1

    return latex, unknown_characters


class GreekLettersRule(CompilationRule):
    """
    `%«letters»%` to `<span class="greek">$«latex»$</span>`.
    """

    def compile(self, compilable: CompilableText, configuration, context) -> CompilableText:
        match = self.search(compilable)
        letters = match.group(1)

        latex, unknown_characters = decompose_greek_letters(letters)
        if len(unknown_characters) > 0:
            message = f'unknown Greek letter key(s) {unknown_characters} in `{match.group(0)}`'
            if configuration.strict_greek_letters_check:
                raise InvalidGreekLetterException(message)
            logger.warning(message)

        return CompilableText([CompilableTextPart.fixed(f'<span class="greek">${latex}$</span>')], compilable.nuid)


class ReferenceRule(CompilationRule):
    """
    `&«key»&` to the literal value of «key» in the configuration's references.
    """

    def compile(self, compilable: CompilableText, configuration, context) -> CompilableText:
        match = self.search(compilable)
        key = match.group(1)

        value: Optional[str] = configuration.lookup_reference(key)
        if value is None:
            if configuration.strict_reference_check:
                raise UnresolvedReferenceException(key)
            logger.warning('reference `%s` not found: `%s` is left as it is', key, match.group(0))
            return CompilableText(compilable.parts, compilable.nuid)

        return CompilableText([CompilableTextPart.fixed(value)], compilable.nuid)


class CiteRule(CompilationRule):
    """
    `^[«key»]` to a numbered link to the bibliography record «key».
    """

    def compile(self, compilable: CompilableText, configuration, context) -> CompilableText:
        match = self.search(compilable)
        key = match.group(1)

        bibliography = configuration.bibliography
        number = bibliography.number_of(key) if bibliography is not None else None
        if number is None:
            if configuration.strict_cite_check:
                raise UnresolvedCitationException(key)
            logger.warning('bibliography record `%s` not found: `%s` is left as it is', key, match.group(0))
            return CompilableText(compilable.parts, compilable.nuid)

        href = escape_attribute_value_html(bibliography.reference_of(key).build())

        return CompilableText([CompilableTextPart.fixed(f'<a class="cite" href="{href}">{number}</a>')], compilable.nuid)
