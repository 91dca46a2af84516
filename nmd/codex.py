"""
# NMD: codex.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Codex: the registry of every construct known to the compiler.

A codex holds
- an ordered map «identifier» → (modifier, compilation rule) of inline constructs,
- an ordered map «identifier» → (modifier, loading rule) of block constructs,
- an optional fallback block construct, used for whatever no block construct claims,
- the heading modifiers.
Insertion order is priority order.
A codex is adjusted (`retain`, `remove`) before compilation, and only read afterwards.
"""

import re
from typing import Iterable, NamedTuple, Optional

from nmd.compilables import CompilableTextPart
from nmd.constants import CHECKBOX_CHECKED_HTML, CHECKBOX_HTML
from nmd.loaders import (
    CommonParagraphLoadingRule,
    ExtendedBlockQuoteParagraphLoadingRule,
    FocusBlockParagraphLoadingRule,
    ImageParagraphLoadingRule,
    ListParagraphLoadingRule,
    ParagraphLoadingRule,
    ReplacementParagraphLoadingRule,
    TableParagraphLoadingRule,
)
from nmd.modifiers import (
    ABRIDGED_BOOKMARK,
    ABRIDGED_BOOKMARK_WITH_ID,
    ABRIDGED_EMBEDDED_STYLE,
    ABRIDGED_EMBEDDED_STYLE_WITH_ID,
    ABRIDGED_IMAGE,
    ABRIDGED_TODO,
    BOLD_STAR_VERSION,
    BOLD_UNDERSCORE_VERSION,
    BOOKMARK,
    BOOKMARK_WITH_ID,
    CHECKBOX,
    CHECKBOX_CHECKED,
    CITE,
    CODE_BLOCK,
    COMMENT,
    COMMENT_BLOCK,
    COMMON_PARAGRAPH,
    EMBEDDED_PARAGRAPH_STYLE_WITH_ID,
    EMBEDDED_STYLE,
    EMBEDDED_STYLE_WITH_ID,
    EMOJI,
    ESCAPE,
    EXTENDED_BLOCK_QUOTE,
    FOCUS_BLOCK,
    GREEK_LETTER,
    HIGHLIGHT,
    IDENTIFIER,
    IMAGE,
    INLINE_CODE,
    INLINE_MATH,
    ITALIC_STAR_VERSION,
    ITALIC_UNDERSCORE_VERSION,
    LINE_BREAK_DASH,
    LINE_BREAK_PLUS,
    LINE_BREAK_STAR,
    LINK,
    LIST,
    MATH_BLOCK,
    MULTI_IMAGE,
    MULTILINE_TODO,
    PAGE_BREAK,
    PARAGRAPH_IDENTIFIER,
    REFERENCE,
    STANDARD_HEADING_MODIFIERS,
    STRIKETHROUGH,
    SUBSCRIPT,
    SUPERSCRIPT,
    TABLE,
    TODO,
    TODO_PARAGRAPH,
    UNDERLINED,
    HeadingModifier,
    Modifier,
)
from nmd.paragraphs import build_id_attribute, build_internal_identifier
from nmd.rules import (
    CaptureReplacerPart,
    CiteRule,
    ClosureReplacerPart,
    CompilationRule,
    FixedReplacerPart,
    GreekLettersRule,
    ReferenceRule,
    ReplacementRule,
)
from nmd.utilities import build_class_and_style_attributes, escape_attribute_value_html, html_nuid_attribute


class CodexEntry(NamedTuple):
    modifier: Modifier
    rule: CompilationRule


class CodexBlockEntry(NamedTuple):
    modifier: Modifier
    loading_rule: Optional[ParagraphLoadingRule]


class Codex:
    """
    Registry of inline and block constructs, in priority order.
    """
    _inline_entries: dict[str, CodexEntry]
    _block_entries: dict[str, CodexBlockEntry]
    _fallback_identifier: Optional[str]
    _fallback_entry: Optional[CodexBlockEntry]
    _heading_modifiers: tuple[HeadingModifier, ...]

    def __init__(
        self,
        inline_entries: Iterable[tuple[str, CodexEntry]] = (),
        block_entries: Iterable[tuple[str, CodexBlockEntry]] = (),
        fallback: Optional[tuple[str, CodexBlockEntry]] = None,
        heading_modifiers: Iterable[HeadingModifier] = STANDARD_HEADING_MODIFIERS,
    ):
        self._inline_entries = dict(inline_entries)
        self._block_entries = dict(block_entries)
        if fallback is not None:
            self._fallback_identifier, self._fallback_entry = fallback
        else:
            self._fallback_identifier, self._fallback_entry = None, None
        self._heading_modifiers = tuple(heading_modifiers)

    @property
    def heading_modifiers(self) -> tuple[HeadingModifier, ...]:
        return self._heading_modifiers

    @property
    def fallback_identifier(self) -> Optional[str]:
        return self._fallback_identifier

    def lookup_inline(self, identifier: str) -> Optional[CodexEntry]:
        return self._inline_entries.get(identifier)

    def lookup_block(self, identifier: str) -> Optional[CodexBlockEntry]:
        if identifier == self._fallback_identifier:
            return self._fallback_entry

        return self._block_entries.get(identifier)

    def ordered_inline(self) -> list[tuple[str, CodexEntry]]:
        return list(self._inline_entries.items())

    def ordered_block(self) -> list[tuple[str, CodexBlockEntry]]:
        return list(self._block_entries.items())

    def fallback_block(self) -> Optional[CodexBlockEntry]:
        return self._fallback_entry

    def retain(self, identifiers: Iterable[str]) -> 'Codex':
        """
        Return a codex with only the listed constructs (the fallback included, if listed).
        """
        identifiers = set(identifiers)

        return self._filter(lambda identifier: identifier in identifiers)

    def remove(self, identifiers: Iterable[str]) -> 'Codex':
        """
        Return a codex without the listed constructs (the fallback included, if listed).
        """
        identifiers = set(identifiers)

        return self._filter(lambda identifier: identifier not in identifiers)

    def _filter(self, keeps) -> 'Codex':
        fallback = None
        if self._fallback_identifier is not None and keeps(self._fallback_identifier):
            fallback = (self._fallback_identifier, self._fallback_entry)

        return Codex(
            inline_entries=[(identifier, entry) for identifier, entry in self._inline_entries.items() if keeps(identifier)],
            block_entries=[(identifier, entry) for identifier, entry in self._block_entries.items() if keeps(identifier)],
            fallback=fallback,
            heading_modifiers=self._heading_modifiers,
        )

    def __repr__(self) -> str:
        return (
            f'Codex(inline={list(self._inline_entries)!r}, block={list(self._block_entries)!r}, '
            f'fallback={self._fallback_identifier!r})'
        )

    @staticmethod
    def of_html() -> 'Codex':
        """
        The standard HTML codex.
        """
        return Codex(
            inline_entries=[(rule.modifier.identifier, CodexEntry(rule.modifier, rule)) for rule in build_html_inline_rules()],
            block_entries=[
                (modifier.identifier, CodexBlockEntry(modifier, loading_rule))
                for modifier, loading_rule in build_html_block_loading_rules()
            ],
            fallback=(
                COMMON_PARAGRAPH.identifier,
                CodexBlockEntry(COMMON_PARAGRAPH, CommonParagraphLoadingRule(COMMON_PARAGRAPH.identifier)),
            ),
        )


def build_abridged_style(match: re.Match) -> str:
    declarations = []
    if match.group('color'):
        declarations.append(f'color: {match.group("color")}')
    if match.group('background'):
        declarations.append(f'background-color: {match.group("background")}')
    if match.group('font'):
        declarations.append(f'font-family: {match.group("font")}')

    return '; '.join(declarations)


def build_opening_tag(tag: str, base_classes: str, raw_style: Optional[str], identifier: Optional[str], nuid: str = '') -> str:
    return f'<{tag}{build_class_and_style_attributes(base_classes, raw_style)}{build_id_attribute(identifier)}{nuid}>'


def open_embedded_style(compilable, match, configuration, context) -> list[CompilableTextPart]:
    return [CompilableTextPart.fixed(build_opening_tag('span', 'embedded-style', match.group(2), None))]


def open_embedded_style_with_id(compilable, match, configuration, context) -> list[CompilableTextPart]:
    identifier = build_internal_identifier(match.group(2), context.document_name)

    return [CompilableTextPart.fixed(build_opening_tag('span', 'identifier embedded-style', match.group(3), identifier))]


def open_abridged_embedded_style(compilable, match, configuration, context) -> list[CompilableTextPart]:
    return [CompilableTextPart.fixed(build_opening_tag('span', 'abridged-embedded-style', build_abridged_style(match), None))]


def open_abridged_embedded_style_with_id(compilable, match, configuration, context) -> list[CompilableTextPart]:
    identifier = build_internal_identifier(match.group(2), context.document_name)

    return [
        CompilableTextPart.fixed(
            build_opening_tag('span', 'identifier abridged-embedded-style', build_abridged_style(match), identifier)
        )
    ]


def open_embedded_paragraph_style(compilable, match, configuration, context) -> list[CompilableTextPart]:
    identifier = build_internal_identifier(match.group(2), context.document_name)
    base_classes = 'identifier embedded-paragraph-style' if identifier is not None else 'embedded-paragraph-style'

    return [
        CompilableTextPart.fixed(
            build_opening_tag('div', base_classes, match.group(3), identifier, html_nuid_attribute(compilable.nuid))
        )
    ]


def open_code_block(compilable, match, configuration, context) -> list[CompilableTextPart]:
    language = match.group(1) or 'plaintext'

    return [
        CompilableTextPart.fixed(
            f'<pre{html_nuid_attribute(compilable.nuid)}>'
            f'<code class="language-{escape_attribute_value_html(language)} code-block">'
        )
    ]


def build_wrapper_rule(modifier: Modifier, opening: str, closing: str, group: int = 1) -> ReplacementRule:
    return ReplacementRule(modifier, [FixedReplacerPart(opening), CaptureReplacerPart(group), FixedReplacerPart(closing)])


def build_html_inline_rules() -> list[CompilationRule]:
    return [
        ReplacementRule(
            INLINE_CODE,
            [
                FixedReplacerPart('<code class="language-markup inline-code">'),
                CaptureReplacerPart(1, escape=True),
                FixedReplacerPart('</code>'),
            ],
        ),
        ReplacementRule(
            INLINE_MATH,
            [
                FixedReplacerPart('<span class="inline-math">$'),
                CaptureReplacerPart(1, escape=True),
                FixedReplacerPart('$</span>'),
            ],
        ),
        ReplacementRule(ESCAPE, [CaptureReplacerPart(1)]),
        ReplacementRule(COMMENT, [FixedReplacerPart(r'<!-- \g<1> -->')]),
        GreekLettersRule(GREEK_LETTER),
        build_wrapper_rule(
            TODO,
            '<div class="todo"><div class="todo-title"></div><div class="todo-description">',
            '</div></div>',
        ),
        ReplacementRule(
            BOOKMARK_WITH_ID,
            [
                FixedReplacerPart(r'<div class="bookmark" id="\g<2>"><div class="bookmark-title">', identifiers_at=(2,)),
                CaptureReplacerPart(1),
                FixedReplacerPart('</div><div class="bookmark-description">'),
                CaptureReplacerPart(3),
                FixedReplacerPart('</div></div>'),
            ],
        ),
        ReplacementRule(
            BOOKMARK,
            [
                FixedReplacerPart('<div class="bookmark"><div class="bookmark-title">'),
                CaptureReplacerPart(1),
                FixedReplacerPart('</div><div class="bookmark-description">'),
                CaptureReplacerPart(2),
                FixedReplacerPart('</div></div>'),
            ],
        ),
        ReplacementRule(
            ABRIDGED_BOOKMARK_WITH_ID,
            [
                FixedReplacerPart(
                    r'<div class="abridged-bookmark" id="\g<2>"><div class="abridged-bookmark-title">',
                    identifiers_at=(2,),
                ),
                CaptureReplacerPart(1),
                FixedReplacerPart('</div></div>'),
            ],
        ),
        build_wrapper_rule(
            ABRIDGED_BOOKMARK,
            '<div class="abridged-bookmark"><div class="abridged-bookmark-title">',
            '</div></div>',
        ),
        ReplacementRule(
            EMBEDDED_STYLE_WITH_ID,
            [ClosureReplacerPart(open_embedded_style_with_id), CaptureReplacerPart(1), FixedReplacerPart('</span>')],
        ),
        ReplacementRule(
            EMBEDDED_STYLE,
            [ClosureReplacerPart(open_embedded_style), CaptureReplacerPart(1), FixedReplacerPart('</span>')],
        ),
        ReplacementRule(
            ABRIDGED_EMBEDDED_STYLE_WITH_ID,
            [ClosureReplacerPart(open_abridged_embedded_style_with_id), CaptureReplacerPart(1), FixedReplacerPart('</span>')],
        ),
        ReplacementRule(
            ABRIDGED_EMBEDDED_STYLE,
            [ClosureReplacerPart(open_abridged_embedded_style), CaptureReplacerPart(1), FixedReplacerPart('</span>')],
        ),
        ReplacementRule(
            IDENTIFIER,
            [
                FixedReplacerPart(r'<span class="identifier" id="\g<2>">', identifiers_at=(2,)),
                CaptureReplacerPart(1),
                FixedReplacerPart('</span>'),
            ],
        ),
        build_wrapper_rule(HIGHLIGHT, '<mark class="highlight">', '</mark>'),
        build_wrapper_rule(BOLD_STAR_VERSION, '<strong class="bold">', '</strong>'),
        build_wrapper_rule(BOLD_UNDERSCORE_VERSION, '<strong class="bold">', '</strong>'),
        build_wrapper_rule(ITALIC_STAR_VERSION, '<em class="italic">', '</em>'),
        build_wrapper_rule(ITALIC_UNDERSCORE_VERSION, '<em class="italic">', '</em>'),
        build_wrapper_rule(STRIKETHROUGH, '<del class="strikethrough">', '</del>'),
        build_wrapper_rule(UNDERLINED, '<u class="underlined">', '</u>'),
        build_wrapper_rule(SUPERSCRIPT, '<sup class="superscript">', '</sup>'),
        build_wrapper_rule(SUBSCRIPT, '<sub class="subscript">', '</sub>'),
        ReplacementRule(
            LINK,
            [
                FixedReplacerPart(r'<a href="\g<2>" class="link">', references_at=(2,)),
                CaptureReplacerPart(1),
                FixedReplacerPart('</a>'),
            ],
        ),
        ReplacementRule(CHECKBOX, [FixedReplacerPart(CHECKBOX_HTML)]),
        ReplacementRule(CHECKBOX_CHECKED, [FixedReplacerPart(CHECKBOX_CHECKED_HTML)]),
        ReplacementRule(EMOJI, [FixedReplacerPart(r'<i class="em-svg em-\g<1>" aria-role="presentation"></i>')]),
        ReferenceRule(REFERENCE),
        CiteRule(CITE),
    ]


def build_html_block_loading_rules() -> list[tuple[Modifier, ParagraphLoadingRule]]:
    def replacement(modifier: Modifier, replacer_parts) -> tuple[Modifier, ParagraphLoadingRule]:
        rule = ReplacementRule(modifier, replacer_parts)
        return modifier, ReplacementParagraphLoadingRule(modifier.identifier, rule)

    todo_opening = r'<div class="todo{}"\g<nuid>><div class="todo-title"></div><div class="todo-description">'

    return [
        replacement(
            CODE_BLOCK,
            [ClosureReplacerPart(open_code_block), CaptureReplacerPart(2, escape=True), FixedReplacerPart('</code></pre>')],
        ),
        replacement(
            MATH_BLOCK,
            [
                FixedReplacerPart(r'<p class="math-block"\g<nuid>>$$'),
                CaptureReplacerPart(1, escape=True),
                FixedReplacerPart('$$</p>'),
            ],
        ),
        replacement(
            EMBEDDED_PARAGRAPH_STYLE_WITH_ID,
            [ClosureReplacerPart(open_embedded_paragraph_style), CaptureReplacerPart(1, escape=True), FixedReplacerPart('</div>')],
        ),
        replacement(
            PARAGRAPH_IDENTIFIER,
            [
                FixedReplacerPart(r'<div class="identifier" id="\g<2>"\g<nuid>>', identifiers_at=(2,)),
                CaptureReplacerPart(1, escape=True),
                FixedReplacerPart('</div>'),
            ],
        ),
        (TABLE, TableParagraphLoadingRule(TABLE.identifier)),
        (EXTENDED_BLOCK_QUOTE, ExtendedBlockQuoteParagraphLoadingRule(EXTENDED_BLOCK_QUOTE.identifier)),
        (FOCUS_BLOCK, FocusBlockParagraphLoadingRule(FOCUS_BLOCK.identifier)),
        (LIST, ListParagraphLoadingRule(LIST.identifier)),
        replacement(ABRIDGED_TODO, [FixedReplacerPart(todo_opening.format(' abridged-todo') + '</div></div>')]),
        replacement(
            MULTILINE_TODO,
            [
                FixedReplacerPart(todo_opening.format(' multiline-todo')),
                CaptureReplacerPart(1, escape=True),
                FixedReplacerPart('</div></div>'),
            ],
        ),
        replacement(
            TODO_PARAGRAPH,
            [FixedReplacerPart(todo_opening.format('')), CaptureReplacerPart(1, escape=True), FixedReplacerPart('</div></div>')],
        ),
        replacement(PAGE_BREAK, [FixedReplacerPart(r'<div class="page-break"\g<nuid>></div>')]),
        replacement(LINE_BREAK_DASH, [FixedReplacerPart(r'<hr class="line-break line-break-dash"\g<nuid>>')]),
        replacement(LINE_BREAK_STAR, [FixedReplacerPart(r'<hr class="line-break line-break-star"\g<nuid>>')]),
        replacement(LINE_BREAK_PLUS, [FixedReplacerPart(r'<hr class="line-break line-break-plus"\g<nuid>>')]),
        (MULTI_IMAGE, ImageParagraphLoadingRule(MULTI_IMAGE.identifier)),
        (ABRIDGED_IMAGE, ImageParagraphLoadingRule(ABRIDGED_IMAGE.identifier)),
        (IMAGE, ImageParagraphLoadingRule(IMAGE.identifier)),
        replacement(COMMENT_BLOCK, [FixedReplacerPart(r'<!--\g<1>-->')]),
    ]
