"""
# NMD: modifiers.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Modifiers: the pattern half of every NMD construct.

A modifier couples an identifier, a regex pattern, and the incompatibility set
that is imposed on whatever the construct re-emits as compilable text.
The standard catalogues below are listed in priority order.
"""

import re
from typing import Optional

from nmd.constants import MAX_HEADING_LEVEL
from nmd.incompatibilities import IncompatibilitySet

IDENTIFIER_PATTERN = r'#([\w-]+)'
STYLE_PATTERN = r'([^{}]*)'
ABRIDGED_STYLE_PATTERN = r'(?P<color>#?[\w-]+)?;(?P<background>#?[\w-]+)?;?(?P<font>[\w-]+)?'
PARAGRAPH_END_PATTERN = r'(?=[ \t]*(?:\r?\n[ \t]*(?:\r?\n|\Z)|\r?\n#|\Z))'
LIST_BULLET_PATTERN = r'-\[\]|-\[ \]|-\[x\]|-\[X\]|->|--|-|\||\*|\+|\d+[.)]|(?:[a-zA-Z]|[ivxlcdm]{1,8})[.)]|&[^;\s]+;'
LIST_ITEM_PATTERN = rf'^(?P<indentation>[\t ]*)(?P<bullet>{LIST_BULLET_PATTERN}) (?P<content>[^\n]*?)[ \t]*\r?$'
CHAPTER_TAG_PATTERN = r'^@(?P<key>\w+)(?:[ \t]+(?P<value>[^\n]*?))?[ \t]*\r?$'


class Modifier:
    """
    Pattern, compiled matcher, and incompatibility declaration of one construct.

    Modifiers compare equal when their patterns are equal.
    """
    _identifier: str
    _pattern: str
    _regex: re.Pattern
    _incompatible: IncompatibilitySet

    def __init__(self, identifier: str, pattern: str, incompatible: Optional[IncompatibilitySet] = None):
        self._identifier = identifier
        self._pattern = pattern
        self._regex = re.compile(pattern)
        self._incompatible = incompatible if incompatible is not None else IncompatibilitySet.nothing()

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def regex(self) -> re.Pattern:
        return self._regex

    @property
    def incompatible(self) -> IncompatibilitySet:
        return self._incompatible

    def __eq__(self, other) -> bool:
        if not isinstance(other, Modifier):
            return NotImplemented

        return self._pattern == other._pattern

    def __hash__(self) -> int:
        return hash(self._pattern)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._identifier!r})'


class HeadingModifier(Modifier):
    """
    A heading modifier.

    `kind` is one of
    - `extended` (`###`)
    - `compact` (`#3`)
    - `major` (`#+`), `minor` (`#-`), `same` (`#=`), relative to the last heading
    """
    _kind: str
    _level: Optional[int]

    def __init__(self, identifier: str, pattern: str, kind: str, level: Optional[int] = None):
        super().__init__(identifier, pattern)
        self._kind = kind
        self._level = level

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def level(self) -> Optional[int]:
        return self._level

    @property
    def is_relative(self) -> bool:
        return self._kind in ('major', 'minor', 'same')


def build_paragraph_pattern(pattern: str) -> str:
    """
    Make a block pattern stop before a blank line, a line starting with `#`, or the end of the text.

    The blank line itself is left unconsumed so that neighbouring blocks can share it.
    """
    return f'(?:{pattern}){PARAGRAPH_END_PATTERN}'


def build_heading_pattern(marker_pattern: str) -> str:
    return (
        rf'(?m:^{marker_pattern}[ \t]+(?P<title>[^\n]*?)[ \t]*\r?$)'
        r'(?P<tags>(?:\r?\n@\w+(?:[ \t][^\n]*|\r)?(?=\n|\Z))*)'
        r'(?:\r?\n\{(?P<style>[^{}\n]*)\}[ \t]*(?=\r?\n|\Z))?'
    )


def build_heading_modifiers() -> tuple['HeadingModifier', ...]:
    heading_modifiers = [
        HeadingModifier('minor-heading', build_heading_pattern('#-'), 'minor'),
        HeadingModifier('major-heading', build_heading_pattern(r'#\+'), 'major'),
        HeadingModifier('same-heading', build_heading_pattern('#='), 'same'),
    ]

    for level in range(MAX_HEADING_LEVEL, 0, -1):
        heading_modifiers.append(
            HeadingModifier(f'heading-{level}-extended-version', build_heading_pattern(f'#{{{level}}}'), 'extended', level)
        )
        heading_modifiers.append(
            HeadingModifier(f'heading-{level}-compact-version', build_heading_pattern(f'#(?:{level})'), 'compact', level)
        )

    return tuple(heading_modifiers)


_EVERYTHING = IncompatibilitySet.everything()

INLINE_CODE = Modifier('inline-code', r'`(.*?)`', _EVERYTHING)
INLINE_MATH = Modifier('inline-math', r'\$([^$]+)\$', _EVERYTHING)
COMMENT = Modifier('comment', r'^//(.*)')
GREEK_LETTER = Modifier('greek-letter', r'%(\w+?)%', _EVERYTHING)
TODO = Modifier('todo', r'@\[(?i:TODO)\]\((?s:(.*?))\)')
BOOKMARK_WITH_ID = Modifier('bookmark-with-id', r'@\[([^\]]*?)\]#([\w-]+)\((?s:(.*?))\)')
BOOKMARK = Modifier('bookmark', r'@\[([^\]]*?)\]\((?s:(.*?))\)')
ABRIDGED_BOOKMARK_WITH_ID = Modifier('abridged-bookmark-with-id', r'@\[([^\]]*?)\]#([\w-]+)')
ABRIDGED_BOOKMARK = Modifier('abridged-bookmark', r'@\[([^\]]*?)\]')
EMBEDDED_STYLE_WITH_ID = Modifier(
    'embedded-style-with-id',
    rf'\[([^\]\n]*?)\]\n?{IDENTIFIER_PATTERN}\n?\{{\{{{STYLE_PATTERN}\}}\}}',
)
EMBEDDED_STYLE = Modifier('embedded-style', rf'\[([^\]\n]*?)\]\n?\{{\{{{STYLE_PATTERN}\}}\}}')
ABRIDGED_EMBEDDED_STYLE_WITH_ID = Modifier(
    'abridged-embedded-style-with-id',
    rf'\[([^\]\n]*?)\]\n?{IDENTIFIER_PATTERN}\n?\{{{ABRIDGED_STYLE_PATTERN}\}}',
)
ABRIDGED_EMBEDDED_STYLE = Modifier(
    'abridged-embedded-style',
    rf'\[([^\]\n]*?)\]\n?\{{{ABRIDGED_STYLE_PATTERN}\}}',
)
IDENTIFIER = Modifier('identifier', rf'\[([^\]\n]*?)\]\n?{IDENTIFIER_PATTERN}')
HIGHLIGHT = Modifier('highlight', r'==(.*?)==')
BOLD_STAR_VERSION = Modifier('bold-star-version', r'\*\*(.*?)\*\*')
BOLD_UNDERSCORE_VERSION = Modifier('bold-underscore-version', r'(?<!\w)__(.*?)__(?!\w)')
ITALIC_STAR_VERSION = Modifier('italic-star-version', r'\*(.*?)\*')
ITALIC_UNDERSCORE_VERSION = Modifier('italic-underscore-version', r'(?<!\w)_(.*?)_(?!\w)')
STRIKETHROUGH = Modifier('strikethrough', r'~~(.*?)~~')
UNDERLINED = Modifier('underlined', r'\+\+(.*?)\+\+')
SUPERSCRIPT = Modifier('superscript', r'\^([^\[\n][^\n]*?)\^')
SUBSCRIPT = Modifier('subscript', r'~([^~\n]+?)~')
LINK = Modifier('link', r'\[([^\]]+)\]\(([^)]+)\)')
CHECKBOX = Modifier('checkbox', r'(\[\]|\[ \])')
CHECKBOX_CHECKED = Modifier('checkbox-checked', r'(\[x\]|\[X\])')
EMOJI = Modifier('emoji', r':(\w+):', _EVERYTHING)
ESCAPE = Modifier('escape', r'\\([*+\\~%^$@=\[\]!<>{}()#\-_|?&])', _EVERYTHING)
REFERENCE = Modifier('reference', r'&([\w-]+)&', _EVERYTHING)
CITE = Modifier('cite', r'\^\[([\w-]+)\]', _EVERYTHING)

STANDARD_TEXT_MODIFIERS = (
    INLINE_CODE,
    INLINE_MATH,
    ESCAPE,
    COMMENT,
    GREEK_LETTER,
    TODO,
    BOOKMARK_WITH_ID,
    BOOKMARK,
    ABRIDGED_BOOKMARK_WITH_ID,
    ABRIDGED_BOOKMARK,
    EMBEDDED_STYLE_WITH_ID,
    EMBEDDED_STYLE,
    ABRIDGED_EMBEDDED_STYLE_WITH_ID,
    ABRIDGED_EMBEDDED_STYLE,
    IDENTIFIER,
    HIGHLIGHT,
    BOLD_STAR_VERSION,
    BOLD_UNDERSCORE_VERSION,
    ITALIC_STAR_VERSION,
    ITALIC_UNDERSCORE_VERSION,
    STRIKETHROUGH,
    UNDERLINED,
    SUPERSCRIPT,
    SUBSCRIPT,
    LINK,
    CHECKBOX,
    CHECKBOX_CHECKED,
    EMOJI,
    REFERENCE,
    CITE,
)

CODE_BLOCK = Modifier(
    'code-block',
    build_paragraph_pattern(r'```[ \t]*([\w+#-]*)[ \t]*\r?\n(?s:(.*?))\r?\n[ \t]*```'),
    _EVERYTHING,
)
MATH_BLOCK = Modifier('math-block', build_paragraph_pattern(r'\$\$((?s:.+?))\$\$'), _EVERYTHING)
EMBEDDED_PARAGRAPH_STYLE_WITH_ID = Modifier(
    'embedded-paragraph-style-with-id',
    build_paragraph_pattern(rf'\[\[(?s:(.*?))\]\]\r?\n?(?:{IDENTIFIER_PATTERN})?\r?\n?\{{\{{{STYLE_PATTERN}\}}\}}'),
)
PARAGRAPH_IDENTIFIER = Modifier(
    'paragraph-identifier',
    build_paragraph_pattern(rf'\[\[(?s:(.*?))\]\]\r?\n?{IDENTIFIER_PATTERN}'),
)
TABLE = Modifier(
    'table',
    build_paragraph_pattern(
        r'(?m:(?:^[ \t]*\|[^\n]*\|[ \t]*\r?(?:\n|\Z))*^[ \t]*\|[^\n]*\|[ \t]*\r?$'
        r'(?:\r?\n[ \t]*(?=[\[#{])(?:\[[^\]\n]*\])?(?:#[\w-]+)?(?:\{\{[^{}\n]*\}\})?[ \t]*\r?$)?)'
    ),
)
EXTENDED_BLOCK_QUOTE = Modifier('extended-block-quote', build_paragraph_pattern(r'(?m:^>(?s:.*?))'))
FOCUS_BLOCK = Modifier(
    'focus-block',
    build_paragraph_pattern(r':::[ \t]*(\w+)[ \t]*\r?\n(?s:(.*?))\r?\n[ \t]*:::'),
)
LIST = Modifier(
    'list',
    build_paragraph_pattern(rf'(?m:^[\t ]*(?:{LIST_BULLET_PATTERN}) [^\n]*(?:\r?\n(?!#)[ \t]*\S[^\n]*)*)'),
)
ABRIDGED_TODO = Modifier('abridged-todo', build_paragraph_pattern(r'(?m:^(?i:TODO)[ \t]*$)'))
MULTILINE_TODO = Modifier('multiline-todo', build_paragraph_pattern(r'(?i:TODO):(?s:(.*?)):(?i:TODO)'))
TODO_PARAGRAPH = Modifier('todo', build_paragraph_pattern(r'(?m:^(?i:TODO):?[ \t]+([^\n]*?)[ \t]*\r?$)'))
PAGE_BREAK = Modifier('page-break', build_paragraph_pattern(r'(?m:^#{3,}[ \t]*\r?$)'))
LINE_BREAK_DASH = Modifier('line-break-dash', build_paragraph_pattern(r'(?m:^-{3,}[ \t]*\r?$)'))
LINE_BREAK_STAR = Modifier('line-break-star', build_paragraph_pattern(r'(?m:^\*{3,}[ \t]*\r?$)'))
LINE_BREAK_PLUS = Modifier('line-break-plus', build_paragraph_pattern(r'(?m:^\+{3,}[ \t]*\r?$)'))
MULTI_IMAGE = Modifier(
    'multi-image',
    build_paragraph_pattern(r'!!(?::([\w-]+):)?\[\[(?s:(.*?))\]\]'),
    _EVERYTHING,
)
ABRIDGED_IMAGE = Modifier(
    'abridged-image',
    build_paragraph_pattern(rf'!\[\(([^)\n]*)\)\](?:{IDENTIFIER_PATTERN})?(?:\{{\{{{STYLE_PATTERN}\}}\}})?'),
    _EVERYTHING,
)
IMAGE = Modifier(
    'image',
    build_paragraph_pattern(
        rf'!\[([^\]\n]*)\](?:{IDENTIFIER_PATTERN})?\(([^)\n]+)\)(?:\{{\{{{STYLE_PATTERN}\}}\}})?'
    ),
    _EVERYTHING,
)
COMMENT_BLOCK = Modifier('comment-block', build_paragraph_pattern(r'<!--(?s:(.*?))-->'), _EVERYTHING)
COMMON_PARAGRAPH = Modifier('common-paragraph', build_paragraph_pattern(r'(?s:\S.*?)'))

STANDARD_PARAGRAPH_MODIFIERS = (
    CODE_BLOCK,
    MATH_BLOCK,
    EMBEDDED_PARAGRAPH_STYLE_WITH_ID,
    PARAGRAPH_IDENTIFIER,
    TABLE,
    EXTENDED_BLOCK_QUOTE,
    FOCUS_BLOCK,
    LIST,
    ABRIDGED_TODO,
    MULTILINE_TODO,
    TODO_PARAGRAPH,
    PAGE_BREAK,
    LINE_BREAK_DASH,
    LINE_BREAK_STAR,
    LINE_BREAK_PLUS,
    MULTI_IMAGE,
    ABRIDGED_IMAGE,
    IMAGE,
    COMMENT_BLOCK,
)

STANDARD_HEADING_MODIFIERS = build_heading_modifiers()
