"""
# NMD: loaders.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Loading: partitioning raw NMD text into blocks, and building documents and dossiers.

The partitioner works through the block constructs of the codex in priority order:
````
partition(text, construct 0)
  └ matches of construct 0 → blocks
  └ residual spans → partition(span, construct 1)
      ...
        └ past the last construct → headings (and chapter tags), then fallback paragraphs
````
A block starts at a line start whose previous line is blank, a heading or tag line, or absent,
and ends before a blank line, a line starting with `#` or the end of the text.
Offsets of blocks always refer to the top-level text.
"""

import abc
import concurrent.futures
import logging
import re
from pathlib import Path
from typing import NamedTuple, Optional, Union

from nmd.configurations import LoadConfiguration, load_dossier_configuration
from nmd.constants import MAX_HEADING_LEVEL, NMD_FILE_EXTENSION
from nmd.dossiers import ChapterTag, Document, Dossier, Heading, fold_blocks
from nmd.exceptions import (
    InvalidTagException,
    MissingLoadingRuleException,
    RecursionDepthException,
    ResourceException,
    UnresolvableBlockException,
)
from nmd.modifiers import (
    ABRIDGED_IMAGE,
    CHAPTER_TAG_PATTERN,
    EXTENDED_BLOCK_QUOTE,
    FOCUS_BLOCK,
    IMAGE,
    MULTI_IMAGE,
    HeadingModifier,
)
from nmd.paragraphs import (
    DEFAULT_IMAGES_ALIGNMENT,
    CommonParagraph,
    ExtendedBlockQuoteParagraph,
    FocusBlockParagraph,
    Image,
    ImageParagraph,
    ListParagraph,
    Paragraph,
    ReplacementParagraph,
    TableParagraph,
    strip_block_quote_prefixes,
)

logger = logging.getLogger(__name__)

CHAPTER_TAG_REGEX = re.compile(CHAPTER_TAG_PATTERN, re.MULTILINE)
NON_BLANK_LINE_REGEX = re.compile(r'[^\n]*\S[^\n]*')
BLANK_LINE_SEPARATOR_REGEX = re.compile(r'\r?\n[ \t]*\r?\n(?:[ \t]*\r?\n)*')
ALIGN_SELF_REGEX = re.compile(r'[ \t]*:(?P<align_self>[\w-]*):[ \t]*')


class LoadBlock(NamedTuple):
    start: int
    end: int
    content: Union[Paragraph, Heading, ChapterTag]


class PartitionState:
    """
    State threaded through a partition, in document order.
    """
    _last_heading_level: Optional[int]

    def __init__(self):
        self._last_heading_level = None

    @property
    def last_heading_level(self) -> Optional[int]:
        return self._last_heading_level

    @last_heading_level.setter
    def last_heading_level(self, value: int):
        self._last_heading_level = value


class ParagraphLoadingRule(abc.ABC):
    """
    Base class for a block-loading rule: raw block text to paragraphs.
    """

    @abc.abstractmethod
    def load(self, raw_content: str, codex, configuration: LoadConfiguration, depth: int) -> list[Paragraph]:
        raise NotImplementedError


class CommonParagraphLoadingRule(ParagraphLoadingRule):
    """
    Split text on blank lines, one common paragraph per non-blank piece.
    """
    _kind: str

    def __init__(self, kind: str):
        self._kind = kind

    def load(self, raw_content, codex, configuration, depth) -> list[Paragraph]:
        return [
            CommonParagraph(piece.strip(), self._kind)
            for piece in BLANK_LINE_SEPARATOR_REGEX.split(raw_content)
            if len(piece.strip()) > 0
        ]


class ReplacementParagraphLoadingRule(ParagraphLoadingRule):
    _kind: str
    _rule: object

    def __init__(self, kind: str, rule):
        self._kind = kind
        self._rule = rule

    def load(self, raw_content, codex, configuration, depth) -> list[Paragraph]:
        return [ReplacementParagraph(raw_content, self._kind, self._rule)]


class ListParagraphLoadingRule(ParagraphLoadingRule):
    _kind: str

    def __init__(self, kind: str):
        self._kind = kind

    def load(self, raw_content, codex, configuration, depth) -> list[Paragraph]:
        return [ListParagraph(raw_content, self._kind)]


class TableParagraphLoadingRule(ParagraphLoadingRule):
    _kind: str

    def __init__(self, kind: str):
        self._kind = kind

    def load(self, raw_content, codex, configuration, depth) -> list[Paragraph]:
        return [TableParagraph(raw_content, self._kind)]


class ImageParagraphLoadingRule(ParagraphLoadingRule):
    """
    Single image `![caption]#id(src){{style}}`, abridged image `![(src)]#id{{style}}`,
    or multi image `!!:alignment:[[ one image per line, each optionally prefixed by :align-self: ]]`.
    """
    _kind: str

    def __init__(self, kind: str):
        self._kind = kind

    @staticmethod
    def parse_image(raw_image: str, align_self: Optional[str] = None) -> Image:
        raw_image = raw_image.strip()

        match = ABRIDGED_IMAGE.regex.fullmatch(raw_image)
        if match is not None:
            return Image(
                source=match.group(1),
                identifier=match.group(2),
                style=match.group(3),
                abridged=True,
                align_self=align_self,
            )

        match = IMAGE.regex.fullmatch(raw_image)
        if match is not None:
            return Image(
                source=match.group(3),
                caption=match.group(1),
                identifier=match.group(2),
                style=match.group(4),
                align_self=align_self,
            )

        raise ResourceException(f'invalid image `{raw_image}`')

    def load(self, raw_content, codex, configuration, depth) -> list[Paragraph]:
        if self._kind != MULTI_IMAGE.identifier:
            return [ImageParagraph(raw_content, self._kind, [ImageParagraphLoadingRule.parse_image(raw_content)])]

        match = MULTI_IMAGE.regex.fullmatch(raw_content.strip())
        if match is None:
            raise ResourceException(f'invalid multi image `{raw_content}`')

        images = []
        for line in match.group(2).splitlines():
            if len(line.strip()) == 0:
                continue

            align_self = None
            align_self_match = ALIGN_SELF_REGEX.match(line)
            if align_self_match is not None:
                align_self = align_self_match.group('align_self')
                line = line[align_self_match.end():]

            images.append(ImageParagraphLoadingRule.parse_image(line, align_self))

        images_alignment = match.group(1) if match.group(1) is not None else DEFAULT_IMAGES_ALIGNMENT

        return [ImageParagraph(raw_content, self._kind, images, images_alignment)]


class ExtendedBlockQuoteParagraphLoadingRule(ParagraphLoadingRule):
    """
    `> ` prefixed lines, with an optional `> [!TYPE]` first line (default type `quote`).
    """
    _kind: str

    def __init__(self, kind: str = EXTENDED_BLOCK_QUOTE.identifier):
        self._kind = kind

    def load(self, raw_content, codex, configuration, depth) -> list[Paragraph]:
        quote_type, body = strip_block_quote_prefixes(raw_content, configuration.strict_focus_block_check)
        paragraphs = load_paragraphs(body, codex, configuration, depth + 1)

        return [ExtendedBlockQuoteParagraph(raw_content, self._kind, quote_type or 'quote', paragraphs)]


class FocusBlockParagraphLoadingRule(ParagraphLoadingRule):
    """
    `::: «type»` ... `:::`.
    """
    _kind: str

    def __init__(self, kind: str = FOCUS_BLOCK.identifier):
        self._kind = kind

    def load(self, raw_content, codex, configuration, depth) -> list[Paragraph]:
        match = FOCUS_BLOCK.regex.match(raw_content)
        if match is None:
            raise ResourceException(f'invalid focus block `{raw_content}`')

        paragraphs = load_paragraphs(match.group(2), codex, configuration, depth + 1)

        return [FocusBlockParagraph(raw_content, self._kind, match.group(1), paragraphs)]


def is_block_start(text: str, position: int) -> bool:
    """
    Whether a block may start at `position`.

    Only blanks may precede `position` on its line,
    and the previous line must be blank, a heading or tag line, or absent.
    """
    line_start = text.rfind('\n', 0, position) + 1
    if len(text[line_start:position].strip()) > 0:
        return False

    if line_start == 0:
        return True

    previous_line_start = text.rfind('\n', 0, line_start - 1) + 1
    previous_line = text[previous_line_start:line_start - 1].strip()

    return len(previous_line) == 0 or previous_line[0] in '#@'


def find_block_matches(regex: re.Pattern, text: str) -> list[re.Match]:
    matches = []
    position = 0
    while position <= len(text):
        match = regex.search(text, position)
        if match is None:
            break

        assert match.end() > match.start(), f'empty block match for `{regex.pattern}`'

        if is_block_start(text, match.start()):
            matches.append(match)
            position = match.end()
        else:
            position = match.start() + 1

    return matches


def locate_paragraphs(text: str, global_offset: int, paragraphs: list[Paragraph]) -> list[LoadBlock]:
    """
    Give each paragraph loaded from `text` its span.

    A paragraph whose raw content is found in `text` (after the previous one) gets its exact span.
    Otherwise the non-blank part of `text` is subdivided proportionally.
    """
    if len(paragraphs) == 1:
        return [LoadBlock(global_offset, global_offset + len(text), paragraphs[0])]

    content_start = len(text) - len(text.lstrip())
    content_end = len(text.rstrip())
    content_length = max(content_end - content_start, 0)

    blocks = []
    cursor = 0
    for index, paragraph in enumerate(paragraphs):
        found_at = text.find(paragraph.raw_content, cursor) if len(paragraph.raw_content) > 0 else -1
        if found_at >= 0:
            start = found_at
            end = found_at + len(paragraph.raw_content)
        else:
            start = max(content_start + content_length * index // len(paragraphs), cursor)
            end = max(content_start + content_length * (index + 1) // len(paragraphs), start)

        blocks.append(LoadBlock(global_offset + start, global_offset + end, paragraph))
        cursor = end

    return blocks


def resolve_heading_level(modifier: HeadingModifier, state: PartitionState, title: str) -> int:
    last_level = state.last_heading_level

    if not modifier.is_relative:
        return modifier.level

    if modifier.kind == 'same':
        return last_level if last_level is not None else 1

    if last_level is None:
        logger.warning('relative heading `%s` without a previous heading: level 1 is used', title)
        return 1

    if modifier.kind == 'major':
        if last_level + 1 > MAX_HEADING_LEVEL:
            logger.warning('heading `%s` clamped to level %d', title, MAX_HEADING_LEVEL)
            return MAX_HEADING_LEVEL
        return last_level + 1

    if last_level - 1 < 1:
        logger.warning('heading `%s` clamped to level 1', title)
        return 1

    return last_level - 1


def parse_chapter_tags(text: str, global_offset: int = 0) -> list[LoadBlock]:
    """
    Load the `@«key» «value»` lines of `text` as chapter tag blocks.

    Every non-blank line of `text` must be a chapter tag.
    """
    blocks = []
    for line_match in NON_BLANK_LINE_REGEX.finditer(text):
        match = CHAPTER_TAG_REGEX.fullmatch(line_match.group())
        if match is None:
            raise InvalidTagException(line_match.group().strip())

        blocks.append(
            LoadBlock(
                global_offset + line_match.start(),
                global_offset + line_match.end(),
                ChapterTag.of(match.group('key'), match.group('value')),
            )
        )

    return blocks


def load_heading_blocks(match: re.Match, modifier: HeadingModifier, global_offset: int, state: PartitionState) -> list[LoadBlock]:
    title = match.group('title')
    level = resolve_heading_level(modifier, state, title)
    state.last_heading_level = level

    title_end = match.end('title')
    blocks = [LoadBlock(global_offset + match.start(), global_offset + title_end, Heading(level, title))]

    tags_start, tags_end = match.span('tags')
    blocks.extend(parse_chapter_tags(match.string[tags_start:tags_end], global_offset + tags_start))

    style_start, style_end = match.span('style')
    if style_start >= 0:
        blocks.append(
            LoadBlock(global_offset + style_start - 1, global_offset + style_end + 1, ChapterTag.of('style', match.group('style')))
        )

    return blocks


def load_fallback_blocks(text: str, global_offset: int, codex, configuration: LoadConfiguration, depth: int) -> list[LoadBlock]:
    if len(text.strip()) == 0:
        return []

    fallback = codex.fallback_block()
    if fallback is None or fallback.loading_rule is None:
        raise UnresolvableBlockException(f'no construct can load `{text.strip()}`')

    paragraphs = fallback.loading_rule.load(text, codex, configuration, depth)
    if len(paragraphs) == 0:
        return []

    return locate_paragraphs(text, global_offset, paragraphs)


def load_leaf_blocks(text: str, global_offset: int, codex, configuration, depth: int, state: PartitionState) -> list[LoadBlock]:
    """
    Scan `text` for headings top to bottom, and load what lies between them with the fallback construct.
    """
    blocks = []
    position = 0
    while True:
        earliest_match = None
        earliest_modifier = None
        for modifier in codex.heading_modifiers:
            match = modifier.regex.search(text, position)
            if match is not None and (earliest_match is None or match.start() < earliest_match.start()):
                earliest_match = match
                earliest_modifier = modifier

        if earliest_match is None:
            break

        blocks.extend(load_fallback_blocks(text[position:earliest_match.start()], global_offset + position, codex, configuration, depth))
        blocks.extend(load_heading_blocks(earliest_match, earliest_modifier, global_offset, state))
        position = earliest_match.end()

    blocks.extend(load_fallback_blocks(text[position:], global_offset + position, codex, configuration, depth))

    return blocks


def partition(
    text: str,
    global_offset: int,
    codex,
    configuration: LoadConfiguration,
    construct_index: int = 0,
    depth: int = 0,
    state: Optional[PartitionState] = None,
) -> list[LoadBlock]:
    """
    Partition `text` into blocks, from the block construct at `construct_index` on.

    Blocks are returned with offsets translated by `global_offset`; callers sort them by start.
    """
    if depth > configuration.max_recursion_depth:
        raise RecursionDepthException(configuration.max_recursion_depth)

    if state is None:
        state = PartitionState()

    ordered_block = codex.ordered_block()
    if construct_index >= len(ordered_block):
        return load_leaf_blocks(text, global_offset, codex, configuration, depth, state)

    identifier, entry = ordered_block[construct_index]
    if entry.loading_rule is None:
        message = f'no loading rule for block construct `{identifier}`'
        if configuration.strict_paragraph_loading_rules_check:
            raise MissingLoadingRuleException(message)
        logger.warning('%s: construct skipped', message)
        return partition(text, global_offset, codex, configuration, construct_index + 1, depth, state)

    blocks = []
    residual_start = 0
    for match in find_block_matches(entry.modifier.regex, text):
        if residual_start < match.start():
            blocks.extend(
                partition(
                    text[residual_start:match.start()],
                    global_offset + residual_start,
                    codex,
                    configuration,
                    construct_index + 1,
                    depth,
                    state,
                )
            )

        logger.debug('loading `%s` at %d', identifier, global_offset + match.start())
        paragraphs = entry.loading_rule.load(match.group(0), codex, configuration, depth)
        if len(paragraphs) > 0:
            blocks.extend(locate_paragraphs(match.group(0), global_offset + match.start(), paragraphs))

        residual_start = match.end()

    if residual_start < len(text):
        blocks.extend(
            partition(
                text[residual_start:],
                global_offset + residual_start,
                codex,
                configuration,
                construct_index + 1,
                depth,
                state,
            )
        )

    return blocks


def load_blocks(text: str, codex, configuration: LoadConfiguration, depth: int = 0) -> list[LoadBlock]:
    blocks = partition(text, 0, codex, configuration, depth=depth)
    blocks.sort(key=lambda block: block.start)

    return blocks


def load_paragraphs(text: str, codex, configuration: LoadConfiguration, depth: int) -> list[Paragraph]:
    """
    Load the paragraphs of a nested body (block quote, focus block); headings and tags are ignored.
    """
    paragraphs = []
    for block in load_blocks(text, codex, configuration, depth):
        if isinstance(block.content, Paragraph):
            paragraphs.append(block.content)
        else:
            logger.warning('%r inside a nested block: ignored', block.content)

    return paragraphs


def load_document_from_str(document_name: str, text: str, codex, configuration: Optional[LoadConfiguration] = None) -> Document:
    if configuration is None:
        configuration = LoadConfiguration()

    logger.debug('loading document `%s`', document_name)

    return fold_blocks(document_name, load_blocks(text, codex, configuration))


def extract_document_name(path: Path) -> str:
    name = path.name
    if name.endswith(NMD_FILE_EXTENSION):
        name = name[:-len(NMD_FILE_EXTENSION)]

    return name


def load_document(path: Path, codex, configuration: Optional[LoadConfiguration] = None) -> Document:
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as os_error:
        raise ResourceException(f'cannot read `{path}`') from os_error

    return load_document_from_str(extract_document_name(path), text, codex, configuration)


def load_dossier(directory: Path, codex, configuration: Optional[LoadConfiguration] = None) -> Dossier:
    """
    Load the dossier in `directory`, according to its configuration file.

    The dossier's `strict_focus_block_check` and `parallelization` settings override `configuration`.
    Documents are loaded in parallel when `parallelization` is set.
    """
    if configuration is None:
        configuration = LoadConfiguration()

    dossier_configuration = load_dossier_configuration(directory)
    configuration = dossier_configuration.apply_to_load(configuration)
    document_paths = dossier_configuration.document_paths()

    logger.info('loading dossier `%s` (%d documents)', dossier_configuration.name, len(document_paths))

    if configuration.parallelization:
        with concurrent.futures.ThreadPoolExecutor() as executor:
            documents = list(executor.map(lambda path: load_document(path, codex, configuration), document_paths))
    else:
        documents = [load_document(path, codex, configuration) for path in document_paths]

    return Dossier(dossier_configuration.name, documents, dossier_configuration)
