"""
# NMD: paragraphs.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Paragraphs: the compiled units of a document.

Every paragraph keeps its raw content and the identifier of the construct that loaded it,
and stores its compiled text after `compile`.
"""

import abc
import logging
import re
from typing import Iterable, NamedTuple, Optional

from nmd.compilables import CompilableText, CompilableTextPart
from nmd.constants import LIST_ITEM_INDENTATION, SPACE_TAB_EQUIVALENCE
from nmd.exceptions import ElaborationException, InvalidListException
from nmd.modifiers import LIST_ITEM_PATTERN
from nmd.references import ResourceReference
from nmd.resources import resolve_image_source
from nmd.utilities import (
    build_class_and_style_attributes,
    escape_attribute_value_html,
    escape_html,
    fold_newlines,
    html_nuid_attribute,
    normalise_identifier,
)

logger = logging.getLogger(__name__)

LIST_ITEM_REGEX = re.compile(LIST_ITEM_PATTERN)
TABLE_ALIGNMENT_CELL_REGEX = re.compile(r'[ \t]*(?P<left>:?)-+(?P<right>:?)[ \t]*')
TABLE_METADATA_REGEX = re.compile(
    r'[ \t]*(?:\[(?P<caption>[^\]\n]*)\])?(?:#(?P<identifier>[\w-]+))?(?:\{\{(?P<style>[^{}\n]*)\}\})?[ \t]*'
)

LEFT = 'left'
CENTER = 'center'
RIGHT = 'right'

DEFAULT_IMAGES_ALIGNMENT = 'normal'
DEFAULT_IMAGE_ALIGN_SELF = 'center'


def fold_compilable_newlines(compilable_text: CompilableText) -> CompilableText:
    parts = [
        part.with_content(fold_newlines(part.content))
        if part.is_compilable else part
        for part in compilable_text.parts
    ]

    return CompilableText(parts, compilable_text.nuid)


def build_internal_identifier(identifier: Optional[str], document_name: Optional[str]) -> Optional[str]:
    if identifier is None:
        return None

    return ResourceReference.of_internal_without_sharp(identifier, document_name).build_without_internal_sharp()


def build_id_attribute(identifier: Optional[str]) -> str:
    if identifier is None:
        return ''

    return f' id="{escape_attribute_value_html(identifier)}"'


class Paragraph(abc.ABC):
    """
    Base class for a paragraph.
    """
    _raw_content: str
    _kind: str
    _nuid: Optional[str]
    _compiled_text: Optional[CompilableText]

    def __init__(self, raw_content: str, kind: str):
        self._raw_content = raw_content
        self._kind = kind
        self._nuid = None
        self._compiled_text = None

    @property
    def raw_content(self) -> str:
        return self._raw_content

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def nuid(self) -> Optional[str]:
        return self._nuid

    @nuid.setter
    def nuid(self, value: Optional[str]):
        self._nuid = value

    @property
    def compiled_text(self) -> Optional[CompilableText]:
        return self._compiled_text

    @property
    def nested_paragraphs(self) -> tuple['Paragraph', ...]:
        return ()

    def compile(self, codex, configuration, context) -> CompilableText:
        self._compiled_text = self.build_compiled_text(codex, configuration, context)

        return self._compiled_text

    @abc.abstractmethod
    def build_compiled_text(self, codex, configuration, context) -> CompilableText:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._kind!r}, {self._raw_content!r})'


class CommonParagraph(Paragraph):
    """
    Plain text paragraph, `<p class="paragraph">`.
    """

    def build_compiled_text(self, codex, configuration, context) -> CompilableText:
        compilable_text = CompilableText(
            [
                CompilableTextPart.fixed(f'<p class="paragraph"{html_nuid_attribute(self._nuid)}>'),
                CompilableTextPart.compilable(escape_html(self._raw_content.strip())),
                CompilableTextPart.fixed('</p>'),
            ],
            self._nuid,
        )

        return fold_compilable_newlines(compilable_text.compile(codex, configuration, context))


class ReplacementParagraph(Paragraph):
    """
    Paragraph compiled by the single replacement rule of its construct, then by the inline constructs.
    """
    _rule: object

    def __init__(self, raw_content: str, kind: str, rule):
        super().__init__(raw_content, kind)
        self._rule = rule

    @property
    def rule(self):
        return self._rule

    def build_compiled_text(self, codex, configuration, context) -> CompilableText:
        compilable_text = CompilableText.of_compilable(self._raw_content, nuid=self._nuid)
        compilable_text = self._rule.compile(compilable_text.with_scope(self._kind), configuration, context)

        return compilable_text.compile(codex, configuration, context)


class ListItem(NamedTuple):
    indentation_level: int
    bullet: str
    content: str


class ListParagraph(Paragraph):
    """
    List of items `«indentation»«bullet» «content»`, one per line.

    Indentation levels are counted in tabs or runs of four spaces.
    A line that is not an item is an error under `strict_list_check`;
    otherwise it is logged and appended to the previous item.
    """

    def parse_items(self, configuration) -> list[ListItem]:
        items = []
        for line in self._raw_content.splitlines():
            if len(line.strip()) == 0:
                continue

            match = LIST_ITEM_REGEX.match(line)
            if match is None:
                message = f'invalid list item `{line.strip()}`'
                if configuration.strict_list_check:
                    raise InvalidListException(message)
                logger.warning('%s: appended to the previous item', message)

                if len(items) > 0:
                    last_item = items[-1]
                    items[-1] = last_item._replace(content=f'{last_item.content} {line.strip()}')
                continue

            items.append(
                ListItem(
                    indentation_level=ListParagraph.compute_indentation_level(match.group('indentation')),
                    bullet=match.group('bullet'),
                    content=match.group('content'),
                )
            )

        return items

    @staticmethod
    def compute_indentation_level(indentation: str) -> int:
        indentation = indentation.replace('\t', SPACE_TAB_EQUIVALENCE)

        return len(indentation) // len(SPACE_TAB_EQUIVALENCE)

    @staticmethod
    def transform_bullet(bullet: str, indentation_level: int, list_bullet_records) -> str:
        for record in list_bullet_records:
            if record.source != bullet:
                continue

            if record.strict_indentation and indentation_level == record.indentation_level:
                return record.target
            if not record.strict_indentation and indentation_level >= record.indentation_level:
                return record.target

        return escape_html(bullet)

    def build_compiled_text(self, codex, configuration, context) -> CompilableText:
        parts = [CompilableTextPart.fixed(f'<ul class="list"{html_nuid_attribute(self._nuid)}>')]

        for item in self.parse_items(configuration):
            bullet = ListParagraph.transform_bullet(item.bullet, item.indentation_level, configuration.list_bullet_records)
            parts.append(
                CompilableTextPart.fixed(
                    f'<li class="list-item">{LIST_ITEM_INDENTATION * item.indentation_level}'
                    f'<span class="list-item-bullet">{bullet}</span><span class="list-item-content">'
                )
            )
            parts.append(CompilableTextPart.compilable(escape_html(item.content)))
            parts.append(CompilableTextPart.fixed('</span></li>'))

        parts.append(CompilableTextPart.fixed('</ul>'))

        return CompilableText(parts, self._nuid).compile(codex, configuration, context)


class TableParagraph(Paragraph):
    """
    Table of pipe-delimited rows.

    A row of alignment cells (`:--`, `--:`, `:-:`, `---`) right after the first row
    makes the first row a header and sets the column alignments;
    one right before the last row makes the last row a footer.
    A last line without pipes may carry `[caption]`, `#id` and `{{style}}`.
    """

    @staticmethod
    def split_cells(line: str) -> list[str]:
        line = line.strip()
        if line.startswith('|'):
            line = line[1:]
        if line.endswith('|') and not line.endswith('\\|'):
            line = line[:-1]

        return [cell.replace('\\|', '|') for cell in re.split(pattern=r'(?<!\\)\|', string=line)]

    @staticmethod
    def parse_alignments(cells: list[str]) -> Optional[list[Optional[str]]]:
        alignments = []
        for cell in cells:
            match = TABLE_ALIGNMENT_CELL_REGEX.fullmatch(cell)
            if match is None:
                return None

            if match.group('left') and match.group('right'):
                alignments.append(CENTER)
            elif match.group('right'):
                alignments.append(RIGHT)
            elif match.group('left'):
                alignments.append(LEFT)
            else:
                alignments.append(None)

        return alignments

    def parse(self) -> tuple[list[list[str]], list[list[str]], list[list[str]], list[Optional[str]], Optional[re.Match]]:
        lines = [line for line in self._raw_content.splitlines() if len(line.strip()) > 0]

        metadata_match = None
        if len(lines) > 0 and not lines[-1].strip().startswith('|'):
            metadata_match = TABLE_METADATA_REGEX.fullmatch(lines.pop())

        rows = [TableParagraph.split_cells(line) for line in lines]
        alignments_from_row = [TableParagraph.parse_alignments(row) for row in rows]

        header_rows = []
        footer_rows = []
        alignments = []

        if len(rows) >= 2 and alignments_from_row[1] is not None:
            header_rows = [rows[0]]
            alignments = alignments_from_row[1]
            rows = rows[2:]
            alignments_from_row = alignments_from_row[2:]

        if len(rows) >= 2 and alignments_from_row[-2] is not None:
            footer_rows = [rows[-1]]
            if len(alignments) == 0:
                alignments = alignments_from_row[-2]
            rows = rows[:-2]
            alignments_from_row = alignments_from_row[:-2]

        body_rows = [row for row, row_alignments in zip(rows, alignments_from_row) if row_alignments is None]

        return header_rows, body_rows, footer_rows, alignments, metadata_match

    @staticmethod
    def build_row_parts(row: list[str], cell_tag: str, row_class: str, alignments: list[Optional[str]]) -> list[CompilableTextPart]:
        parts = [CompilableTextPart.fixed(f'<tr class="{row_class}">')]
        for index, cell in enumerate(row):
            if len(cell.strip()) == 0:
                parts.append(CompilableTextPart.fixed(f'<{cell_tag} class="table-cell table-empty-cell"></{cell_tag}>'))
                continue

            alignment = alignments[index] if index < len(alignments) else None
            alignment_class = f' table-{alignment}-cell' if alignment is not None else ''
            parts.append(CompilableTextPart.fixed(f'<{cell_tag} class="table-cell{alignment_class}">'))
            parts.append(CompilableTextPart.compilable(escape_html(cell.strip())))
            parts.append(CompilableTextPart.fixed(f'</{cell_tag}>'))
        parts.append(CompilableTextPart.fixed('</tr>'))

        return parts

    def build_compiled_text(self, codex, configuration, context) -> CompilableText:
        header_rows, body_rows, footer_rows, alignments, metadata_match = self.parse()

        caption = None
        identifier = None
        style = None
        if metadata_match is not None:
            caption = metadata_match.group('caption')
            identifier = build_internal_identifier(metadata_match.group('identifier'), context.document_name)
            style = metadata_match.group('style')

        parts = [
            CompilableTextPart.fixed(
                f'<table{build_class_and_style_attributes("table", style)}{build_id_attribute(identifier)}'
                f'{html_nuid_attribute(self._nuid)}>'
            )
        ]

        if caption is not None:
            parts.append(CompilableTextPart.fixed('<caption class="table-caption">'))
            parts.append(CompilableTextPart.compilable(escape_html(caption)))
            parts.append(CompilableTextPart.fixed('</caption>'))

        if len(header_rows) > 0:
            parts.append(CompilableTextPart.fixed('<thead class="table-header">'))
            for row in header_rows:
                parts.extend(TableParagraph.build_row_parts(row, 'th', 'table-header-row', alignments))
            parts.append(CompilableTextPart.fixed('</thead>'))

        parts.append(CompilableTextPart.fixed('<tbody class="table-body">'))
        for row in body_rows:
            parts.extend(TableParagraph.build_row_parts(row, 'td', 'table-body-row', alignments))
        parts.append(CompilableTextPart.fixed('</tbody>'))

        if len(footer_rows) > 0:
            parts.append(CompilableTextPart.fixed('<tfoot class="table-footer">'))
            for row in footer_rows:
                parts.extend(TableParagraph.build_row_parts(row, 'td', 'table-footer-row', alignments))
            parts.append(CompilableTextPart.fixed('</tfoot>'))

        parts.append(CompilableTextPart.fixed('</table>'))

        return CompilableText(parts, self._nuid).compile(codex, configuration, context)


class Image(NamedTuple):
    source: str
    caption: Optional[str] = None
    identifier: Optional[str] = None
    style: Optional[str] = None
    abridged: bool = False
    align_self: Optional[str] = None


class ImageParagraph(Paragraph):
    """
    Single image, abridged image, or multi image (`images_alignment` set).
    """
    _images: tuple[Image, ...]
    _images_alignment: Optional[str]

    def __init__(self, raw_content: str, kind: str, images: Iterable[Image], images_alignment: Optional[str] = None):
        super().__init__(raw_content, kind)
        self._images = tuple(images)
        self._images_alignment = images_alignment

    @property
    def images(self) -> tuple[Image, ...]:
        return self._images

    @property
    def images_alignment(self) -> Optional[str]:
        return self._images_alignment

    @property
    def is_multi_image(self) -> bool:
        return self._images_alignment is not None

    def build_image_parts(self, image: Image, nuid_attribute: str, configuration, context) -> list[CompilableTextPart]:
        if image.identifier is not None:
            identifier = build_internal_identifier(image.identifier, context.document_name)
        elif image.caption and context.document_name is not None:
            identifier = build_internal_identifier(image.caption, context.document_name)
        else:
            identifier = None

        src = escape_attribute_value_html(resolve_image_source(image.source, configuration))
        image_classes = 'image abridged-image' if image.abridged else 'image'
        alt = f' alt="{escape_attribute_value_html(image.caption)}"' if image.caption else ''

        parts = [
            CompilableTextPart.fixed(
                f'<figure{build_class_and_style_attributes("figure", image.style)}{build_id_attribute(identifier)}'
                f'{nuid_attribute}><img src="{src}"{alt} class="{image_classes}" />'
            )
        ]
        if image.caption:
            parts.append(CompilableTextPart.fixed('<figcaption class="image-caption">'))
            parts.append(CompilableTextPart.compilable(escape_html(image.caption)))
            parts.append(CompilableTextPart.fixed('</figcaption>'))
        parts.append(CompilableTextPart.fixed('</figure>'))

        return parts

    def build_compiled_text(self, codex, configuration, context) -> CompilableText:
        nuid_attribute = html_nuid_attribute(self._nuid)

        if not self.is_multi_image:
            parts = self.build_image_parts(self._images[0], nuid_attribute, configuration, context)
            return CompilableText(parts, self._nuid).compile(codex, configuration, context)

        alignment = escape_attribute_value_html(self._images_alignment)
        parts = [
            CompilableTextPart.fixed(
                f'<div class="images-container" style="display: flex; justify-content: {alignment};"{nuid_attribute}>'
            )
        ]
        for image in self._images:
            align_self = escape_attribute_value_html(image.align_self or DEFAULT_IMAGE_ALIGN_SELF)
            parts.append(CompilableTextPart.fixed(f'<div class="image-container" style="align-self: {align_self};">'))
            parts.extend(self.build_image_parts(image, '', configuration, context))
            parts.append(CompilableTextPart.fixed('</div>'))
        parts.append(CompilableTextPart.fixed('</div>'))

        return CompilableText(parts, self._nuid).compile(codex, configuration, context)


class ContainerParagraph(Paragraph):
    """
    Base class for a paragraph holding re-partitioned paragraphs (block quotes, focus blocks).
    """
    _container_type: str
    _paragraphs: tuple[Paragraph, ...]

    def __init__(self, raw_content: str, kind: str, container_type: str, paragraphs: Iterable[Paragraph]):
        super().__init__(raw_content, kind)
        self._container_type = container_type
        self._paragraphs = tuple(paragraphs)

    @property
    def container_type(self) -> str:
        return self._container_type

    @property
    def nested_paragraphs(self) -> tuple[Paragraph, ...]:
        return self._paragraphs

    @property
    @abc.abstractmethod
    def base_class(self) -> str:
        raise NotImplementedError

    def build_compiled_text(self, codex, configuration, context) -> CompilableText:
        base_class = self.base_class
        container_type = normalise_identifier(self._container_type)
        type_class = f'{base_class}-{container_type}'

        parts = [
            CompilableTextPart.fixed(
                f'<div class="{base_class} {type_class}"{html_nuid_attribute(self._nuid)}>'
                f'<div class="{base_class}-title {type_class}-title"></div>'
                f'<div class="{base_class}-description {type_class}-description">'
            )
        ]
        for paragraph in self._paragraphs:
            parts.extend(paragraph.compile(codex, configuration, context).parts)
        parts.append(CompilableTextPart.fixed('</div></div>'))

        return CompilableText(parts, self._nuid)


class ExtendedBlockQuoteParagraph(ContainerParagraph):
    @property
    def base_class(self) -> str:
        return 'focus-quote-block'


class FocusBlockParagraph(ContainerParagraph):
    @property
    def base_class(self) -> str:
        return 'focus-block'


def strip_block_quote_prefixes(raw_content: str, strict_focus_block_check: bool) -> tuple[Optional[str], str]:
    """
    Strip the `>` prefixes of a block quote, returning its `[!TYPE]` (if any) and its body.

    A line without a `>` prefix is an error under `strict_focus_block_check`;
    otherwise it is logged and skipped.
    """
    quote_type = None
    body_lines = []
    for index, line in enumerate(raw_content.splitlines()):
        stripped_line = line.strip()
        if not stripped_line.startswith('>'):
            if len(stripped_line) == 0:
                body_lines.append('')
                continue

            message = f'block quote line without `>`: `{stripped_line}`'
            if strict_focus_block_check:
                raise ElaborationException(message)
            logger.warning('%s: skipped', message)
            continue

        content = stripped_line[1:]
        if content.startswith(' '):
            content = content[1:]

        if index == 0:
            type_match = re.fullmatch(pattern=r'\[!(?P<type>[\w-]+)\][ \t]*', string=content)
            if type_match is not None:
                quote_type = type_match.group('type').lower()
                continue

        body_lines.append(content)

    return quote_type, '\n'.join(body_lines)
