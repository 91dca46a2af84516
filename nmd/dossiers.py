"""
# NMD: dossiers.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Document model: Dossier -> Document -> Chapter -> Paragraph.

A document is built by folding its sorted load blocks:
- a heading opens a new chapter
- a chapter tag attaches to the open chapter (ignored, with a warning, when none is open)
- a paragraph attaches to the open chapter, or to the preamble when none is open
"""

import logging
from typing import Iterable, Optional

from nmd.compilables import CompilableText, CompilableTextPart
from nmd.exceptions import InvalidTagException
from nmd.paragraphs import Paragraph
from nmd.references import ResourceReference
from nmd.utilities import build_nuid, escape_html, html_nuid_attribute

logger = logging.getLogger(__name__)

ID = 'id'
AUTHOR = 'author'
DATE = 'date'
INTENT = 'intent'
STYLE = 'style'
STYLE_CLASS = 'styleclass'
CHAPTER_TAG_KEYS = (ID, AUTHOR, DATE, INTENT, STYLE, STYLE_CLASS)
CHAPTER_TAG_KEY_FROM_ALIAS = {'class': STYLE_CLASS}


class ChapterTag:
    """
    A chapter tag `@«key» «value»`.

    Keys are case-insensitive; `class` is an alias of `styleclass`.
    """
    _key: str
    _value: Optional[str]

    def __init__(self, key: str, value: Optional[str] = None):
        self._key = key
        self._value = value

    @staticmethod
    def of(raw_key: str, value: Optional[str] = None) -> 'ChapterTag':
        key = raw_key.lower()
        key = CHAPTER_TAG_KEY_FROM_ALIAS.get(key, key)
        if key not in CHAPTER_TAG_KEYS:
            raise InvalidTagException(f'@{raw_key}')

        return ChapterTag(key, value)

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> Optional[str]:
        return self._value

    def __eq__(self, other) -> bool:
        if not isinstance(other, ChapterTag):
            return NotImplemented

        return self._key == other._key and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._key, self._value))

    def __repr__(self) -> str:
        return f'ChapterTag({self._key!r}, {self._value!r})'


class Heading:
    """
    A heading of level 1 to 6.
    """
    _level: int
    _title: str
    _resource_identifier: Optional[str]
    _nuid: Optional[str]
    _compiled_text: Optional[CompilableText]

    def __init__(self, level: int, title: str):
        self._level = level
        self._title = title
        self._resource_identifier = None
        self._nuid = None
        self._compiled_text = None

    @property
    def level(self) -> int:
        return self._level

    @property
    def title(self) -> str:
        return self._title

    @property
    def resource_identifier(self) -> Optional[str]:
        return self._resource_identifier

    @resource_identifier.setter
    def resource_identifier(self, value: Optional[str]):
        self._resource_identifier = value

    @property
    def nuid(self) -> Optional[str]:
        return self._nuid

    @nuid.setter
    def nuid(self, value: Optional[str]):
        self._nuid = value

    @property
    def compiled_text(self) -> Optional[CompilableText]:
        return self._compiled_text

    def build_anchor(self, document_name: Optional[str]) -> Optional[str]:
        if document_name is None:
            return None

        identifier = self._resource_identifier if self._resource_identifier is not None else self._title

        return ResourceReference.of_internal_without_sharp(identifier, document_name).build_without_internal_sharp()

    def compile(self, codex, configuration, context) -> CompilableText:
        anchor = self.build_anchor(context.document_name)
        id_attribute = f' id="{anchor}"' if anchor is not None else ''

        title = CompilableText.of_compilable(escape_html(self._title)).compile(codex, configuration, context)
        compiled_text = CompilableText(
            [
                CompilableTextPart.fixed(
                    f'<h{self._level} class="heading-{self._level}"{id_attribute}{html_nuid_attribute(self._nuid)}>'
                ),
                *title.parts,
                CompilableTextPart.fixed(f'</h{self._level}>'),
            ],
            self._nuid,
        )
        self._compiled_text = compiled_text

        return compiled_text

    def __repr__(self) -> str:
        return f'Heading({self._level!r}, {self._title!r})'


class Chapter:
    _heading: Heading
    _tags: list[ChapterTag]
    _paragraphs: list[Paragraph]

    def __init__(self, heading: Heading, tags: Iterable[ChapterTag] = (), paragraphs: Iterable[Paragraph] = ()):
        self._heading = heading
        self._tags = []
        self._paragraphs = list(paragraphs)
        for tag in tags:
            self.add_tag(tag)

    @property
    def heading(self) -> Heading:
        return self._heading

    @property
    def tags(self) -> list[ChapterTag]:
        return self._tags

    @property
    def paragraphs(self) -> list[Paragraph]:
        return self._paragraphs

    def add_tag(self, tag: ChapterTag):
        self._tags.append(tag)
        if tag.key == ID and tag.value:
            self._heading.resource_identifier = tag.value

    def add_paragraph(self, paragraph: Paragraph):
        self._paragraphs.append(paragraph)

    def tag_values(self, key: str) -> list[str]:
        return [tag.value for tag in self._tags if tag.key == key and tag.value is not None]


class Document:
    _name: str
    _preamble: list[Paragraph]
    _chapters: list[Chapter]
    _compiled_text: Optional[CompilableText]

    def __init__(self, name: str, preamble: Iterable[Paragraph] = (), chapters: Iterable[Chapter] = ()):
        self._name = name
        self._preamble = list(preamble)
        self._chapters = list(chapters)
        self._compiled_text = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def preamble(self) -> list[Paragraph]:
        return self._preamble

    @property
    def chapters(self) -> list[Chapter]:
        return self._chapters

    @property
    def compiled_text(self) -> Optional[CompilableText]:
        return self._compiled_text

    @compiled_text.setter
    def compiled_text(self, value: Optional[CompilableText]):
        self._compiled_text = value

    def headings(self) -> list[Heading]:
        return [chapter.heading for chapter in self._chapters]

    def paragraphs(self) -> list[Paragraph]:
        """
        Every paragraph of the document, nested ones included, in document order.
        """
        paragraphs = []
        for paragraph in self._preamble:
            collect_paragraphs(paragraph, paragraphs)
        for chapter in self._chapters:
            for paragraph in chapter.paragraphs:
                collect_paragraphs(paragraph, paragraphs)

        return paragraphs

    def __repr__(self) -> str:
        return f'Document({self._name!r}, preamble={len(self._preamble)}, chapters={len(self._chapters)})'


class Dossier:
    """
    A named collection of documents, with an optional table of contents and bibliography.
    """
    _name: str
    _documents: list[Document]
    _configuration: Optional[object]
    _table_of_contents: Optional[object]
    _bibliography: Optional[object]

    def __init__(self, name: str, documents: Iterable[Document], configuration=None):
        self._name = name
        self._documents = list(documents)
        self._configuration = configuration
        self._table_of_contents = None
        self._bibliography = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def documents(self) -> list[Document]:
        return self._documents

    @property
    def configuration(self):
        return self._configuration

    @property
    def table_of_contents(self):
        return self._table_of_contents

    @table_of_contents.setter
    def table_of_contents(self, value):
        self._table_of_contents = value

    @property
    def bibliography(self):
        return self._bibliography

    @bibliography.setter
    def bibliography(self, value):
        self._bibliography = value

    def lookup_document(self, name: str) -> Optional[Document]:
        for document in self._documents:
            if document.name == name:
                return document

        return None


def collect_paragraphs(paragraph: Paragraph, paragraphs: list[Paragraph]):
    paragraphs.append(paragraph)
    for nested_paragraph in paragraph.nested_paragraphs:
        collect_paragraphs(nested_paragraph, paragraphs)


def fold_blocks(document_name: str, blocks) -> Document:
    """
    Build a document from load blocks sorted by start offset.
    """
    document = Document(document_name)
    current_chapter: Optional[Chapter] = None

    for block in blocks:
        content = block.content

        if isinstance(content, Heading):
            current_chapter = Chapter(content)
            document.chapters.append(current_chapter)

        elif isinstance(content, ChapterTag):
            if current_chapter is None:
                logger.warning('chapter tag `@%s` outside any chapter in `%s`: ignored', content.key, document_name)
                continue
            current_chapter.add_tag(content)

        elif current_chapter is None:
            document.preamble.append(content)

        else:
            current_chapter.add_paragraph(content)

    return document


def assign_nuids(document: Document):
    """
    Give every heading and paragraph of `document` a NUID.

    NUIDs hash the raw content; repeated content is told apart by an occurrence counter.
    """
    occurrence_from_content: dict[str, int] = {}

    def next_nuid(content: str) -> str:
        occurrence = occurrence_from_content.get(content, 0)
        occurrence_from_content[content] = occurrence + 1
        return build_nuid(document.name, content, occurrence)

    for paragraph in document.paragraphs():
        paragraph.nuid = next_nuid(paragraph.raw_content)

    for heading in document.headings():
        heading.nuid = next_nuid(heading.title)
