"""
# NMD: contents.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Generated contents of a dossier: table of contents and bibliography.
"""

import logging
from typing import Iterable, NamedTuple, Optional

from nmd.compilables import CompilableText, CompilableTextPart
from nmd.constants import BIBLIOGRAPHY_FICTITIOUS_DOCUMENT, DEFAULT_TABLE_OF_CONTENTS_TITLE, MAX_HEADING_LEVEL, TOC_INDENTATION
from nmd.dossiers import Document, Heading
from nmd.references import Bibliography, ResourceReference
from nmd.utilities import escape_attribute_value_html, escape_html

logger = logging.getLogger(__name__)


class TableOfContentsEntry(NamedTuple):
    heading: Heading
    document_name: str


class TableOfContents:
    """
    Table of contents over the headings of several documents.

    Headings deeper than `maximum_heading_level` are left out.
    Unless `plain`, entries are indented by their level relative to the shallowest heading.
    """
    _title: str
    _entries: tuple[TableOfContentsEntry, ...]
    _maximum_heading_level: int
    _plain: bool
    _compiled_text: Optional[CompilableText]

    def __init__(
        self,
        entries: Iterable[TableOfContentsEntry],
        title: str = DEFAULT_TABLE_OF_CONTENTS_TITLE,
        maximum_heading_level: int = MAX_HEADING_LEVEL,
        plain: bool = False,
    ):
        self._title = title
        self._entries = tuple(entries)
        self._maximum_heading_level = maximum_heading_level
        self._plain = plain
        self._compiled_text = None

    @staticmethod
    def of_documents(documents: Iterable[Document], configuration) -> 'TableOfContents':
        entries = [
            TableOfContentsEntry(heading, document.name)
            for document in documents
            for heading in document.headings()
        ]

        return TableOfContents(entries, configuration.title, configuration.maximum_heading_level, configuration.plain)

    @property
    def title(self) -> str:
        return self._title

    @property
    def entries(self) -> tuple[TableOfContentsEntry, ...]:
        return self._entries

    @property
    def compiled_text(self) -> Optional[CompilableText]:
        return self._compiled_text

    def included_entries(self) -> list[TableOfContentsEntry]:
        return [entry for entry in self._entries if entry.heading.level <= self._maximum_heading_level]

    def compile(self, codex, configuration, context) -> CompilableText:
        entries = self.included_entries()
        minimum_level = min((entry.heading.level for entry in entries), default=1)

        parts = [CompilableTextPart.fixed('<section class="toc"><div class="toc-title">')]
        parts.extend(CompilableText.of_compilable(escape_html(self._title)).compile(codex, configuration, context).parts)
        parts.append(CompilableTextPart.fixed('</div><ul class="toc-body">'))

        for entry in entries:
            parts.append(CompilableTextPart.fixed('<li class="toc-item">'))
            if not self._plain:
                parts.append(CompilableTextPart.fixed(TOC_INDENTATION * (entry.heading.level - minimum_level)))
            parts.append(CompilableTextPart.fixed('<span class="toc-item-bullet"></span><span class="toc-item-content">'))

            anchor = entry.heading.build_anchor(entry.document_name)
            parts.append(CompilableTextPart.fixed(f'<a href="#{escape_attribute_value_html(anchor)}" class="link">'))
            entry_context = context._replace(document_name=entry.document_name)
            parts.extend(
                CompilableText.of_compilable(escape_html(entry.heading.title)).compile(codex, configuration, entry_context).parts
            )
            parts.append(CompilableTextPart.fixed('</a></span></li>'))

        parts.append(CompilableTextPart.fixed('</ul></section>'))

        logger.info(
            'compiled table of contents (%d entries, %d skipped)', len(entries), len(self._entries) - len(entries)
        )

        self._compiled_text = CompilableText(parts)

        return self._compiled_text


def compile_bibliography(bibliography: Bibliography, codex, configuration, context) -> CompilableText:
    """
    Compile a bibliography into a `<section class="bibliography">`, one item per record in key order.
    """
    parts = [CompilableTextPart.fixed('<section class="bibliography"><div class="bibliography-title">')]
    parts.extend(CompilableText.of_compilable(escape_html(bibliography.title)).compile(codex, configuration, context).parts)
    parts.append(CompilableTextPart.fixed('</div><ul class="bibliography-body">'))

    for key, record in bibliography.record_from_key.items():
        anchor = ResourceReference.of_internal_without_sharp(key, BIBLIOGRAPHY_FICTITIOUS_DOCUMENT).build_without_internal_sharp()
        item = (
            f'<li class="bibliography-item" id="{escape_attribute_value_html(anchor)}">'
            f'<div class="bibliography-item-title">{escape_html(record.title)}</div>'
        )
        if record.authors:
            item += f'<div class="bibliography-item-authors">{escape_html(", ".join(record.authors))}</div>'
        if record.year is not None:
            item += f'<div class="bibliography-item-year">{record.year}</div>'
        if record.url is not None:
            url = escape_attribute_value_html(record.url)
            item += f'<div class="bibliography-item-url"><a href="{url}" class="link">{url}</a></div>'
        if record.description is not None:
            item += f'<div class="bibliography-item-description">{escape_html(record.description)}</div>'
        item += '</li>'

        parts.append(CompilableTextPart.fixed(item))

    parts.append(CompilableTextPart.fixed('</ul></section>'))

    logger.info('compiled bibliography (%d records)', len(bibliography.record_from_key))

    return CompilableText(parts)
