"""
# NMD: test_contents.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `contents.py`.
"""

import unittest

from nmd.codex import Codex
from nmd.configurations import CompilationConfiguration, CompilationContext, TableOfContentsConfiguration
from nmd.constants import TOC_INDENTATION
from nmd.contents import TableOfContents, TableOfContentsEntry, compile_bibliography
from nmd.dossiers import Chapter, Document, Heading
from nmd.references import Bibliography, BibliographyRecord

CODEX = Codex.of_html()
CONFIGURATION = CompilationConfiguration()
CONTEXT = CompilationContext(dossier_name='Handbook')


def build_toc_item(anchor: str, title: str, indentation: str = '') -> str:
    return (
        f'<li class="toc-item">{indentation}<span class="toc-item-bullet"></span><span class="toc-item-content">'
        f'<a href="#{anchor}" class="link">{title}</a></span></li>'
    )


class TestContents(unittest.TestCase):
    def test_table_of_contents(self):
        table_of_contents = TableOfContents(
            [
                TableOfContentsEntry(Heading(2, 'Start'), 'intro'),
                TableOfContentsEntry(Heading(3, 'Details'), 'intro'),
                TableOfContentsEntry(Heading(4, 'Minutiae'), 'intro'),
                TableOfContentsEntry(Heading(2, 'Use *it*'), 'usage'),
            ],
            maximum_heading_level=3,
        )

        self.assertEqual(len(table_of_contents.included_entries()), 3)
        self.assertEqual(
            table_of_contents.compile(CODEX, CONFIGURATION, CONTEXT).content(),
            '<section class="toc"><div class="toc-title">Table of contents</div><ul class="toc-body">'
            + build_toc_item('intro-start', 'Start')
            + build_toc_item('intro-details', 'Details', TOC_INDENTATION)
            + build_toc_item('usage-use--it-', 'Use <em class="italic">it</em>')
            + '</ul></section>',
        )
        self.assertIsNotNone(table_of_contents.compiled_text)

    def test_plain_table_of_contents(self):
        table_of_contents = TableOfContents(
            [TableOfContentsEntry(Heading(1, 'A'), 'doc'), TableOfContentsEntry(Heading(2, 'B'), 'doc')],
            title='Contents',
            plain=True,
        )

        self.assertEqual(
            table_of_contents.compile(CODEX, CONFIGURATION, CONTEXT).content(),
            '<section class="toc"><div class="toc-title">Contents</div><ul class="toc-body">'
            + build_toc_item('doc-a', 'A')
            + build_toc_item('doc-b', 'B')
            + '</ul></section>',
        )

    def test_table_of_contents_of_documents(self):
        documents = [
            Document('intro', chapters=[Chapter(Heading(1, 'Introduction')), Chapter(Heading(2, 'Scope'))]),
            Document('usage', chapters=[Chapter(Heading(1, 'Usage'))]),
        ]
        table_of_contents = TableOfContents.of_documents(documents, TableOfContentsConfiguration(title='Contents'))

        self.assertEqual(table_of_contents.title, 'Contents')
        self.assertEqual(
            [(entry.document_name, entry.heading.title) for entry in table_of_contents.entries],
            [('intro', 'Introduction'), ('intro', 'Scope'), ('usage', 'Usage')],
        )

    def test_compile_bibliography(self):
        bibliography = Bibliography(
            'References',
            {
                'turing': BibliographyRecord('On Computable Numbers', url='https://example.com/?a&b'),
                'knuth': BibliographyRecord('Literate Programming', ['Donald E. Knuth'], 1984, description='A <classic>.'),
            },
        )

        self.assertEqual(
            compile_bibliography(bibliography, CODEX, CONFIGURATION, CONTEXT).content(),
            '<section class="bibliography"><div class="bibliography-title">References</div><ul class="bibliography-body">'
            '<li class="bibliography-item" id="bibliography-knuth">'
            '<div class="bibliography-item-title">Literate Programming</div>'
            '<div class="bibliography-item-authors">Donald E. Knuth</div>'
            '<div class="bibliography-item-year">1984</div>'
            '<div class="bibliography-item-description">A &lt;classic&gt;.</div>'
            '</li>'
            '<li class="bibliography-item" id="bibliography-turing">'
            '<div class="bibliography-item-title">On Computable Numbers</div>'
            '<div class="bibliography-item-url">'
            '<a href="https://example.com/?a&amp;b" class="link">https://example.com/?a&amp;b</a>'
            '</div>'
            '</li>'
            '</ul></section>',
        )


if __name__ == '__main__':
    unittest.main()
