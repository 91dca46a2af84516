"""
# NMD: test_dossiers.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `dossiers.py`.
"""

import unittest

from nmd.codex import Codex
from nmd.configurations import CompilationConfiguration, CompilationContext
from nmd.dossiers import Chapter, ChapterTag, Document, Dossier, Heading, assign_nuids, fold_blocks
from nmd.exceptions import InvalidTagException
from nmd.loaders import LoadBlock
from nmd.paragraphs import CommonParagraph, ExtendedBlockQuoteParagraph


class TestDossiers(unittest.TestCase):
    def test_chapter_tag_of(self):
        self.assertEqual(ChapterTag.of('Author', 'Me'), ChapterTag('author', 'Me'))
        self.assertEqual(ChapterTag.of('class', 'wide'), ChapterTag('styleclass', 'wide'))
        self.assertEqual(ChapterTag.of('intent').value, None)
        self.assertRaises(InvalidTagException, ChapterTag.of, 'colour', 'red')

    def test_heading_compile(self):
        heading = Heading(2, 'Getting <started>')
        compiled_text = heading.compile(Codex.of_html(), CompilationConfiguration(), CompilationContext(document_name='guide'))

        self.assertEqual(
            compiled_text.content(),
            '<h2 class="heading-2" id="guide-getting--started-">Getting &lt;started&gt;</h2>',
        )
        self.assertIs(heading.compiled_text, compiled_text)
        self.assertIsNone(heading.build_anchor(None))

    def test_chapter_id_tag(self):
        chapter = Chapter(Heading(1, 'Introduction'), [ChapterTag('id', 'intro'), ChapterTag('styleclass', 'wide')])

        self.assertEqual(chapter.heading.build_anchor('doc'), 'doc-intro')
        self.assertEqual(chapter.tag_values('styleclass'), ['wide'])
        self.assertEqual(chapter.tag_values('author'), [])

    def test_fold_blocks(self):
        preamble = CommonParagraph('Before.', 'common-paragraph')
        first = CommonParagraph('First.', 'common-paragraph')
        second = CommonParagraph('Second.', 'common-paragraph')
        blocks = [
            LoadBlock(0, 7, preamble),
            LoadBlock(9, 14, Heading(1, 'One')),
            LoadBlock(15, 27, ChapterTag('author', 'Me')),
            LoadBlock(29, 35, first),
            LoadBlock(37, 44, Heading(2, 'Two')),
            LoadBlock(46, 53, second),
        ]

        document = fold_blocks('doc', blocks)

        self.assertEqual(document.preamble, [preamble])
        self.assertEqual([chapter.heading.title for chapter in document.chapters], ['One', 'Two'])
        self.assertEqual(document.chapters[0].tags, [ChapterTag('author', 'Me')])
        self.assertEqual(document.chapters[0].paragraphs, [first])
        self.assertEqual(document.chapters[1].paragraphs, [second])

    def test_fold_blocks_orphan_tag(self):
        with self.assertLogs('nmd.dossiers', level='WARNING'):
            document = fold_blocks('doc', [LoadBlock(0, 10, ChapterTag('author', 'Me'))])

        self.assertEqual(document.chapters, [])

    def test_assign_nuids(self):
        inner = CommonParagraph('Same.', 'common-paragraph')
        quote = ExtendedBlockQuoteParagraph('> Same.', 'extended-block-quote', 'quote', [inner])
        first = CommonParagraph('Same.', 'common-paragraph')
        document = Document('doc', preamble=[first, quote], chapters=[Chapter(Heading(1, 'Same.'))])

        assign_nuids(document)

        self.assertEqual(document.paragraphs(), [first, quote, inner])
        self.assertTrue(first.nuid.endswith('-0'))
        self.assertTrue(inner.nuid.endswith('-1'))
        self.assertTrue(document.chapters[0].heading.nuid.endswith('-2'))
        self.assertEqual(first.nuid[:-2], inner.nuid[:-2])
        self.assertNotEqual(quote.nuid[:-2], first.nuid[:-2])
        self.assertTrue(first.nuid.startswith('doc-'))

    def test_dossier_lookup_document(self):
        intro = Document('intro')
        dossier = Dossier('Handbook', [intro, Document('usage')])

        self.assertIs(dossier.lookup_document('intro'), intro)
        self.assertIsNone(dossier.lookup_document('missing'))
        self.assertIsNone(dossier.table_of_contents)


if __name__ == '__main__':
    unittest.main()
