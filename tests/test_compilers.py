"""
# NMD: test_compilers.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `compilers.py`.
"""

import unittest

from nmd.codex import Codex
from nmd.compilers import compile_chapter, compile_document, fan_out, select_documents
from nmd.configurations import CompilationConfiguration, CompilationContext
from nmd.dossiers import Chapter, ChapterTag, Document, Dossier, Heading
from nmd.exceptions import ErrorBucketException, UnresolvedReferenceException
from nmd.loaders import load_document_from_str

CODEX = Codex.of_html()

DOCUMENT = '''\
Preamble.

# One

First *paragraph*.

- a
- b

# Two

> Quoted **text**.

Last paragraph.
'''


class TestCompilers(unittest.TestCase):
    def test_fan_out(self):
        for parallelization in (False, True):
            configuration = CompilationConfiguration(parallelization=parallelization)

            self.assertEqual(fan_out(lambda unit: unit * 2, [1, 2, 3], configuration), [2, 4, 6])
            self.assertEqual(fan_out(lambda unit: unit, [], configuration), [])

    def test_fan_out_errors(self):
        def fail_on_odd(unit):
            if unit % 2 == 1:
                raise ValueError(f'odd {unit}')
            return unit

        for parallelization in (False, True):
            configuration = CompilationConfiguration(parallelization=parallelization)

            with self.assertRaises(ValueError) as context_manager:
                fan_out(fail_on_odd, [2, 1, 3], configuration)
            self.assertEqual(str(context_manager.exception), 'odd 1')

            with self.assertRaises(ErrorBucketException) as context_manager:
                fan_out(fail_on_odd, [2, 1, 3], configuration.with_changes(collect_errors=True))
            self.assertEqual([str(error) for error in context_manager.exception.errors], ['odd 1', 'odd 3'])
            self.assertEqual(str(context_manager.exception), 'odd 1; odd 3')

    def test_compile_chapter(self):
        chapter = Chapter(Heading(1, 'A'), [ChapterTag('style', 'color: red'), ChapterTag('styleclass', 'wide note')])
        compiled_text = compile_chapter(chapter, CODEX, CompilationConfiguration(), CompilationContext(document_name='doc'))

        self.assertEqual(
            compiled_text.content(),
            '<section class="chapter wide note" style="color: red;"><h1 class="heading-1" id="doc-a">A</h1></section>',
        )

    def test_compile_document(self):
        document = load_document_from_str('My Doc', DOCUMENT, CODEX)
        compiled_text = compile_document(document, CODEX, CompilationConfiguration())
        content = compiled_text.content()

        self.assertIs(document.compiled_text, compiled_text)
        self.assertTrue(content.startswith('<section class="document" id="my-doc"><p class="paragraph" data-nuid="my-doc-'))
        self.assertTrue(content.endswith('</section></section>'))
        self.assertIn('<em class="italic">paragraph</em>', content)
        self.assertIn('<strong class="bold">text</strong>', content)
        self.assertIn('id="my-doc-two"', content)
        self.assertLess(content.index('Preamble.'), content.index('First'))
        self.assertLess(content.index('First'), content.index('Quoted'))
        self.assertEqual(content.count('<section class="chapter">'), 2)

        for paragraph in document.paragraphs():
            self.assertIsNotNone(paragraph.nuid)
            self.assertIsNotNone(paragraph.compiled_text)

    def test_compile_document_in_parallel(self):
        sequential_content = compile_document(
            load_document_from_str('doc', DOCUMENT, CODEX), CODEX, CompilationConfiguration()
        ).content()
        parallel_content = compile_document(
            load_document_from_str('doc', DOCUMENT, CODEX), CODEX, CompilationConfiguration(parallelization=True)
        ).content()

        self.assertEqual(parallel_content, sequential_content)

    def test_compile_document_errors(self):
        document = load_document_from_str('doc', '&one&\n\n&two&', CODEX)
        configuration = CompilationConfiguration(strict_reference_check=True)

        with self.assertRaises(UnresolvedReferenceException) as context_manager:
            compile_document(document, CODEX, configuration)
        self.assertEqual(context_manager.exception.key, 'one')

        for parallelization in (False, True):
            with self.assertRaises(ErrorBucketException) as context_manager:
                compile_document(
                    document,
                    CODEX,
                    configuration.with_changes(collect_errors=True, parallelization=parallelization),
                )
            self.assertEqual([error.key for error in context_manager.exception.errors], ['one', 'two'])

    def test_select_documents(self):
        documents = [Document('intro'), Document('usage'), Document('faq')]
        dossier = Dossier('Handbook', documents)

        self.assertEqual(select_documents(dossier, CompilationConfiguration()), documents)
        self.assertEqual(
            select_documents(dossier, CompilationConfiguration(compile_only_documents=('usage',))),
            documents,
        )
        self.assertEqual(
            select_documents(dossier, CompilationConfiguration(fast_draft=True, compile_only_documents=('faq', 'usage'))),
            [documents[1], documents[2]],
        )


if __name__ == '__main__':
    unittest.main()
