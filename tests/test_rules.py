"""
# NMD: test_rules.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `rules.py`.
"""

import unittest

from nmd.compilables import CompilableText, CompilableTextPart
from nmd.configurations import CompilationConfiguration, CompilationContext
from nmd.exceptions import (
    InvalidGreekLetterException,
    MissingDocumentNameException,
    UnmatchedRuleException,
    UnresolvedCitationException,
    UnresolvedReferenceException,
)
from nmd.modifiers import BOLD_STAR_VERSION, CITE, GREEK_LETTER, LINK, REFERENCE, Modifier
from nmd.references import Bibliography, BibliographyRecord
from nmd.rules import (
    CaptureReplacerPart,
    CiteRule,
    ClosureReplacerPart,
    FixedReplacerPart,
    GreekLettersRule,
    ReferenceRule,
    ReplacementRule,
    decompose_greek_letters,
)

CONTEXT = CompilationContext(document_name='doc')


def apply(rule, content: str, configuration=None, context=CONTEXT) -> str:
    if configuration is None:
        configuration = CompilationConfiguration()

    compilable_text = CompilableText.of_compilable(content)

    return compilable_text.apply_rule(rule.modifier.identifier, rule, configuration, context).content()


class TestRules(unittest.TestCase):
    def test_decompose_greek_letters(self):
        self.assertEqual(decompose_greek_letters('a'), ('\\alpha', []))
        self.assertEqual(decompose_greek_letters('ab'), ('\\alpha\\beta', []))
        self.assertEqual(decompose_greek_letters('th'), ('\\theta', []))
        self.assertEqual(decompose_greek_letters('Phi'), ('\\Phi', []))
        self.assertEqual(decompose_greek_letters('aq'), ('\\alphaq', ['q']))

    def test_greek_letters_rule(self):
        rule = GreekLettersRule(GREEK_LETTER)

        self.assertEqual(apply(rule, 'angle %a%'), 'angle <span class="greek">$\\alpha$</span>')

        with self.assertLogs('nmd.rules', level='WARNING'):
            self.assertEqual(apply(rule, '%aq%'), '<span class="greek">$\\alphaq$</span>')

        strict_configuration = CompilationConfiguration(strict_greek_letters_check=True)
        self.assertRaises(InvalidGreekLetterException, apply, rule, '%aq%', strict_configuration)

    def test_reference_rule(self):
        rule = ReferenceRule(REFERENCE)
        configuration = CompilationConfiguration(references={'name': 'NMD'})

        self.assertEqual(apply(rule, 'Welcome to &name&!', configuration), 'Welcome to NMD!')

        with self.assertLogs('nmd.rules', level='WARNING'):
            self.assertEqual(apply(rule, '&missing&', configuration), '&missing&')

        self.assertRaises(
            UnresolvedReferenceException,
            apply,
            rule,
            '&missing&',
            configuration.with_changes(strict_reference_check=True),
        )

    def test_cite_rule(self):
        rule = CiteRule(CITE)
        bibliography = Bibliography(
            'Bibliography',
            {
                'knuth': BibliographyRecord('Literate Programming'),
                'abc': BibliographyRecord('An ABC'),
            },
        )
        configuration = CompilationConfiguration(bibliography=bibliography)

        self.assertEqual(apply(rule, 'see ^[knuth]', configuration), 'see <a class="cite" href="#bibliography-knuth">2</a>')
        self.assertEqual(apply(rule, '^[abc]', configuration), '<a class="cite" href="#bibliography-abc">1</a>')

        with self.assertLogs('nmd.rules', level='WARNING'):
            self.assertEqual(apply(rule, '^[nobody]', configuration), '^[nobody]')

        self.assertRaises(
            UnresolvedCitationException,
            apply,
            rule,
            '^[nobody]',
            configuration.with_changes(strict_cite_check=True),
        )

    def test_fixed_replacer_part_references(self):
        rule = ReplacementRule(
            LINK,
            [
                FixedReplacerPart(r'<a href="\g<2>" class="link">', references_at=(2,)),
                CaptureReplacerPart(1),
                FixedReplacerPart('</a>'),
            ],
        )

        self.assertEqual(apply(rule, '[home](#intro)'), '<a href="#doc-intro" class="link">home</a>')
        self.assertEqual(apply(rule, '[other](guide#Setup)'), '<a href="#guide-setup" class="link">other</a>')
        self.assertEqual(
            apply(rule, '[site](https://example.com/?a=1&b=2)'),
            '<a href="https://example.com/?a=1&amp;b=2" class="link">site</a>',
        )
        self.assertRaises(MissingDocumentNameException, apply, rule, '[home](#intro)', None, CompilationContext())

    def test_fixed_replacer_part_nuid(self):
        rule = ReplacementRule(Modifier('test', r'x'), [FixedReplacerPart(r'<hr\g<nuid>>')])
        compilable_text = CompilableText.of_compilable('x', nuid='doc-0')

        self.assertEqual(
            compilable_text.apply_rule('test', rule, CompilationConfiguration(), CONTEXT).content(),
            '<hr data-nuid="doc-0">',
        )
        self.assertEqual(apply(rule, 'x'), '<hr>')

    def test_capture_replacer_part(self):
        rule = ReplacementRule(
            Modifier('test', r'<(.*?)>'),
            [FixedReplacerPart('['), CaptureReplacerPart(1, escape=True), FixedReplacerPart(']')],
        )
        compiled_text = CompilableText.of_compilable('<a<b>').apply_rule(
            'test', rule, CompilationConfiguration(), CONTEXT
        )

        self.assertEqual(compiled_text.content(), '[a&lt;b]')

    def test_closure_replacer_part(self):
        def shout(compilable, match, configuration, context):
            return [CompilableTextPart.fixed(match.group(1).upper())]

        rule = ReplacementRule(Modifier('test', r'!(\w+)'), [ClosureReplacerPart(shout)])

        self.assertEqual(apply(rule, 'say !hello'), 'say HELLO')

    def test_unmatched_rule(self):
        rule = ReplacementRule(BOLD_STAR_VERSION, [CaptureReplacerPart(1)])

        self.assertRaises(
            UnmatchedRuleException,
            rule.compile,
            CompilableText.of_compilable('plain'),
            CompilationConfiguration(),
            CONTEXT,
        )


if __name__ == '__main__':
    unittest.main()
