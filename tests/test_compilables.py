"""
# NMD: test_compilables.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `compilables.py`.
"""

import random
import re
import unittest

from nmd.codex import Codex
from nmd.compilables import (
    BOUNDARY_BOTH,
    BOUNDARY_LEFT,
    BOUNDARY_NONE,
    BOUNDARY_RIGHT,
    CompilableText,
    CompilableTextPart,
)
from nmd.configurations import CompilationConfiguration, CompilationContext
from nmd.exceptions import ContentOverflowException
from nmd.incompatibilities import IncompatibilitySet
from nmd.modifiers import BOLD_STAR_VERSION, Modifier
from nmd.rules import FixedReplacerPart, PassThroughReplacerPart, ReplacementRule

CODEX = Codex.of_html()
CONFIGURATION = CompilationConfiguration()
CONTEXT = CompilationContext(document_name='doc')


def compile_inline(content: str, configuration: CompilationConfiguration = CONFIGURATION) -> str:
    return CompilableText.of_compilable(content).compile(CODEX, configuration, CONTEXT).content()


class TestCompilables(unittest.TestCase):
    def setUp(self):
        self.fixture = CompilableText(
            [
                CompilableTextPart.compilable('c1'),
                CompilableTextPart.fixed('f1'),
                CompilableTextPart.compilable('c2'),
                CompilableTextPart.fixed('f2'),
                CompilableTextPart.compilable('c3'),
            ]
        )

    def test_compilable_content(self):
        self.assertEqual(self.fixture.content(), 'c1f1c2f2c3')
        self.assertEqual(self.fixture.compilable_content(), 'c1c2c3')
        self.assertEqual(self.fixture.ends(), [2, 4, 6])

    def test_slice(self):
        def contents(boundary):
            return [part.content for part in self.fixture.slice(1, 4, boundary)]

        self.assertEqual(contents(BOUNDARY_BOTH), ['1', 'f1', 'c2', 'f2'])
        self.assertEqual(contents(BOUNDARY_NONE), ['c2'])
        self.assertEqual(contents(BOUNDARY_LEFT), ['1', 'f1', 'c2'])
        self.assertEqual(contents(BOUNDARY_RIGHT), ['c2', 'f2'])

        self.assertEqual([part.content for part in self.fixture.slice(0, 6)], ['c1', 'f1', 'c2', 'f2', 'c3'])
        self.assertEqual(self.fixture.slice(3, 3, BOUNDARY_NONE), [])

    def test_slice_overflow(self):
        self.assertRaises(ContentOverflowException, self.fixture.slice, 4, 1)
        self.assertRaises(ContentOverflowException, self.fixture.slice, 0, 7)
        self.assertRaises(ValueError, self.fixture.slice, 0, 1, 'sideways')

    def test_slice_scope(self):
        text = CompilableText(
            [
                CompilableTextPart.compilable('ab'),
                CompilableTextPart.compilable('XY', IncompatibilitySet.listed(['test'])),
                CompilableTextPart.compilable('cd'),
            ],
            scope='test',
        )

        self.assertEqual(text.compilable_content(), 'abcd')
        self.assertEqual([part.content for part in text.slice(1, 3)], ['b', 'XY', 'c'])

    def test_apply_rule_skips_incompatible_parts(self):
        text = CompilableText(
            [
                CompilableTextPart.fixed('<p>'),
                CompilableTextPart.compilable('**x**', IncompatibilitySet.listed([BOLD_STAR_VERSION.identifier])),
                CompilableTextPart.compilable('**y**', IncompatibilitySet.everything()),
                CompilableTextPart.fixed('</p>'),
            ]
        )
        rule = CODEX.lookup_inline(BOLD_STAR_VERSION.identifier).rule

        self.assertIs(text.apply_rule(BOLD_STAR_VERSION.identifier, rule, CONFIGURATION, CONTEXT), text)

    def test_apply_rule_across_parts(self):
        text = CompilableText(
            [
                CompilableTextPart.compilable('**bold '),
                CompilableTextPart.fixed('<x>'),
                CompilableTextPart.compilable('text**'),
            ]
        )
        rule = CODEX.lookup_inline(BOLD_STAR_VERSION.identifier).rule
        compiled_text = text.apply_rule(BOLD_STAR_VERSION.identifier, rule, CONFIGURATION, CONTEXT)

        self.assertEqual(compiled_text.content(), '<strong class="bold">bold <x>text</strong>')

    def test_apply_rule_conserves_content(self):
        rule = ReplacementRule(
            Modifier('test', r'a+b'),
            [FixedReplacerPart('['), PassThroughReplacerPart(), FixedReplacerPart(']')],
        )

        for seed in range(200):
            generator = random.Random(seed)
            parts = []
            for _ in range(generator.randint(1, 8)):
                if generator.random() < 0.6:
                    content = ''.join(generator.choice('ab') for _ in range(generator.randint(1, 4)))
                    parts.append(CompilableTextPart.compilable(content))
                else:
                    content = ''.join(generator.choice('XY') for _ in range(generator.randint(1, 3)))
                    parts.append(CompilableTextPart.fixed(content))
            text = CompilableText(parts)

            compiled_text = text.apply_rule('test', rule, CONFIGURATION, CONTEXT)
            fixed_contents = [part.content for part in compiled_text.parts if part.is_fixed]

            self.assertEqual(compiled_text.compilable_content(), text.compilable_content(), msg=f'seed {seed}')
            self.assertEqual(
                [content for content in fixed_contents if content not in ('[', ']')],
                [part.content for part in text.parts if part.is_fixed],
                msg=f'seed {seed}',
            )
            self.assertEqual(
                fixed_contents.count('['),
                len(re.findall(r'a+b', text.compilable_content())),
                msg=f'seed {seed}',
            )

    def test_compile(self):
        self.assertEqual(compile_inline('**bold text**'), '<strong class="bold">bold text</strong>')
        self.assertEqual(compile_inline('`a **b** c`'), '<code class="language-markup inline-code">a **b** c</code>')
        self.assertEqual(
            compile_inline('*nested **bold text***'),
            '<em class="italic">nested <strong class="bold">bold text</strong></em>',
        )
        self.assertEqual(compile_inline(r'\*not italic\*'), '*not italic*')

    def test_compile_excluded_modifiers(self):
        everything_excluded = CONFIGURATION.with_changes(excluded_modifiers=IncompatibilitySet.everything())
        italic_excluded = CONFIGURATION.with_changes(excluded_modifiers=IncompatibilitySet.listed(['italic-star-version']))

        self.assertEqual(compile_inline('**a** *b*', everything_excluded), '**a** *b*')
        self.assertEqual(compile_inline('**a** *b*', italic_excluded), '<strong class="bold">a</strong> *b*')


if __name__ == '__main__':
    unittest.main()
