"""
# NMD: test_core.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `core.py`.
"""

import tempfile
import unittest
from pathlib import Path

from nmd.configurations import CompilationConfiguration
from nmd.core import assemble_page, dossier_to_html, nmd_to_html

DOSSIER_CONFIGURATION = '''\
name: Handbook
documents:
  - intro.nmd
  - usage.nmd
table_of_contents:
  title: Contents
  maximum_heading_level: 2
bibliography:
  records:
    knuth:
      title: Literate Programming
      authors: [Donald E. Knuth]
      year: 1984
references:
  project: NMD
'''

INTRO = '''\
# Introduction

Welcome to &project&, see ^[knuth].

### Deep

Hidden from the contents.
'''

USAGE = '''\
# Usage

Run it.
'''


class TestCore(unittest.TestCase):
    def test_assemble_page(self):
        self.assertEqual(
            assemble_page('A <B>', ['<p>x</p>', '<p>y</p>']),
            '''\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>A &lt;B&gt;</title>
</head>
<body>
<p>x</p>
<p>y</p>
</body>
</html>
''',
        )

    def test_nmd_to_html(self):
        self.assertEqual(
            nmd_to_html('', 'empty'),
            '''\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>empty</title>
</head>
<body>
<section class="document" id="empty"></section>
</body>
</html>
''',
        )

        html = nmd_to_html('# Title\n\nSome **bold** text.', 'doc')

        self.assertIn('<title>doc</title>', html)
        self.assertIn('<section class="chapter"><h1 class="heading-1" id="doc-title" data-nuid="doc-', html)
        self.assertIn('>Some <strong class="bold">bold</strong> text.</p>', html)

    def test_dossier_to_html(self):
        with tempfile.TemporaryDirectory() as directory_name:
            directory = Path(directory_name)
            (directory / 'nmd.yml').write_text(DOSSIER_CONFIGURATION, encoding='utf-8')
            (directory / 'intro.nmd').write_text(INTRO, encoding='utf-8')
            (directory / 'usage.nmd').write_text(USAGE, encoding='utf-8')

            name, html = dossier_to_html(directory)

            self.assertEqual(name, 'Handbook')
            self.assertIn('<title>Handbook</title>', html)
            self.assertIn(
                '<section class="toc"><div class="toc-title">Contents</div><ul class="toc-body">'
                '<li class="toc-item"><span class="toc-item-bullet"></span><span class="toc-item-content">'
                '<a href="#intro-introduction" class="link">Introduction</a></span></li>'
                '<li class="toc-item"><span class="toc-item-bullet"></span><span class="toc-item-content">'
                '<a href="#usage-usage" class="link">Usage</a></span></li>'
                '</ul></section>',
                html,
            )
            self.assertIn('>Welcome to NMD, see <a class="cite" href="#bibliography-knuth">1</a>.</p>', html)
            self.assertIn('<li class="bibliography-item" id="bibliography-knuth">', html)
            self.assertLess(html.index('class="toc"'), html.index('id="intro"'))
            self.assertLess(html.index('id="intro"'), html.index('id="usage"'))
            self.assertLess(html.index('id="usage"'), html.index('class="bibliography"'))

    def test_dossier_to_html_fast_draft(self):
        with tempfile.TemporaryDirectory() as directory_name:
            directory = Path(directory_name)
            (directory / 'nmd.yml').write_text(DOSSIER_CONFIGURATION, encoding='utf-8')
            (directory / 'intro.nmd').write_text(INTRO, encoding='utf-8')
            (directory / 'usage.nmd').write_text(USAGE, encoding='utf-8')

            _, html = dossier_to_html(
                directory,
                compilation_configuration=CompilationConfiguration(fast_draft=True, compile_only_documents=('usage',)),
            )

            self.assertNotIn('Welcome', html)
            self.assertIn('Run it.', html)
            self.assertIn('#intro-introduction', html)


if __name__ == '__main__':
    unittest.main()
