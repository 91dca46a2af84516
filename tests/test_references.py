"""
# NMD: test_references.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `references.py`.
"""

import unittest

from nmd.exceptions import MissingDocumentNameException
from nmd.references import Bibliography, BibliographyRecord, ResourceReference


class TestReferences(unittest.TestCase):
    def test_resource_reference_of(self):
        self.assertEqual(ResourceReference.of('#Intro', 'doc').build(), '#doc-intro')
        self.assertEqual(ResourceReference.of('#Intro', 'My Doc.nmd').build(), '#my-doc-intro')
        self.assertEqual(ResourceReference.of('guide#Setup', 'doc').build(), '#guide-setup')
        self.assertEqual(ResourceReference.of('guide.nmd#setup').build(), '#guide-setup')
        self.assertEqual(ResourceReference.of('https://x.org/a#b', 'doc').build(), 'https://x.org/a#b')
        self.assertEqual(ResourceReference.of('file.html#top', 'doc').build(), 'file.html#top')
        self.assertEqual(ResourceReference.of('./image.png', 'doc').build(), './image.png')
        self.assertEqual(ResourceReference.of('  mailto:someone@example.com ').build(), 'mailto:someone@example.com')

        self.assertTrue(ResourceReference.of('#a', 'doc').is_internal)
        self.assertFalse(ResourceReference.of('/a', 'doc').is_internal)

    def test_resource_reference_without_document_name(self):
        self.assertRaises(MissingDocumentNameException, ResourceReference.of, '#intro')
        self.assertRaises(MissingDocumentNameException, ResourceReference.of_internal_without_sharp, 'intro', None)

    def test_build_without_internal_sharp(self):
        self.assertEqual(ResourceReference.of_internal_without_sharp('Key', 'doc').build_without_internal_sharp(), 'doc-key')
        self.assertEqual(ResourceReference.of('https://x.org').build_without_internal_sharp(), 'https://x.org')

    def test_equality(self):
        self.assertEqual(ResourceReference.of('#Intro', 'doc'), ResourceReference.of('doc#intro'))
        self.assertNotEqual(ResourceReference.of('#intro', 'doc'), ResourceReference.of('#intro', 'other'))

    def test_bibliography(self):
        bibliography = Bibliography(
            'References',
            {
                'turing': BibliographyRecord('On Computable Numbers', ['Alan Turing'], 1936),
                'knuth': BibliographyRecord('Literate Programming', ['Donald E. Knuth'], 1984),
            },
        )

        self.assertEqual(list(bibliography.record_from_key), ['knuth', 'turing'])
        self.assertEqual(bibliography.number_of('knuth'), 1)
        self.assertEqual(bibliography.number_of('turing'), 2)
        self.assertIsNone(bibliography.number_of('nobody'))
        self.assertEqual(bibliography.reference_of('turing').build(), '#bibliography-turing')
        self.assertIsNone(bibliography.reference_of('nobody'))
        self.assertEqual(bibliography.get('knuth').year, 1984)


if __name__ == '__main__':
    unittest.main()
