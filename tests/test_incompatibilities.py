"""
# NMD: test_incompatibilities.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `incompatibilities.py`.
"""

import unittest

from nmd.incompatibilities import IncompatibilitySet


class TestIncompatibilities(unittest.TestCase):
    def test_contains(self):
        self.assertTrue(IncompatibilitySet.everything().contains('bold-star-version'))
        self.assertFalse(IncompatibilitySet.nothing().contains('bold-star-version'))
        self.assertTrue(IncompatibilitySet.listed(['bold-star-version']).contains('bold-star-version'))
        self.assertFalse(IncompatibilitySet.listed(['bold-star-version']).contains('italic-star-version'))
        self.assertIn('link', IncompatibilitySet.listed(['link']))
        self.assertNotIn('link', IncompatibilitySet.listed([]))

    def test_combine(self):
        everything = IncompatibilitySet.everything()
        nothing = IncompatibilitySet.nothing()
        bold = IncompatibilitySet.listed(['bold-star-version'])
        italic = IncompatibilitySet.listed(['italic-star-version'])

        self.assertEqual(everything.combine(bold), everything)
        self.assertEqual(bold.combine(everything), everything)
        self.assertEqual(nothing.combine(bold), bold)
        self.assertEqual(bold.combine(nothing), bold)
        self.assertEqual(nothing + nothing, nothing)
        self.assertEqual(bold + italic, IncompatibilitySet.listed(['italic-star-version', 'bold-star-version']))
        self.assertEqual((bold + bold).identifiers, ('bold-star-version',))

    def test_equality(self):
        self.assertEqual(IncompatibilitySet.listed(['a', 'b']), IncompatibilitySet.listed(['b', 'a']))
        self.assertNotEqual(IncompatibilitySet.listed([]), IncompatibilitySet.nothing())
        self.assertEqual(
            hash(IncompatibilitySet.listed(['a', 'b'])),
            hash(IncompatibilitySet.listed(['b', 'a'])),
        )

    def test_invalid_state(self):
        self.assertRaises(ValueError, IncompatibilitySet, 'SOMETHING')

    def test_repr(self):
        self.assertEqual(repr(IncompatibilitySet.everything()), 'IncompatibilitySet.everything()')
        self.assertEqual(repr(IncompatibilitySet.nothing()), 'IncompatibilitySet.nothing()')
        self.assertEqual(repr(IncompatibilitySet.listed(['a'])), "IncompatibilitySet.listed(['a'])")


if __name__ == '__main__':
    unittest.main()
