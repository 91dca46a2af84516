"""
# NMD: constants.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Constants.
"""

GENERIC_ERROR_EXIT_CODE = 1
COMMAND_LINE_ERROR_EXIT_CODE = 2

NMD_FILE_EXTENSION = '.nmd'
HTML_FILE_EXTENSION = '.html'
DOSSIER_CONFIGURATION_FILE_NAMES = ('nmd.yml', 'nmd.yaml')

MAX_HEADING_LEVEL = 6
DEFAULT_MAX_RECURSION_DEPTH = 32

SPACE_TAB_EQUIVALENCE = '    '

BIBLIOGRAPHY_FICTITIOUS_DOCUMENT = 'bibliography'
DEFAULT_TABLE_OF_CONTENTS_TITLE = 'Table of contents'
DEFAULT_BIBLIOGRAPHY_TITLE = 'Bibliography'

LIST_ITEM_INDENTATION = '<span class="list-item-indentation"></span>'
TOC_INDENTATION = '<span class="toc-item-indentation"></span>'
CHECKBOX_HTML = '<div class="checkbox checkbox-unchecked"></div>'
CHECKBOX_CHECKED_HTML = '<div class="checkbox checkbox-checked"></div>'
