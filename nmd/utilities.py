"""
# NMD: utilities.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Common utility functions.
"""

import hashlib
import re
from typing import Optional

NUID_HASH_DIGEST_SIZE = 4


def escape_attribute_value_html(value: str) -> str:
    """
    Escape an attribute value that will be delimited by double quotes.

    Already-escaped entities are left alone, so that escaping is idempotent:
    - Entity names are any run of up to 31 letters.
    - Decimal code points are any run of up to 7 digits.
    - Hexadecimal code points are any run of up to 6 digits.
    """
    value = re.sub(
        pattern='''
            [&]
            (?!
                (?:
                    [a-zA-Z]{1,31}
                        |
                    [#] (?: [0-9]{1,7} | [xX] [0-9a-fA-F]{1,6} )
                )
                [;]
            )
        ''',
        repl='&amp;',
        string=value,
        flags=re.VERBOSE,
    )
    value = escape_html(value)
    value = re.sub(pattern='"', repl='&quot;', string=value)

    return value


def escape_html(string: str) -> str:
    """
    Escape the angle brackets of text content.

    Ampersands are kept, so that entities written in the source (`&rarr;`) survive.
    """
    string = re.sub(pattern='<', repl='&lt;', string=string)
    string = re.sub(pattern='>', repl='&gt;', string=string)

    return string


def none_to_empty_string(string: Optional[str]) -> str:
    if string is None:
        return ''

    return string


def normalise_identifier(identifier: str) -> str:
    """
    Lower-case an identifier and replace every character outside `[a-z0-9_-]` by a hyphen.
    """
    return re.sub(pattern=r'[^a-z0-9_-]', repl='-', string=identifier.lower())


def compute_content_hash(content: str) -> str:
    return hashlib.blake2b(content.encode('utf-8'), digest_size=NUID_HASH_DIGEST_SIZE).hexdigest()


def build_nuid(document_name: str, content: str, occurrence: int) -> str:
    """
    Build a NUID, i.e. a node unique identifier, of the form `«document»-«hash»-«occurrence»`.
    """
    return f'{normalise_identifier(document_name)}-{compute_content_hash(content)}-{occurrence}'


def html_nuid_attribute(nuid: Optional[str]) -> str:
    if nuid is None:
        return ''

    return f' data-nuid="{escape_attribute_value_html(nuid)}"'


def fold_newlines(string: str) -> str:
    """
    Fold line breaks (and the blanks around them) into single spaces.
    """
    return re.sub(pattern=r'[ \t]*\r?\n[ \t]*', repl=' ', string=string)


def split_styles_and_classes(raw_style: str) -> tuple[list[str], list[str]]:
    """
    Split an embedded style into CSS declarations and class names.

    Items are separated by semicolons.
    An item of the form `.«name»` (or a bare word without a colon) is a class,
    anything else is kept as a CSS declaration.
    """
    styles = []
    classes = []
    for item in raw_style.split(';'):
        item = item.strip()
        if len(item) == 0:
            continue

        if ':' in item:
            styles.append(item)
        else:
            for class_name in item.split():
                classes.append(class_name.lstrip('.'))

    return styles, classes


def build_class_and_style_attributes(base_classes: str, raw_style: Optional[str]) -> str:
    """
    Build `class` and `style` attributes, merging the classes of an embedded style into `base_classes`.
    """
    styles, classes = split_styles_and_classes(none_to_empty_string(raw_style))

    all_classes = [class_name for class_name in [base_classes, *classes] if len(class_name) > 0]

    attributes = ''
    if len(all_classes) > 0:
        attributes += f' class="{escape_attribute_value_html(" ".join(all_classes))}"'
    if len(styles) > 0:
        attributes += f' style="{escape_attribute_value_html("; ".join(styles))};"'

    return attributes
