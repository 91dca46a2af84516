"""
# NMD: references.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Resource references (anchors and links) and bibliography records.
"""

import re
from typing import Optional

from nmd.constants import BIBLIOGRAPHY_FICTITIOUS_DOCUMENT
from nmd.exceptions import MissingDocumentNameException
from nmd.utilities import normalise_identifier

URL = 'URL'
INTERNAL = 'INTERNAL'

URL_PATTERN = r'(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//|/|\./|\.\./)'


class ResourceReference:
    """
    A reference to a resource.

    Raw references take one of the forms
    - `#«id»`, an anchor in the current document, built as `#«document»-«id»`
    - `«document»#«id»`, an anchor in another document of the dossier, built as `#«document»-«id»`
    - anything else (URLs, paths), kept verbatim
    where «document» and «id» are normalised (lower case, `[a-z0-9_-]` only).
    """
    _kind: str
    _value: str
    _document_name: Optional[str]

    def __init__(self, kind: str, value: str, document_name: Optional[str] = None):
        self._kind = kind
        self._value = value
        self._document_name = document_name

    @staticmethod
    def of(raw_reference: str, document_name: Optional[str] = None) -> 'ResourceReference':
        raw_reference = raw_reference.strip()

        if re.match(URL_PATTERN, raw_reference):
            return ResourceReference(URL, raw_reference)

        if raw_reference.startswith('#'):
            return ResourceReference.of_internal_without_sharp(raw_reference[1:], document_name)

        if '#' in raw_reference:
            referenced_document_name, identifier = raw_reference.split('#', 1)
            if re.fullmatch(r'[\w-]+(?:\.nmd)?', referenced_document_name):
                return ResourceReference.of_internal_without_sharp(identifier, referenced_document_name)

        return ResourceReference(URL, raw_reference)

    @staticmethod
    def of_internal_without_sharp(identifier: str, document_name: Optional[str]) -> 'ResourceReference':
        if document_name is None:
            raise MissingDocumentNameException(f'document name needed to build a reference to `#{identifier}`')

        return ResourceReference(INTERNAL, identifier, document_name)

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def value(self) -> str:
        return self._value

    @property
    def document_name(self) -> Optional[str]:
        return self._document_name

    @property
    def is_internal(self) -> bool:
        return self._kind == INTERNAL

    def build(self) -> str:
        if self._kind == URL:
            return self._value

        return f'#{self.build_without_internal_sharp()}'

    def build_without_internal_sharp(self) -> str:
        if self._kind == URL:
            return self._value

        document_name = re.sub(pattern=r'\.nmd\Z', repl='', string=self._document_name)

        return f'{normalise_identifier(document_name)}-{normalise_identifier(self._value)}'

    def __eq__(self, other) -> bool:
        if not isinstance(other, ResourceReference):
            return NotImplemented

        return self.build() == other.build()

    def __hash__(self) -> int:
        return hash(self.build())

    def __repr__(self) -> str:
        return f'ResourceReference({self.build()!r})'


class BibliographyRecord:
    """
    A bibliography record, as listed in the dossier configuration.
    """
    _title: str
    _authors: Optional[list[str]]
    _year: Optional[int]
    _url: Optional[str]
    _description: Optional[str]

    def __init__(
        self,
        title: str,
        authors: Optional[list[str]] = None,
        year: Optional[int] = None,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ):
        self._title = title
        self._authors = authors
        self._year = year
        self._url = url
        self._description = description

    @property
    def title(self) -> str:
        return self._title

    @property
    def authors(self) -> Optional[list[str]]:
        return self._authors

    @property
    def year(self) -> Optional[int]:
        return self._year

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def description(self) -> Optional[str]:
        return self._description


class Bibliography:
    """
    Object storing bibliography records, ordered by key.

    Citation numbers are 1-based positions in key order.
    """
    _title: str
    _record_from_key: dict[str, 'BibliographyRecord']

    def __init__(self, title: str, record_from_key: dict[str, 'BibliographyRecord']):
        self._title = title
        self._record_from_key = {key: record_from_key[key] for key in sorted(record_from_key)}

    @property
    def title(self) -> str:
        return self._title

    @property
    def record_from_key(self) -> dict[str, 'BibliographyRecord']:
        return self._record_from_key

    def get(self, key: str) -> Optional['BibliographyRecord']:
        return self._record_from_key.get(key)

    def number_of(self, key: str) -> Optional[int]:
        for index, record_key in enumerate(self._record_from_key, start=1):
            if record_key == key:
                return index

        return None

    def reference_of(self, key: str) -> Optional['ResourceReference']:
        if key not in self._record_from_key:
            return None

        return ResourceReference.of_internal_without_sharp(key, BIBLIOGRAPHY_FICTITIOUS_DOCUMENT)
