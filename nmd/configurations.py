"""
# NMD: configurations.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Load and compilation configurations, and the dossier configuration file.

Configurations are read-only once built; `with_changes` returns a modified copy.
The dossier configuration file is YAML (`nmd.yml`), e.g.
````
name: My dossier
documents:
  - introduction.nmd
  - body.nmd
table_of_contents:
  title: Contents
  maximum_heading_level: 3
bibliography:
  title: References
  records:
    knuth1984:
      title: Literate Programming
      authors: [Donald E. Knuth]
      year: 1984
references:
  project: NMD
compilation:
  strict_list_check: true
  parallelization: true
````
"""

import logging
import os
from pathlib import Path
from typing import Any, NamedTuple, Optional

import yaml

from nmd.constants import (
    CHECKBOX_CHECKED_HTML,
    CHECKBOX_HTML,
    DEFAULT_BIBLIOGRAPHY_TITLE,
    DEFAULT_MAX_RECURSION_DEPTH,
    DEFAULT_TABLE_OF_CONTENTS_TITLE,
    DOSSIER_CONFIGURATION_FILE_NAMES,
    MAX_HEADING_LEVEL,
    NMD_FILE_EXTENSION,
)
from nmd.exceptions import InvalidConfigurationException, ResourceException
from nmd.incompatibilities import IncompatibilitySet
from nmd.references import Bibliography, BibliographyRecord

logger = logging.getLogger(__name__)


class CompilationContext(NamedTuple):
    document_name: Optional[str] = None
    dossier_name: Optional[str] = None


class ListBulletRecord(NamedTuple):
    """
    Bullet transformation: `source` bullets become `target` at (or from) `indentation_level`.
    """
    source: str
    target: str
    indentation_level: int = 0
    strict_indentation: bool = False


DEFAULT_LIST_BULLET_RECORDS = (
    ListBulletRecord('-', '&bull;'),
    ListBulletRecord('*', '&bull;'),
    ListBulletRecord('+', '&bull;'),
    ListBulletRecord('->', '&rarr;'),
    ListBulletRecord('--', '&ndash;'),
    ListBulletRecord('|', '&#8205;'),
    ListBulletRecord('-[]', CHECKBOX_HTML),
    ListBulletRecord('-[ ]', CHECKBOX_HTML),
    ListBulletRecord('-[x]', CHECKBOX_CHECKED_HTML),
    ListBulletRecord('-[X]', CHECKBOX_CHECKED_HTML),
)


class LoadConfiguration:
    """
    Configuration of the block partitioner.
    """
    _strict_focus_block_check: bool
    _strict_paragraph_loading_rules_check: bool
    _max_recursion_depth: int
    _parallelization: bool

    def __init__(
        self,
        strict_focus_block_check: bool = False,
        strict_paragraph_loading_rules_check: bool = False,
        max_recursion_depth: int = DEFAULT_MAX_RECURSION_DEPTH,
        parallelization: bool = False,
    ):
        self._strict_focus_block_check = strict_focus_block_check
        self._strict_paragraph_loading_rules_check = strict_paragraph_loading_rules_check
        self._max_recursion_depth = max_recursion_depth
        self._parallelization = parallelization

    @property
    def strict_focus_block_check(self) -> bool:
        return self._strict_focus_block_check

    @property
    def strict_paragraph_loading_rules_check(self) -> bool:
        return self._strict_paragraph_loading_rules_check

    @property
    def max_recursion_depth(self) -> int:
        return self._max_recursion_depth

    @property
    def parallelization(self) -> bool:
        return self._parallelization

    def with_changes(self, **changes) -> 'LoadConfiguration':
        values = {
            'strict_focus_block_check': self._strict_focus_block_check,
            'strict_paragraph_loading_rules_check': self._strict_paragraph_loading_rules_check,
            'max_recursion_depth': self._max_recursion_depth,
            'parallelization': self._parallelization,
        }
        check_changes(values, changes)
        values.update(changes)

        return LoadConfiguration(**values)


class CompilationConfiguration:
    """
    Configuration of compilation, shared read-only by every worker.
    """
    _embed_local_image: bool
    _embed_remote_image: bool
    _strict_image_src_check: bool
    _excluded_modifiers: IncompatibilitySet
    _parallelization: bool
    _collect_errors: bool
    _list_bullet_records: tuple[ListBulletRecord, ...]
    _strict_list_check: bool
    _strict_focus_block_check: bool
    _strict_cite_check: bool
    _strict_reference_check: bool
    _strict_greek_letters_check: bool
    _references: dict[str, str]
    _bibliography: Optional[Bibliography]
    _fast_draft: bool
    _compile_only_documents: Optional[tuple[str, ...]]
    _input_location: Optional[Path]

    def __init__(
        self,
        embed_local_image: bool = True,
        embed_remote_image: bool = False,
        strict_image_src_check: bool = False,
        excluded_modifiers: Optional[IncompatibilitySet] = None,
        parallelization: bool = False,
        collect_errors: bool = False,
        list_bullet_records: tuple[ListBulletRecord, ...] = DEFAULT_LIST_BULLET_RECORDS,
        strict_list_check: bool = False,
        strict_focus_block_check: bool = False,
        strict_cite_check: bool = False,
        strict_reference_check: bool = False,
        strict_greek_letters_check: bool = False,
        references: Optional[dict[str, str]] = None,
        bibliography: Optional[Bibliography] = None,
        fast_draft: bool = False,
        compile_only_documents: Optional[tuple[str, ...]] = None,
        input_location: Optional[Path] = None,
    ):
        self._embed_local_image = embed_local_image
        self._embed_remote_image = embed_remote_image
        self._strict_image_src_check = strict_image_src_check
        self._excluded_modifiers = (
            excluded_modifiers if excluded_modifiers is not None else IncompatibilitySet.nothing()
        )
        self._parallelization = parallelization
        self._collect_errors = collect_errors
        self._list_bullet_records = tuple(list_bullet_records)
        self._strict_list_check = strict_list_check
        self._strict_focus_block_check = strict_focus_block_check
        self._strict_cite_check = strict_cite_check
        self._strict_reference_check = strict_reference_check
        self._strict_greek_letters_check = strict_greek_letters_check
        self._references = dict(references) if references is not None else {}
        self._bibliography = bibliography
        self._fast_draft = fast_draft
        self._compile_only_documents = tuple(compile_only_documents) if compile_only_documents is not None else None
        self._input_location = input_location

    @property
    def embed_local_image(self) -> bool:
        return self._embed_local_image

    @property
    def embed_remote_image(self) -> bool:
        return self._embed_remote_image

    @property
    def strict_image_src_check(self) -> bool:
        return self._strict_image_src_check

    @property
    def excluded_modifiers(self) -> IncompatibilitySet:
        return self._excluded_modifiers

    @property
    def parallelization(self) -> bool:
        return self._parallelization

    @property
    def collect_errors(self) -> bool:
        return self._collect_errors

    @property
    def list_bullet_records(self) -> tuple[ListBulletRecord, ...]:
        return self._list_bullet_records

    @property
    def strict_list_check(self) -> bool:
        return self._strict_list_check

    @property
    def strict_focus_block_check(self) -> bool:
        return self._strict_focus_block_check

    @property
    def strict_cite_check(self) -> bool:
        return self._strict_cite_check

    @property
    def strict_reference_check(self) -> bool:
        return self._strict_reference_check

    @property
    def strict_greek_letters_check(self) -> bool:
        return self._strict_greek_letters_check

    @property
    def references(self) -> dict[str, str]:
        return dict(self._references)

    @property
    def bibliography(self) -> Optional[Bibliography]:
        return self._bibliography

    @property
    def fast_draft(self) -> bool:
        return self._fast_draft

    @property
    def compile_only_documents(self) -> Optional[tuple[str, ...]]:
        return self._compile_only_documents

    @property
    def input_location(self) -> Optional[Path]:
        return self._input_location

    def lookup_reference(self, key: str) -> Optional[str]:
        return self._references.get(key)

    def with_changes(self, **changes) -> 'CompilationConfiguration':
        values = {
            'embed_local_image': self._embed_local_image,
            'embed_remote_image': self._embed_remote_image,
            'strict_image_src_check': self._strict_image_src_check,
            'excluded_modifiers': self._excluded_modifiers,
            'parallelization': self._parallelization,
            'collect_errors': self._collect_errors,
            'list_bullet_records': self._list_bullet_records,
            'strict_list_check': self._strict_list_check,
            'strict_focus_block_check': self._strict_focus_block_check,
            'strict_cite_check': self._strict_cite_check,
            'strict_reference_check': self._strict_reference_check,
            'strict_greek_letters_check': self._strict_greek_letters_check,
            'references': self._references,
            'bibliography': self._bibliography,
            'fast_draft': self._fast_draft,
            'compile_only_documents': self._compile_only_documents,
            'input_location': self._input_location,
        }
        check_changes(values, changes)
        values.update(changes)

        return CompilationConfiguration(**values)

    def strict(self) -> 'CompilationConfiguration':
        return self.with_changes(
            strict_image_src_check=True,
            strict_list_check=True,
            strict_focus_block_check=True,
            strict_cite_check=True,
            strict_reference_check=True,
            strict_greek_letters_check=True,
        )


class TableOfContentsConfiguration(NamedTuple):
    title: str = DEFAULT_TABLE_OF_CONTENTS_TITLE
    maximum_heading_level: int = MAX_HEADING_LEVEL
    plain: bool = False
    include_in_output: bool = True


class DossierConfiguration:
    """
    Content of a dossier configuration file.
    """
    _name: str
    _documents: tuple[str, ...]
    _table_of_contents: Optional[TableOfContentsConfiguration]
    _bibliography: Optional[Bibliography]
    _references: dict[str, str]
    _compilation_changes: dict[str, Any]
    _location: Path

    def __init__(
        self,
        name: str,
        documents: tuple[str, ...],
        location: Path,
        table_of_contents: Optional[TableOfContentsConfiguration] = None,
        bibliography: Optional[Bibliography] = None,
        references: Optional[dict[str, str]] = None,
        compilation_changes: Optional[dict[str, Any]] = None,
    ):
        self._name = name
        self._documents = tuple(documents)
        self._location = location
        self._table_of_contents = table_of_contents
        self._bibliography = bibliography
        self._references = dict(references) if references is not None else {}
        self._compilation_changes = dict(compilation_changes) if compilation_changes is not None else {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def documents(self) -> tuple[str, ...]:
        return self._documents

    @property
    def location(self) -> Path:
        return self._location

    @property
    def table_of_contents(self) -> Optional[TableOfContentsConfiguration]:
        return self._table_of_contents

    @property
    def bibliography(self) -> Optional[Bibliography]:
        return self._bibliography

    @property
    def references(self) -> dict[str, str]:
        return dict(self._references)

    @property
    def compilation_changes(self) -> dict[str, Any]:
        return dict(self._compilation_changes)

    def document_paths(self) -> list[Path]:
        return [self._location / document for document in self._documents]

    def apply_to(self, configuration: CompilationConfiguration) -> CompilationConfiguration:
        """
        Overlay the dossier's references, bibliography and compilation settings onto a configuration.
        """
        references = configuration.references
        references.update(self._references)

        return configuration.with_changes(
            references=references,
            bibliography=self._bibliography if self._bibliography is not None else configuration.bibliography,
            input_location=self._location,
            **self._compilation_changes,
        )

    def apply_to_load(self, configuration: LoadConfiguration) -> LoadConfiguration:
        """
        Overlay the compilation settings that also govern loading (`strict_focus_block_check`, `parallelization`).
        """
        changes = {key: value for key, value in self._compilation_changes.items() if key in LOAD_KEYS}

        return configuration.with_changes(**changes)


COMPILATION_KEYS = (
    'embed_local_image',
    'embed_remote_image',
    'strict_image_src_check',
    'parallelization',
    'strict_list_check',
    'strict_focus_block_check',
    'strict_cite_check',
    'strict_reference_check',
    'strict_greek_letters_check',
    'fast_draft',
)
LOAD_KEYS = ('strict_focus_block_check', 'parallelization')


def check_changes(values: dict[str, Any], changes: dict[str, Any]):
    unknown_keys = sorted(set(changes) - set(values))
    if len(unknown_keys) > 0:
        raise TypeError(f'error: unknown configuration key(s): {", ".join(unknown_keys)}')


def find_dossier_configuration_file(directory: Path) -> Path:
    for file_name in DOSSIER_CONFIGURATION_FILE_NAMES:
        path = directory / file_name
        if path.is_file():
            return path

    raise ResourceException(f'no dossier configuration file ({", ".join(DOSSIER_CONFIGURATION_FILE_NAMES)}) in `{directory}`')


def load_dossier_configuration(directory: Path) -> DossierConfiguration:
    """
    Load and validate the dossier configuration file of `directory`.
    """
    path = find_dossier_configuration_file(directory)

    try:
        raw = yaml.safe_load(path.read_text(encoding='utf-8'))
    except OSError as os_error:
        raise ResourceException(f'cannot read `{path}`') from os_error
    except yaml.YAMLError as yaml_error:
        raise InvalidConfigurationException(f'invalid YAML in `{path}`') from yaml_error

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InvalidConfigurationException(f'`{path}` must contain a mapping')

    logger.debug('loaded dossier configuration `%s`', path)

    return parse_dossier_configuration(raw, directory)


def parse_dossier_configuration(raw: dict, directory: Path) -> DossierConfiguration:
    name = str(raw.get('name', directory.resolve().name))

    documents = raw.get('documents')
    if documents is None:
        documents = sorted(
            file_name
            for file_name in os.listdir(directory)
            if file_name.endswith(NMD_FILE_EXTENSION) and (directory / file_name).is_file()
        )
    elif not isinstance(documents, list) or not all(isinstance(document, str) for document in documents):
        raise InvalidConfigurationException('`documents` must be a list of file names')

    return DossierConfiguration(
        name=name,
        documents=tuple(documents),
        location=directory,
        table_of_contents=parse_table_of_contents(raw.get('table_of_contents')),
        bibliography=parse_bibliography(raw.get('bibliography')),
        references=parse_references(raw.get('references')),
        compilation_changes=parse_compilation(raw.get('compilation')),
    )


def parse_table_of_contents(raw: Any) -> Optional[TableOfContentsConfiguration]:
    if raw is None or raw is False:
        return None
    if raw is True:
        return TableOfContentsConfiguration()
    if not isinstance(raw, dict):
        raise InvalidConfigurationException('`table_of_contents` must be a mapping')

    maximum_heading_level = raw.get('maximum_heading_level', MAX_HEADING_LEVEL)
    if not isinstance(maximum_heading_level, int) or not 1 <= maximum_heading_level <= MAX_HEADING_LEVEL:
        raise InvalidConfigurationException(
            f'`table_of_contents.maximum_heading_level` must be an integer in 1..{MAX_HEADING_LEVEL}'
        )

    return TableOfContentsConfiguration(
        title=str(raw.get('title', DEFAULT_TABLE_OF_CONTENTS_TITLE)),
        maximum_heading_level=maximum_heading_level,
        plain=bool(raw.get('plain', False)),
        include_in_output=bool(raw.get('include_in_output', True)),
    )


def parse_bibliography(raw: Any) -> Optional[Bibliography]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise InvalidConfigurationException('`bibliography` must be a mapping')

    raw_records = raw.get('records', {})
    if not isinstance(raw_records, dict):
        raise InvalidConfigurationException('`bibliography.records` must be a mapping')

    record_from_key = {}
    for key, raw_record in raw_records.items():
        if not isinstance(raw_record, dict) or 'title' not in raw_record:
            raise InvalidConfigurationException(f'bibliography record `{key}` must be a mapping with a `title`')

        authors = raw_record.get('authors')
        if isinstance(authors, str):
            authors = [authors]

        record_from_key[str(key)] = BibliographyRecord(
            title=str(raw_record['title']),
            authors=[str(author) for author in authors] if authors is not None else None,
            year=raw_record.get('year'),
            url=raw_record.get('url'),
            description=raw_record.get('description'),
        )

    return Bibliography(str(raw.get('title', DEFAULT_BIBLIOGRAPHY_TITLE)), record_from_key)


def parse_references(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidConfigurationException('`references` must be a mapping')

    return {str(key): str(value) for key, value in raw.items()}


def parse_compilation(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidConfigurationException('`compilation` must be a mapping')

    compilation_changes = {}
    for key, value in raw.items():
        if key == 'excluded_modifiers':
            compilation_changes[key] = parse_excluded_modifiers(value)
        elif key in COMPILATION_KEYS:
            if not isinstance(value, bool):
                raise InvalidConfigurationException(f'`compilation.{key}` must be a boolean')
            compilation_changes[key] = value
        else:
            raise InvalidConfigurationException(f'unknown compilation setting `{key}`')

    return compilation_changes


def parse_excluded_modifiers(raw: Any) -> IncompatibilitySet:
    if raw is None or raw == 'nothing':
        return IncompatibilitySet.nothing()
    if raw == 'everything':
        return IncompatibilitySet.everything()
    if isinstance(raw, list) and all(isinstance(identifier, str) for identifier in raw):
        return IncompatibilitySet.listed(raw)

    raise InvalidConfigurationException('`compilation.excluded_modifiers` must be `everything`, `nothing` or a list')
