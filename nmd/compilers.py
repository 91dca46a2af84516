"""
# NMD: compilers.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Compilation of the document tree.

Work fans out at three points (documents of a dossier, chapters of a document,
paragraphs of a chapter or preamble), in parallel when `parallelization` is set.
Every unit receives the same read-only configuration and an explicit compilation context.
A failing unit fails its parent: the first error in document order is raised,
or, when `collect_errors` is set, every error is raised together in an `ErrorBucketException`.
"""

import concurrent.futures
import logging
from typing import Callable, Iterable, Optional, TypeVar

from nmd.compilables import CompilableText, CompilableTextPart
from nmd.configurations import CompilationConfiguration, CompilationContext
from nmd.contents import TableOfContents, compile_bibliography
from nmd.dossiers import STYLE, STYLE_CLASS, Chapter, Document, Dossier, assign_nuids
from nmd.exceptions import ErrorBucketException
from nmd.paragraphs import Paragraph
from nmd.utilities import build_class_and_style_attributes, escape_attribute_value_html, normalise_identifier

logger = logging.getLogger(__name__)

Unit = TypeVar('Unit')
Result = TypeVar('Result')


def fan_out(
    function: Callable[[Unit], Result],
    units: Iterable[Unit],
    configuration: CompilationConfiguration,
) -> list[Result]:
    """
    Apply `function` to every unit, in parallel if `parallelization` is set; results keep the order of `units`.
    """
    units = list(units)

    if configuration.parallelization and len(units) > 1:
        with concurrent.futures.ThreadPoolExecutor() as executor:
            futures = [executor.submit(function, unit) for unit in units]

        raise_errors([future.exception() for future in futures if future.exception() is not None], configuration)

        return [future.result() for future in futures]

    results = []
    errors = []
    for unit in units:
        try:
            results.append(function(unit))
        except Exception as exception:
            if not configuration.collect_errors:
                raise
            errors.append(exception)

    raise_errors(errors, configuration)

    return results


def raise_errors(errors: list[BaseException], configuration: CompilationConfiguration):
    if len(errors) == 0:
        return

    if configuration.collect_errors:
        raise ErrorBucketException(errors)

    raise errors[0]


def compile_paragraph(paragraph: Paragraph, codex, configuration: CompilationConfiguration, context: CompilationContext) -> CompilableText:
    logger.debug('compiling `%s` paragraph %s', paragraph.kind, paragraph.nuid)

    return paragraph.compile(codex, configuration, context)


def compile_paragraphs(paragraphs: Iterable[Paragraph], codex, configuration, context) -> list[CompilableTextPart]:
    compiled_texts = fan_out(
        lambda paragraph: compile_paragraph(paragraph, codex, configuration, context),
        paragraphs,
        configuration,
    )

    return [part for compiled_text in compiled_texts for part in compiled_text.parts]


def compile_chapter(chapter: Chapter, codex, configuration: CompilationConfiguration, context: CompilationContext) -> CompilableText:
    """
    Compile a chapter into `<section class="chapter">`, with the classes and style of its `@styleclass` and `@style` tags.
    """
    raw_style = '; '.join(
        [*chapter.tag_values(STYLE), *(f'.{class_name}' for value in chapter.tag_values(STYLE_CLASS) for class_name in value.split())]
    )

    parts = [CompilableTextPart.fixed(f'<section{build_class_and_style_attributes("chapter", raw_style)}>')]
    parts.extend(chapter.heading.compile(codex, configuration, context).parts)
    parts.extend(compile_paragraphs(chapter.paragraphs, codex, configuration, context))
    parts.append(CompilableTextPart.fixed('</section>'))

    return CompilableText(parts, chapter.heading.nuid)


def compile_document(
    document: Document,
    codex,
    configuration: CompilationConfiguration,
    context: Optional[CompilationContext] = None,
) -> CompilableText:
    """
    Compile a document into `<section class="document">`, storing the result on the document.
    """
    if context is None:
        context = CompilationContext(document_name=document.name)
    else:
        context = context._replace(document_name=document.name)

    logger.debug('compiling document `%s`', document.name)

    assign_nuids(document)

    parts = [
        CompilableTextPart.fixed(
            f'<section class="document" id="{escape_attribute_value_html(normalise_identifier(document.name))}">'
        )
    ]
    parts.extend(compile_paragraphs(document.preamble, codex, configuration, context))
    chapter_texts = fan_out(
        lambda chapter: compile_chapter(chapter, codex, configuration, context),
        document.chapters,
        configuration,
    )
    for chapter_text in chapter_texts:
        parts.extend(chapter_text.parts)
    parts.append(CompilableTextPart.fixed('</section>'))

    document.compiled_text = CompilableText(parts)

    return document.compiled_text


def select_documents(dossier: Dossier, configuration: CompilationConfiguration) -> list[Document]:
    """
    The documents to compile: all of them, or only `compile_only_documents` in a fast draft.
    """
    if not configuration.fast_draft or configuration.compile_only_documents is None:
        return list(dossier.documents)

    selected_documents = [document for document in dossier.documents if document.name in configuration.compile_only_documents]
    logger.info('fast draft: compiling %d of %d documents', len(selected_documents), len(dossier.documents))

    return selected_documents


def compile_dossier(dossier: Dossier, codex, configuration: Optional[CompilationConfiguration] = None) -> Dossier:
    """
    Compile every document of a dossier, then its table of contents and bibliography.

    The dossier configuration (references, bibliography, compilation settings) is overlaid onto `configuration`.
    """
    if configuration is None:
        configuration = CompilationConfiguration()
    if dossier.configuration is not None:
        configuration = dossier.configuration.apply_to(configuration)

    context = CompilationContext(dossier_name=dossier.name)
    documents = select_documents(dossier, configuration)

    logger.info('compiling dossier `%s` (%d documents)', dossier.name, len(documents))

    fan_out(
        lambda document: compile_document(document, codex, configuration, context),
        documents,
        configuration,
    )

    table_of_contents_configuration = dossier.configuration.table_of_contents if dossier.configuration is not None else None
    if table_of_contents_configuration is not None and table_of_contents_configuration.include_in_output:
        table_of_contents = TableOfContents.of_documents(dossier.documents, table_of_contents_configuration)
        table_of_contents.compile(codex, configuration, context)
        dossier.table_of_contents = table_of_contents

    if configuration.bibliography is not None:
        dossier.bibliography = compile_bibliography(configuration.bibliography, codex, configuration, context)

    return dossier
