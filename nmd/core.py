"""
# NMD: core.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Core conversion functions: NMD text or dossier to a standalone HTML page.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from nmd.codex import Codex
from nmd.compilers import compile_document, compile_dossier
from nmd.configurations import CompilationConfiguration, LoadConfiguration
from nmd.dossiers import Dossier
from nmd.loaders import load_document_from_str, load_dossier
from nmd.utilities import escape_html

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = '''\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
'''


def assemble_page(title: str, bodies: Iterable[str]) -> str:
    """
    Wrap compiled HTML fragments in a minimal standalone page.
    """
    return PAGE_TEMPLATE.format(title=escape_html(title), body='\n'.join(bodies))


def nmd_to_html(
    nmd: str,
    document_name: str,
    codex: Optional[Codex] = None,
    load_configuration: Optional[LoadConfiguration] = None,
    compilation_configuration: Optional[CompilationConfiguration] = None,
) -> str:
    """
    Convert NMD to HTML.
    """
    if codex is None:
        codex = Codex.of_html()
    if compilation_configuration is None:
        compilation_configuration = CompilationConfiguration()

    document = load_document_from_str(document_name, nmd, codex, load_configuration)
    compiled_text = compile_document(document, codex, compilation_configuration)

    return assemble_page(document_name, [compiled_text.content()])


def assemble_dossier(dossier: Dossier) -> str:
    bodies = []
    if dossier.table_of_contents is not None:
        bodies.append(dossier.table_of_contents.compiled_text.content())
    for document in dossier.documents:
        if document.compiled_text is not None:
            bodies.append(document.compiled_text.content())
    if dossier.bibliography is not None:
        bodies.append(dossier.bibliography.content())

    return assemble_page(dossier.name, bodies)


def dossier_to_html(
    directory: Path,
    codex: Optional[Codex] = None,
    load_configuration: Optional[LoadConfiguration] = None,
    compilation_configuration: Optional[CompilationConfiguration] = None,
) -> tuple[str, str]:
    """
    Convert the dossier in `directory` to HTML, returning the dossier name and the page.
    """
    if codex is None:
        codex = Codex.of_html()

    dossier = load_dossier(directory, codex, load_configuration)
    compile_dossier(dossier, codex, compilation_configuration)

    return dossier.name, assemble_dossier(dossier)
