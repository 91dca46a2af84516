"""
# NMD: cli.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Command-line interface.
"""

import argparse
import logging
import os
import re
import sys
from pathlib import Path

from nmd._version import __version__
from nmd.configurations import CompilationConfiguration, LoadConfiguration
from nmd.constants import COMMAND_LINE_ERROR_EXIT_CODE, GENERIC_ERROR_EXIT_CODE, HTML_FILE_EXTENSION, NMD_FILE_EXTENSION
from nmd.core import dossier_to_html, nmd_to_html
from nmd.exceptions import CompilationException, ErrorBucketException, LoadException

DESCRIPTION = '''
    Convert NMD to HTML.
'''
NMD_FILE_NAME_HELP = '''
    name of NMD file to be converted
    (can be abbreviated as `file` or `file.` for increased productivity)
'''
ALL_MODE_HELP = '''
    convert all NMD files under the working directory
'''
DOSSIER_HELP = '''
    convert the dossier in DIR (configured by `nmd.yml`) into a single page `DIR/«name».html`
'''
PARALLEL_MODE_HELP = '''
    load and compile documents, chapters and paragraphs in parallel
'''
STRICT_MODE_HELP = '''
    treat every recoverable problem (invalid list item, unknown reference, missing image, ...) as an error
'''
FAST_DRAFT_HELP = '''
    in dossier mode, compile only the dossier documents named as positional arguments
'''
VERBOSE_MODE_HELP = '''
    run in verbose mode (logs every rule applied)
'''


def is_nmd_file(file_name: str) -> bool:
    return file_name.endswith(NMD_FILE_EXTENSION)


def extract_nmd_name(nmd_file_name_argument: str) -> str:
    """
    Extract name-without-extension from an NMD file name argument.

    Here, NMD file name argument may be of the form `«nmd_name».nmd`, `«nmd_name».`, or `«nmd_name»`.
    The path is normalised by resolving `./` and `../`.
    """
    nmd_file_name_argument = os.path.normpath(nmd_file_name_argument)
    nmd_name = re.sub(pattern=r'[.](nmd)? \Z', repl='', string=nmd_file_name_argument, flags=re.VERBOSE)

    return nmd_name


def parse_command_line_arguments() -> argparse.Namespace:
    argument_parser = argparse.ArgumentParser(description=DESCRIPTION)
    argument_parser.add_argument(
        '-v', '--version',
        action='version',
        version=f'{argument_parser.prog} version {__version__}',
    )
    argument_parser.add_argument(
        '-a', '--all',
        dest='all_mode_enabled',
        action='store_true',
        help=ALL_MODE_HELP,
    )
    argument_parser.add_argument(
        '-d', '--dossier',
        dest='dossier_directory',
        default=None,
        help=DOSSIER_HELP,
        metavar='DIR',
    )
    argument_parser.add_argument(
        '-p', '--parallel',
        dest='parallel_mode_enabled',
        action='store_true',
        help=PARALLEL_MODE_HELP,
    )
    argument_parser.add_argument(
        '-s', '--strict',
        dest='strict_mode_enabled',
        action='store_true',
        help=STRICT_MODE_HELP,
    )
    argument_parser.add_argument(
        '-f', '--fast-draft',
        dest='fast_draft_enabled',
        action='store_true',
        help=FAST_DRAFT_HELP,
    )
    argument_parser.add_argument(
        '-x', '--verbose',
        dest='verbose_mode_enabled',
        action='store_true',
        help=VERBOSE_MODE_HELP,
    )
    argument_parser.add_argument(
        'nmd_file_name_arguments',
        default=[],
        help=NMD_FILE_NAME_HELP,
        metavar='file.nmd',
        nargs='*',
    )

    return argument_parser.parse_args()


def build_configurations(parsed_arguments: argparse.Namespace) -> tuple[LoadConfiguration, CompilationConfiguration]:
    load_configuration = LoadConfiguration(parallelization=parsed_arguments.parallel_mode_enabled)
    compilation_configuration = CompilationConfiguration(parallelization=parsed_arguments.parallel_mode_enabled)

    if parsed_arguments.strict_mode_enabled:
        load_configuration = load_configuration.with_changes(
            strict_focus_block_check=True,
            strict_paragraph_loading_rules_check=True,
        )
        compilation_configuration = compilation_configuration.strict()

    return load_configuration, compilation_configuration


def write_html_file(html_file_name: str, html: str):
    try:
        with open(html_file_name, 'w', encoding='utf-8') as html_file:
            html_file.write(html)
        print(f'success: wrote to `{html_file_name}`')
    except IOError:
        print(f'error: cannot write to `{html_file_name}`', file=sys.stderr)
        sys.exit(GENERIC_ERROR_EXIT_CODE)


def generate_html_file(
    nmd_file_name_argument: str,
    load_configuration: LoadConfiguration,
    compilation_configuration: CompilationConfiguration,
    uses_command_line_argument: bool,
):
    nmd_name = extract_nmd_name(nmd_file_name_argument)
    nmd_file_name = f'{nmd_name}{NMD_FILE_EXTENSION}'
    try:
        with open(nmd_file_name, 'r', encoding='utf-8') as nmd_file:
            nmd = nmd_file.read()
    except FileNotFoundError as file_not_found_error:
        if uses_command_line_argument:
            print(f'error: argument `{nmd_file_name_argument}`: file `{nmd_file_name}` not found', file=sys.stderr)
            sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)
        else:
            error_message = f'file `{nmd_file_name}` not found for `{nmd_file_name}` in nmd_file_name_list'
            raise FileNotFoundError(error_message) from file_not_found_error

    compilation_configuration = compilation_configuration.with_changes(input_location=Path(nmd_file_name).parent)
    html = nmd_to_html(
        nmd,
        os.path.basename(nmd_name),
        load_configuration=load_configuration,
        compilation_configuration=compilation_configuration,
    )

    write_html_file(f'{nmd_name}{HTML_FILE_EXTENSION}', html)


def generate_dossier_html_file(
    dossier_directory: str,
    compile_only_documents: list[str],
    load_configuration: LoadConfiguration,
    compilation_configuration: CompilationConfiguration,
):
    directory = Path(dossier_directory)
    if not directory.is_dir():
        print(f'error: argument `{dossier_directory}`: directory not found', file=sys.stderr)
        sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)

    if len(compile_only_documents) > 0:
        compilation_configuration = compilation_configuration.with_changes(
            fast_draft=True,
            compile_only_documents=tuple(os.path.basename(extract_nmd_name(name)) for name in compile_only_documents),
        )

    dossier_name, html = dossier_to_html(
        directory,
        load_configuration=load_configuration,
        compilation_configuration=compilation_configuration,
    )

    write_html_file(str(directory / f'{dossier_name}{HTML_FILE_EXTENSION}'), html)


def run(parsed_arguments: argparse.Namespace):
    nmd_file_name_arguments = parsed_arguments.nmd_file_name_arguments
    load_configuration, compilation_configuration = build_configurations(parsed_arguments)

    if parsed_arguments.dossier_directory is not None:
        if parsed_arguments.all_mode_enabled:
            print('error: option -a (or --all) cannot be used with option -d (or --dossier)', file=sys.stderr)
            sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)
        if len(nmd_file_name_arguments) > 0 and not parsed_arguments.fast_draft_enabled:
            print('error: option -d (or --dossier) takes positional arguments only with -f (or --fast-draft)', file=sys.stderr)
            sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)

        generate_dossier_html_file(
            parsed_arguments.dossier_directory,
            nmd_file_name_arguments,
            load_configuration,
            compilation_configuration,
        )
        return

    if parsed_arguments.fast_draft_enabled:
        print('error: option -f (or --fast-draft) requires option -d (or --dossier)', file=sys.stderr)
        sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)

    if parsed_arguments.all_mode_enabled:
        if len(nmd_file_name_arguments) > 0:
            print('error: option -a (or --all) cannot be used with positional argument', file=sys.stderr)
            sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)

        nmd_file_names = [
            os.path.join(path, file_name)
            for path, _, file_names in os.walk(os.curdir)
            for file_name in file_names
            if is_nmd_file(file_name)
        ]
        for nmd_file_name in sorted(nmd_file_names):
            generate_html_file(nmd_file_name, load_configuration, compilation_configuration, uses_command_line_argument=False)

    else:
        for nmd_file_name_argument in nmd_file_name_arguments:
            generate_html_file(nmd_file_name_argument, load_configuration, compilation_configuration, uses_command_line_argument=True)


def main():
    parsed_arguments = parse_command_line_arguments()

    logging.basicConfig(
        format='%(levelname)s: %(name)s: %(message)s',
        level=logging.DEBUG if parsed_arguments.verbose_mode_enabled else logging.WARNING,
    )

    try:
        run(parsed_arguments)
    except ErrorBucketException as error_bucket_exception:
        for error in error_bucket_exception.errors:
            print(f'error: {error}', file=sys.stderr)
        sys.exit(GENERIC_ERROR_EXIT_CODE)
    except (LoadException, CompilationException) as exception:
        print(f'error: {exception}', file=sys.stderr)
        sys.exit(GENERIC_ERROR_EXIT_CODE)


if __name__ == '__main__':
    main()
