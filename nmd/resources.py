"""
# NMD: resources.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Image sources.

An image source is
- remote (a URL with a scheme), kept as a link unless remote embedding is enabled, or
- local (a path, relative to the input location), embedded as a base64 `data:` URI
  when local embedding is enabled.
"""

import base64
import logging
import mimetypes
import re
from pathlib import Path
from typing import Optional

import httpx

from nmd.exceptions import InvalidImageSourceException

logger = logging.getLogger(__name__)

REMOTE_SOURCE_PATTERN = r'[a-zA-Z][a-zA-Z0-9+.-]*://'
REMOTE_IMAGE_TIMEOUT_SECONDS = 10.0


def is_remote_source(source: str) -> bool:
    return re.match(REMOTE_SOURCE_PATTERN, source) is not None


def is_data_source(source: str) -> bool:
    return source.startswith('data:')


def build_data_uri(content: bytes, mime_type: Optional[str]) -> str:
    if mime_type is None:
        mime_type = 'application/octet-stream'

    return f'data:{mime_type};base64,{base64.b64encode(content).decode("ascii")}'


def resolve_local_path(source: str, input_location: Optional[Path]) -> Path:
    path = Path(source)
    if not path.is_absolute() and input_location is not None:
        path = input_location / path

    return path


def fetch_remote_image(url: str) -> tuple[bytes, Optional[str]]:
    response = httpx.get(url, follow_redirects=True, timeout=REMOTE_IMAGE_TIMEOUT_SECONDS)
    response.raise_for_status()

    mime_type = response.headers.get('content-type')
    if mime_type is not None:
        mime_type = mime_type.split(';')[0].strip()
    else:
        mime_type = mimetypes.guess_type(url)[0]

    return response.content, mime_type


def resolve_image_source(source: str, configuration) -> str:
    """
    Resolve an image source into the value of an `src` attribute.

    An unreadable source is an error when `strict_image_src_check` is set,
    otherwise it is logged and the source is kept as it is.
    """
    source = source.strip()

    if is_data_source(source):
        return source

    if is_remote_source(source):
        if not configuration.embed_remote_image:
            return source

        try:
            content, mime_type = fetch_remote_image(source)
        except httpx.HTTPError as http_error:
            return handle_unreadable_source(source, f'cannot fetch remote image `{source}`', configuration, http_error)

        return build_data_uri(content, mime_type)

    path = resolve_local_path(source, configuration.input_location)

    if not path.is_file():
        return handle_unreadable_source(source, f'image `{path}` not found', configuration)

    if not configuration.embed_local_image:
        return path.as_posix()

    try:
        content = path.read_bytes()
    except OSError as os_error:
        return handle_unreadable_source(source, f'cannot read image `{path}`', configuration, os_error)

    return build_data_uri(content, mimetypes.guess_type(path.name)[0])


def handle_unreadable_source(source: str, message: str, configuration, cause: Optional[Exception] = None) -> str:
    if configuration.strict_image_src_check:
        raise InvalidImageSourceException(message) from cause

    logger.warning('%s: source is kept as it is', message)

    return source
