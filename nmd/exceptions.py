"""
# NMD: exceptions.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Exception classes.

Loading failures derive from `LoadException`, compilation failures from `CompilationException`.
"""


class LoadException(Exception):
    pass


class ElaborationException(LoadException):
    pass


class InvalidConfigurationException(LoadException):
    pass


class InvalidTagException(LoadException):
    _tag: str

    def __init__(self, tag: str):
        super().__init__(f'invalid chapter tag: `{tag}`')
        self._tag = tag

    @property
    def tag(self) -> str:
        return self._tag


class MissingLoadingRuleException(LoadException):
    pass


class RecursionDepthException(LoadException):
    _max_depth: int

    def __init__(self, max_depth: int):
        super().__init__(f'block nesting exceeds the maximum depth of {max_depth}')
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth


class ResourceException(LoadException):
    pass


class UnresolvableBlockException(LoadException):
    pass


class CompilationException(Exception):
    pass


class ContentOverflowException(CompilationException):
    pass


class InvalidGreekLetterException(CompilationException):
    pass


class InvalidImageSourceException(CompilationException):
    pass


class InvalidListException(CompilationException):
    pass


class MissingDocumentNameException(CompilationException):
    pass


class UnmatchedRuleException(CompilationException):
    pass


class UnresolvedCitationException(CompilationException):
    _key: str

    def __init__(self, key: str):
        super().__init__(f'bibliography record `{key}` not found')
        self._key = key

    @property
    def key(self) -> str:
        return self._key


class UnresolvedReferenceException(CompilationException):
    _key: str

    def __init__(self, key: str):
        super().__init__(f'reference `{key}` not found')
        self._key = key

    @property
    def key(self) -> str:
        return self._key


class ErrorBucketException(Exception):
    """
    Several errors raised by sibling units of a parallel fan-out.
    """
    _errors: list[Exception]

    def __init__(self, errors: list[Exception]):
        super().__init__('; '.join(str(error) for error in errors))
        self._errors = errors

    @property
    def errors(self) -> list[Exception]:
        return self._errors
