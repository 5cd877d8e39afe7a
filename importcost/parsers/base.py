"""Exception hierarchy for import extraction.

Every error defined here is local to the processing of one file: callers
skip the offending node, file or check and keep going.
"""


class RecoverableError(Exception):
    """Base class for recoverable errors.

    These errors indicate expected failure conditions that are handled by
    skipping the current item and continuing processing.
    """


class ConfigurationError(RecoverableError):
    """Configuration source is malformed or holds invalid values."""


class ParseError(RecoverableError):
    """Source text is not valid under the dialect's grammar.

    Aborts extraction for the whole file. The session reports it through
    its error event.
    """

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class MalformedNodeError(RecoverableError):
    """A single import-like construct lacks the structure needed to read it.

    The node is skipped and the tree walk continues.
    """


class ResolutionIOError(RecoverableError):
    """Filesystem failure while checking whether a specifier is local.

    Treated as "not local", so the specifier is reported as external.
    """
