"""Error taxonomy shared by the assembly and validation engines.

Every error raised by bagforge derives from ``BagError`` and declares an
``ErrorKind`` so callers can branch on the category without matching
concrete types. Concrete errors live beside the code that raises them and
are re-exported from the package root.
"""

from __future__ import annotations

import errno
from enum import Enum
from pathlib import Path
from typing import ClassVar


class ErrorKind(str, Enum):
    """Broad category of a bag failure."""

    INPUT = "input"
    INTEGRITY = "integrity"
    SECURITY = "security"
    ENVIRONMENT = "environment"
    POLICY = "policy"
    FORMAT = "format"


class BagError(Exception):
    """Base class for all bagforge errors.

    Parameters
    ----------
    message:
        Human readable description.
    path:
        File the error refers to, when there is one.
    line_number:
        1-based line inside ``path`` for text-format errors.
    cause:
        Underlying exception (typically an ``OSError``).
    """

    kind: ClassVar[ErrorKind] = ErrorKind.INPUT

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line_number: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.line_number = line_number
        self.cause = cause
        # Set by the validator to the stage that was running.
        self.stage: str | None = None

    @property
    def os_error(self) -> str | None:
        """Symbolic errno name of the underlying OS error (e.g. ``ENOENT``)."""
        if isinstance(self.cause, BagError):
            return self.cause.os_error
        if isinstance(self.cause, OSError):
            if self.cause.errno is not None:
                return errno.errorcode.get(self.cause.errno, str(self.cause.errno))
            return type(self.cause).__name__
        return None

    def __str__(self) -> str:
        location = ""
        if self.path is not None:
            location = f" [{self.path}"
            if self.line_number is not None:
                location += f":{self.line_number}"
            location += "]"
        suffix = f" ({self.os_error})" if self.os_error else ""
        return f"{self.message}{location}{suffix}"
