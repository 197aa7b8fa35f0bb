"""Exception types raised by matwarp.

All errors derive from :class:`MatwarpError` and from the built-in exception
a caller would expect (``ValueError`` for bad parameters and singular
matrices, ``OSError`` for image I/O), so existing ``except ValueError``
handlers keep working.
"""

from __future__ import annotations

from pathlib import Path


class MatwarpError(Exception):
    """Base class for all matwarp errors."""


class ParameterError(MatwarpError, ValueError):
    """Malformed user parameter (wrong element count, non-numeric, out of range)."""


class SingularMatrixError(MatwarpError, ValueError):
    """Matrix inversion requested on a singular or near-singular matrix."""


class ImageIOError(MatwarpError, OSError):
    """Image decode/encode failure.

    :param path: File that failed to load or save
    :param message: What went wrong
    """

    def __init__(self, path: str | Path, message: str):
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")
