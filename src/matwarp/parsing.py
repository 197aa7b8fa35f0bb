"""Parsing of comma separated command line parameters.

Every parser validates element count and element type and raises
:class:`~matwarp.errors.ParameterError` naming the problem, so bad input is
rejected before any image is opened.

Example:
    >>> parse_matrix("1, 0, 0, 1")
    (1.0, 0.0, 0.0, 1.0)
    >>> parse_offset("10,-5")
    (10, -5)
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import TypeVar

from matwarp.errors import ParameterError

T = TypeVar("T", int, float)


def parse_numbers(text: str, count: int, kind: Callable[[str], T] = float) -> tuple[T, ...]:
    """Parse exactly ``count`` comma separated numbers.

    :param text: Raw parameter string, e.g. ``"1,0,0,1"``
    :param count: Required number of elements
    :param kind: Conversion applied to each stripped element (``int`` or ``float``)
    :returns: Tuple of converted values
    :raises ParameterError: If an element does not parse, is NaN or inf, or the
        count is wrong
    """
    items = [item.strip() for item in text.split(",")]

    values = []
    for item in items:
        try:
            value = kind(item)
        except ValueError as err:
            raise ParameterError(
                f"Invalid {kind.__name__} value {item!r} in {text!r}"
            ) from err
        if not math.isfinite(value):
            raise ParameterError(f"Non-finite value {item!r} in {text!r}")
        values.append(value)

    if len(values) != count:
        raise ParameterError(f"Expected {count} elements, got {len(values)} ({values})")

    return tuple(values)


def parse_matrix(text: str) -> tuple[float, float, float, float]:
    """Parse a matrix in user order ``Xx,Xy,Yx,Yy``."""
    return parse_numbers(text, 4, float)


def parse_offset(text: str) -> tuple[int, int]:
    """Parse an integer offset ``X,Y``."""
    return parse_numbers(text, 2, int)


def parse_dims(text: str) -> tuple[int, int]:
    """Parse output dimensions ``W,H``; 0 keeps the source dimension.

    :raises ParameterError: If either dimension is negative
    """
    dims = parse_numbers(text, 2, int)
    if any(d < 0 for d in dims):
        raise ParameterError(f"Dimensions must be non-negative, got {dims}")
    return dims


def parse_background(text: str) -> tuple[int, int, int, int]:
    """Parse an RGBA background color ``R,G,B,A`` with components in [0, 255].

    :raises ParameterError: If a component is outside [0, 255]
    """
    color = parse_numbers(text, 4, int)
    for value in color:
        if not 0 <= value <= 255:
            raise ParameterError(f"Color component {value} is outside [0, 255] in {text!r}")
    return color
