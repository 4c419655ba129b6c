"""Result type for explicit error handling.

Every fallible step of the install pipeline returns a ``Result``: either
``Ok(value)`` or ``Err(error)``. The caller decides whether to stop on the
error (almost always) or to degrade and continue (cache restore/save).

Usage:
    match tool.download_url(version, platform, arch):
        case Ok(url):
            fetch(url)
        case Err(error):
            console.error(str(error))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result.

    Attributes:
        error: The error value (one of the typed error dataclasses).
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Union[Ok[T], Err[E]]
