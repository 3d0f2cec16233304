"""Shared typing helpers."""

from typing import Final, TypeVar, Union


T = TypeVar("T")


class _Unset:
    """Marker for a field that was not supplied at all.

    Partial updates need to tell "absent" apart from "present but empty"
    (an explicit empty package list clears the set; an omitted one keeps it).
    """

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()

# A value of type T, or UNSET when the caller did not supply it.
Maybe = Union[T, _Unset]  # noqa: UP007


def is_set(value: object) -> bool:
    return value is not UNSET
