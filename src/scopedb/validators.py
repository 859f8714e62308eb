"""Validators deciding whether stored data can be kept as-is.

A validator is one of three explicit kinds:

- AlwaysValid: keep any present value (only a missing value is initialized)
- NeverValid: reject everything, so the default always overwrites (clear)
- Custom: delegate to a caller-supplied predicate
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, cast

logger = logging.getLogger(__name__)


class ValidatorKind(Enum):
    ALWAYS_VALID = "always_valid"
    NEVER_VALID = "never_valid"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Validator:
    """Decides whether an existing stored value is acceptable.

    Use the module constants ``ALWAYS_VALID`` / ``NEVER_VALID`` or
    ``Validator.custom(predicate)`` rather than building one directly.
    """

    kind: ValidatorKind
    predicate: Callable[[Any], bool] | None = field(default=None, compare=False)
    name: str = ""

    def __post_init__(self) -> None:
        if self.kind is ValidatorKind.CUSTOM and self.predicate is None:
            raise ValueError("A custom validator needs a predicate")

    @classmethod
    def custom(cls, predicate: Callable[[Any], bool], name: str | None = None) -> Validator:
        return cls(
            ValidatorKind.CUSTOM,
            predicate,
            name or getattr(predicate, "__name__", "custom"),
        )

    def accepts(self, value: Any) -> bool:
        """Return True when ``value`` may stay in place.

        A predicate that raises counts as a rejection, so the value gets
        repaired rather than the caller failing.
        """
        if self.kind is ValidatorKind.ALWAYS_VALID:
            return True
        if self.kind is ValidatorKind.NEVER_VALID:
            return False
        # __post_init__ guarantees a predicate for custom validators.
        predicate = cast(Callable[[Any], bool], self.predicate)
        try:
            return bool(predicate(value))
        except Exception as e:
            logger.warning(f"Validator {self.name!r} raised {type(e).__name__}: {e}; treating as invalid")
            return False

    def __repr__(self) -> str:
        if self.kind is ValidatorKind.CUSTOM:
            return f"Validator.custom({self.name})"
        return self.kind.name


ALWAYS_VALID = Validator(ValidatorKind.ALWAYS_VALID, name="always_valid")
NEVER_VALID = Validator(ValidatorKind.NEVER_VALID, name="never_valid")


def as_validator(value: Validator | Callable[[Any], bool] | None) -> Validator:
    """Coerce a predicate (or None) into a Validator."""
    if value is None:
        return ALWAYS_VALID
    if isinstance(value, Validator):
        return value
    if callable(value):
        return Validator.custom(value)
    raise TypeError(f"Expected a Validator or callable, got {type(value).__name__}")


def is_type(*types: type) -> Validator:
    """Validator accepting values that are instances of ``types``."""
    names = "|".join(t.__name__ for t in types)
    return Validator.custom(lambda value: isinstance(value, types), name=f"is_type({names})")
