"""Per-operation option models.

Each operation takes one of these models (or the equivalent keyword
arguments). Field aliases match the payload keys used by the
state-management layer (``dbName``, ``path``, ``defaultValue``), so a
dispatched payload validates directly into the model.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainValidator, field_validator

from .config import DEFAULT_NAMESPACE
from .validators import ALWAYS_VALID, Validator, as_validator


def _coerce_validator(value: Any) -> Validator:
    try:
        return as_validator(value)
    except TypeError as e:
        raise ValueError(str(e)) from e


class _OperationOptions(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        alias="dbName",
        description="Top-level grouping key.",
    )
    sub_path: str = Field(
        default="",
        alias="path",
        description="Dot-delimited location inside the namespace; empty addresses the scope root.",
    )

    @field_validator("sub_path")
    @classmethod
    def strip_dots(cls, v: str) -> str:
        """Leading/trailing dots would produce empty path segments."""
        return v.strip(".")


class PathOptions(_OperationOptions):
    """Options for ``ensure_initialized`` on a resolved path.

    Defaults: namespace ``"db"``, empty sub-path, user scope on, any
    present value accepted, ``""`` as the initial value.
    """

    user_scope: bool = Field(default=True, alias="user")
    # Plain callables are accepted and wrapped as custom validators.
    validator: Annotated[Validator, PlainValidator(_coerce_validator)] = ALWAYS_VALID
    default: Any = Field(default="", alias="defaultValue")


class SetOptions(_OperationOptions):
    """Options for ``set`` / ``set_by_user``. ``value`` defaults to ``""``."""

    value: Any = ""


class GetOptions(_OperationOptions):
    """Options for ``get`` / ``get_by_user``. ``default`` defaults to ``""``."""

    default: Any = Field(default="", alias="defaultValue")
