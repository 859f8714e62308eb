"""Operation registry for the state-management layer.

The state layer refers to operations by name (``setByUser``,
``databaseClear``...) and passes a payload dict. ``dispatch`` validates the
payload into the operation's options model and calls the matching
``ScopedDB`` method.

Example:
    >>> dispatch(db, "set", {"dbName": "db", "path": "a.b", "value": "x"})
    >>> dispatch(db, "get", {"path": "a.b", "defaultValue": "default"})
    'x'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import OperationNotFoundError, ValidationError
from .options import GetOptions, SetOptions

if TYPE_CHECKING:
    from .accessor import ScopedDB

logger = logging.getLogger(__name__)


class OperationKind(Enum):
    MUTATION = "mutation"
    ACTION = "action"


@dataclass(frozen=True)
class Operation:
    """A dispatchable operation.

    Attributes:
        name: Name used by the state layer
        method: ScopedDB method implementing it
        kind: Mutations write and return nothing; actions return a result
        options_model: Payload model, or None for operations without input
    """

    name: str
    method: str
    kind: OperationKind
    options_model: type[BaseModel] | None = None


OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        Operation("set", "set", OperationKind.MUTATION, SetOptions),
        Operation("setByUser", "set_by_user", OperationKind.MUTATION, SetOptions),
        Operation("get", "get", OperationKind.ACTION, GetOptions),
        Operation("getByUser", "get_by_user", OperationKind.ACTION, GetOptions),
        Operation("database", "database", OperationKind.ACTION),
        Operation("databaseClear", "database_clear", OperationKind.ACTION),
        Operation("databaseByUser", "database_by_user", OperationKind.ACTION),
        Operation("databaseByUserClear", "database_by_user_clear", OperationKind.ACTION),
    )
}


def dispatch(db: ScopedDB, name: str, payload: dict[str, Any] | None = None) -> Any:
    """Run the operation registered as ``name`` against ``db``.

    Raises:
        OperationNotFoundError: ``name`` is not registered
        ValidationError: ``payload`` does not fit the operation's options
        StoreIOError: The store failed
    """
    operation = OPERATIONS.get(name)
    if operation is None:
        raise OperationNotFoundError(name)

    method = getattr(db, operation.method)
    if operation.options_model is None:
        if payload:
            raise ValidationError(
                f"Operation {name!r} takes no payload",
                details={"operation": name, "keys": sorted(payload)},
            )
        logger.debug("Dispatching %s", name)
        return method()

    data = dict(payload or {})
    if "dbName" not in data and "namespace" not in data:
        data["dbName"] = db.default_namespace
    try:
        options = operation.options_model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid payload for {name!r}: {e}", details={"operation": name}
        ) from e

    logger.debug("Dispatching %s", name)
    return method(options=options)
