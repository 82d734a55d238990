"""
Bookstore API — Operation Logger
=================================

What:  A LoggerAdapter that prefixes each record with the request id and the
       `<Entities>-<Operation>` tag of the handler operation that emitted it.
How:   Wraps a stdlib logger; the tag also goes into `extra` so structured
       formatters can pick it up as fields.

Example output:
    2024-01-15T12:00:00 [INFO] bookstore_api.services.crud_handler: [a1b2c3d4] Authors-Get: Success for id:3
"""

import logging
from typing import Any, MutableMapping, Tuple

from bookstore_api.middleware.request_id import request_id_var


class OperationLogger(logging.LoggerAdapter):
    """Tags log records with resource, operation and request id."""

    def __init__(self, logger: logging.Logger, resource: str, operation: str):
        super().__init__(logger, {"resource": resource, "operation": operation})

    @property
    def tag(self) -> str:
        return f"{self.extra['resource']}-{self.extra['operation']}"

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        rid = request_id_var.get("")
        extra = dict(self.extra)
        extra["request_id"] = rid
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        prefix = f"[{rid}] {self.tag}" if rid else self.tag
        return f"{prefix}: {msg}", kwargs
