"""Change feed event entity."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Union

from ....core.exceptions.data import MalformedChangeEventError


class ChangeOperation(str, Enum):
    """Row-level operation reported by the change feed."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ChangeEvent:
    """A single row change. Transient; only receiving it matters."""
    
    operation: ChangeOperation
    table: str
    schema: str = "public"
    payload: Dict[str, Any] = field(default_factory=dict)
    
    @classmethod
    def from_wire(cls, message: Union[str, bytes, Mapping[str, Any]]) -> 'ChangeEvent':
        """Decode ``{"operation", "schema", "table", "payload"}``.
        
        Raises:
            MalformedChangeEventError: If the message is not a valid event
        """
        if isinstance(message, (str, bytes)):
            try:
                message = json.loads(message)
            except ValueError as e:
                raise MalformedChangeEventError(f"Change event is not JSON: {e}") from e
        
        if not isinstance(message, Mapping):
            raise MalformedChangeEventError("Change event must be a JSON object")
        
        try:
            operation = ChangeOperation(str(message["operation"]).lower())
            table = message["table"]
        except KeyError as e:
            raise MalformedChangeEventError(f"Change event is missing {e}") from e
        except ValueError as e:
            raise MalformedChangeEventError(f"Unknown change operation: {message['operation']!r}") from e
        
        payload = message.get("payload") or {}
        if not isinstance(payload, Mapping):
            raise MalformedChangeEventError("Change event payload must be an object")
        
        return cls(
            operation=operation,
            table=table,
            schema=message.get("schema") or "public",
            payload=dict(payload),
        )
    
    def matches(self, schema: str, table: str) -> bool:
        return self.schema == schema and self.table == table
