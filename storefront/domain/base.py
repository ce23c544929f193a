"""
Shared base for domain models
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict


def to_json_value(value: Any) -> Any:
    """Decimal -> float and datetime -> ISO string, recursively"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    return value


class DomainModel(BaseModel):
    """Read model built from ORM rows"""

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return to_json_value(self.model_dump())
