"""
Shared base for domain models mirrored from database rows
"""
from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


def to_json_value(value):
    """Convert database scalar types into JSON friendly values"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    return value


class RecordModel(BaseModel):
    """
    Base for records owned by the managed database.

    Columns the model does not declare are kept (extra="allow") so API
    responses mirror the table the way the storefront frontend expects.
    """

    model_config = ConfigDict(from_attributes=True, extra="allow")

    @classmethod
    def from_row(cls, row: dict):
        return cls.model_validate(dict(row))

    def to_dict(self) -> dict:
        return to_json_value(self.model_dump())
