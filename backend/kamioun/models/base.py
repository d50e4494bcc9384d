"""
Shared model helpers
"""
import uuid

from sqlalchemy import inspect


def new_id() -> str:
    return str(uuid.uuid4())


class SerializerMixin:
    """Column-level dict conversion for API responses"""

    def to_dict(self, exclude=()) -> dict:
        return {
            attr.key: getattr(self, attr.key)
            for attr in inspect(self).mapper.column_attrs
            if attr.key not in exclude
        }
