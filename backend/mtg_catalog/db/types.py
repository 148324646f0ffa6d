"""
Column types that translate typed Python collections at the storage boundary.
"""
import json
from typing import Any, Optional

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


class JSONSet(TypeDecorator):
    """
    Stores a ``frozenset`` of strings as a sorted JSON array.

    Sorting keeps the serialized form stable, so re-syncing identical data
    writes identical text.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[Any], dialect) -> str:
        if value is None:
            return "[]"
        return json.dumps(sorted(set(value)))

    def process_result_value(self, value: Optional[str], dialect) -> frozenset[str]:
        if not value:
            return frozenset()
        return frozenset(json.loads(value))
