"""
Map source column names onto StaffRecord fields.

Source procedures are not consistent about column naming: the same field
can arrive as "ACCOUNT NAME", "AccountName" or "account_name". Both the
source column and the record field are reduced to a normalized key (spaces
and underscores removed, case folded) and matched on that key.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type
from pydantic import BaseModel
from schemas.staff import StaffRecord
import logging

logger = logging.getLogger(__name__)


def normalize_name(name: Optional[str]) -> str:
    """Strip spaces and underscores, then case-fold. None maps to ''."""
    if not name:
        return ""
    return name.replace(" ", "").replace("_", "").casefold()


class ColumnMapping:
    """
    Read-only lookup from normalized key to record field name.

    Built once at startup and shared by every fetch; it is never mutated
    after construction, so concurrent readers need no locking.
    """

    def __init__(self, model: Type[BaseModel], pairs: Iterable[Tuple[str, str]]):
        self.model = model
        self.pairs: Tuple[Tuple[str, str], ...] = tuple(pairs)
        self._index: Dict[str, str] = dict(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def __contains__(self, column_name: object) -> bool:
        return isinstance(column_name, str) and self.resolve(column_name) is not None

    def resolve(self, column_name: Optional[str]) -> Optional[str]:
        """Return the record field for a source column, or None if unknown"""
        return self._index.get(normalize_name(column_name))

    def map_row(self, row: Mapping[str, Any]) -> BaseModel:
        """
        Build one record from a source row.

        Unknown columns are ignored. When two columns resolve to the same
        field, the later one wins.
        """
        values: Dict[str, Any] = {}
        for column_name, value in row.items():
            field_name = self.resolve(column_name)
            if field_name is None:
                continue
            values[field_name] = value
        return self.model(**values)

    def map_rows(self, rows: Iterable[Mapping[str, Any]]) -> List[BaseModel]:
        return [self.map_row(row) for row in rows]

    def unmapped_columns(self, column_names: Iterable[str]) -> List[str]:
        return [c for c in column_names if self.resolve(c) is None]


def build_column_mapping(model: Type[BaseModel] = StaffRecord) -> ColumnMapping:
    """Build the field table for a record model, in field declaration order."""
    pairs: List[Tuple[str, str]] = []
    seen: Dict[str, str] = {}
    for field_name in model.model_fields:
        key = normalize_name(field_name)
        if key in seen:
            raise ValueError(
                f"Fields {seen[key]!r} and {field_name!r} normalize to the same key {key!r}"
            )
        seen[key] = field_name
        pairs.append((key, field_name))

    logger.debug(f"Built column mapping for {model.__name__} with {len(pairs)} fields")
    return ColumnMapping(model, pairs)
