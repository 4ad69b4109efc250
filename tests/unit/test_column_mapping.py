"""
Unit tests for column-name normalization and row mapping
"""

import pytest
from pydantic import BaseModel
from typing import Optional
from export.transformers.column_mapping import (
    ColumnMapping,
    build_column_mapping,
    normalize_name,
)
from schemas.staff import StaffRecord


class TestNormalizeName:
    """Test the normalized comparison key"""

    @pytest.mark.parametrize("name", ["ACCOUNT NAME", "AccountName", "account_name", "Account_ Name"])
    def test_account_name_variants_are_equivalent(self, name):
        assert normalize_name(name) == "accountname"

    def test_empty_and_none(self):
        assert normalize_name(None) == ""
        assert normalize_name("") == ""

    def test_only_spaces_and_underscores_removed(self):
        assert normalize_name("PLATFORM-ID") == "platform-id"
        assert normalize_name("  e_mail  ") == "email"


class TestColumnMapping:
    """Test mapping source rows to StaffRecord"""

    def test_mapping_covers_every_record_field(self, column_mapping):
        assert len(column_mapping) == 9
        assert [field for _, field in column_mapping.pairs] == list(StaffRecord.model_fields)

    def test_resolve_variants_to_same_field(self, column_mapping):
        for column in ("ACCOUNT NAME", "AccountName", "account_name"):
            assert column_mapping.resolve(column) == "account_name"
        assert column_mapping.resolve("FName") == "f_name"
        assert column_mapping.resolve("PLATFORM ID") == "platform_id"

    def test_unknown_column_is_not_resolved(self, column_mapping):
        assert column_mapping.resolve("LegacyColumn") is None
        assert "LegacyColumn" not in column_mapping
        assert "Email" in column_mapping

    def test_variant_rows_populate_fields_identically(self, column_mapping):
        rows = [
            {"ACCOUNT NAME": "Acme"},
            {"AccountName": "Acme"},
            {"account_name": "Acme"},
        ]
        records = column_mapping.map_rows(rows)

        assert {r.account_name for r in records} == {"Acme"}
        assert records[0] == records[1] == records[2]

    def test_map_row_ignores_unknown_columns(self, column_mapping):
        record = column_mapping.map_row({"Email": "a@example.com", "Extra": "x"})

        assert record.email == "a@example.com"
        assert record.f_name is None

    def test_map_row_with_missing_fields(self, column_mapping):
        record = column_mapping.map_row({})
        assert record == StaffRecord()

    def test_later_duplicate_column_wins(self, column_mapping):
        record = column_mapping.map_row({"Role": "first", "ROLE": "second"})
        assert record.role == "second"

    def test_non_text_values_become_text(self, column_mapping):
        record = column_mapping.map_row({"PLATFORM ID": 1001})
        assert record.platform_id == "1001"

    def test_mixed_rows_preserve_order(self, staff_records):
        assert [r.l_name for r in staff_records] == ["Lovelace", "Hopper", "Turing"]
        assert [r.account_name for r in staff_records] == [
            "Analytical Engines",
            "Navy Labs",
            "Bletchley, Park",
        ]
        assert staff_records[1].phone is None
        assert staff_records[2].role is None

    def test_unmapped_columns(self, column_mapping):
        assert column_mapping.unmapped_columns(["Email", "Legacy", "x_y"]) == ["Legacy", "x_y"]


class TestBuildColumnMapping:
    """Test mapping construction"""

    def test_colliding_field_names_rejected(self):
        class Ambiguous(BaseModel):
            account_name: Optional[str] = None
            accountname: Optional[str] = None

        with pytest.raises(ValueError):
            build_column_mapping(Ambiguous)

    def test_custom_model(self):
        class Minimal(BaseModel):
            full_name: Optional[str] = None

        mapping = build_column_mapping(Minimal)

        assert isinstance(mapping, ColumnMapping)
        assert mapping.map_row({"FULL NAME": "Ada"}).full_name == "Ada"
