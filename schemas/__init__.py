"""
Pydantic schemas for the staff export pipeline.

Schemas:
    staff: StaffRecord (one exported row) and StoredProcedure identifiers
    transfer: UploadResult returned by the upload stage

Usage:
    from schemas.staff import StaffRecord, StoredProcedure
    from schemas.transfer import UploadResult

Example:
    record = StaffRecord(f_name="Ada", account_name="Acme", platform_id=42)
    assert record.platform_id == "42"

Validation:
    StaffRecord coerces non-text column values to str and is immutable once
    built. UploadResult requires at least one attempt.
"""

__all__ = [
    "StaffRecord",
    "StoredProcedure",
    "UploadResult",
]
