"""
Pydantic schema for exported staff records
"""

from pydantic import BaseModel, validator
from typing import Any, Optional
import enum


class StoredProcedure(str, enum.Enum):
    """
    Logical identifiers for source stored procedures.

    The value is the database object name, the member name is what
    configuration may refer to instead.
    """
    dbo_usp_GetProviderListGainsight = "dbo.usp_GetProviderListGainsight"


class StaffRecord(BaseModel):
    """
    One staff/provider row exported to Gainsight.

    Every field is optional: upstream data is frequently incomplete and a
    missing value must never abort the export.
    """

    f_name: Optional[str] = None
    l_name: Optional[str] = None
    email: Optional[str] = None
    account_name: Optional[str] = None
    product: Optional[str] = None
    platform_id: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None

    @validator("*", pre=True)
    def coerce_text(cls, v: Any) -> Optional[str]:
        """Store numeric or other scalar column values as text"""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    class Config:
        frozen = True
        extra = "ignore"
