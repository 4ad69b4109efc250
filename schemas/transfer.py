"""
Pydantic schema describing the outcome of the upload stage
"""

from pydantic import BaseModel, Field
from typing import Optional


class UploadResult(BaseModel):
    """
    Outcome of an upload that may have needed several attempts.

    last_exception is only populated when every attempt failed and at least
    one of them raised.
    """

    success: bool
    attempts_made: int = Field(..., ge=1)
    last_exception: Optional[BaseException] = None

    class Config:
        frozen = True
        arbitrary_types_allowed = True
