"""
Note data models for SmartStudy
"""
from pydantic import BaseModel, Field
from typing import Optional, List

from smartstudy.models.common import new_id, utc_timestamp


class Note(BaseModel):
    """A text note owned by one user"""
    id: str = Field(default_factory=new_id)
    title: str = Field(..., description="Note title")
    content: str = Field(default="", description="Note body")
    user_id: str = Field(..., description="Owner id, used purely as a lookup key")
    created_at: str = Field(default_factory=utc_timestamp)
    updated_at: str = Field(default_factory=utc_timestamp)


# API Request/Response models
class CreateNoteRequest(BaseModel):
    """Request to create a note"""
    title: str = Field(..., description="Note title")
    content: str = Field(default="", description="Note body")


class UpdateNoteRequest(BaseModel):
    """Partial note update, unset fields are left alone"""
    title: Optional[str] = None
    content: Optional[str] = None


class NoteResponse(BaseModel):
    """Response wrapping a single note"""
    success: bool
    note: Optional[Note] = None
    message: str


class ListNotesResponse(BaseModel):
    """Response listing the user's notes"""
    success: bool
    notes: List[Note]
    total_count: int
