# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Pydantic request and response bodies.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""
from typing import List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ── Status submission (tagged on is_leave) ──

class ResponseItem(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = ""


class _SubmissionBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)
    date: str = Field(..., description="ISO date, YYYY-MM-DD")


class LeaveSubmission(_SubmissionBase):
    is_leave: Literal[True] = Field(..., validation_alias=AliasChoices("is_leave", "isLeave"))
    leave_reason: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("leave_reason", "leaveReason")
    )


class ResponsesSubmission(_SubmissionBase):
    is_leave: Literal[False] = Field(
        default=False, validation_alias=AliasChoices("is_leave", "isLeave")
    )
    responses: List[ResponseItem] = []


SubmissionRequest = Union[LeaveSubmission, ResponsesSubmission]


class ResponseOut(BaseModel):
    question_id: str
    question_text: Optional[str] = None
    answer: str


class RecordOut(BaseModel):
    id: str
    team_id: str
    team_name: Optional[str] = None
    user_id: str
    user_name: Optional[str] = None
    date: str
    is_leave: bool
    leave_reason: Optional[str] = None
    responses: List[ResponseOut] = []
    submitted_by: str
    submitted_at: str
    created_at: str


class SubmissionResult(BaseModel):
    created: bool
    record: RecordOut


class RecordLookup(BaseModel):
    record: Optional[RecordOut] = None
    can_edit: bool


# ── Questions ──

class QuestionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1, max_length=2000)
    is_common: bool = Field(default=False, validation_alias=AliasChoices("is_common", "isCommon"))
    teams: List[str] = []
    order: int = 0


class QuestionUpdate(BaseModel):
    """Partial update model for PATCH /api/v1/questions/{id}."""
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = Field(default=None, max_length=2000)
    is_common: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("is_common", "isCommon")
    )
    teams: Optional[List[str]] = None
    order: Optional[int] = None
    active: Optional[bool] = None


class QuestionOut(BaseModel):
    id: str
    text: str
    is_common: bool
    teams: List[str] = []
    order: int
    active: bool
    created_by: Optional[str] = None
    created_at: str
    updated_at: str


# ── Reports ──

class LeaveEntryOut(BaseModel):
    team: str
    user: str
    date: str
    reason: Optional[str] = None


class ReportPreview(BaseModel):
    start_date: str
    end_date: str
    header: List[str]
    rows: List[List[str]]
    leave: List[LeaveEntryOut] = []


class MemberOption(BaseModel):
    id: str
    name: str


class TeamOption(BaseModel):
    id: str
    name: str
    members: List[MemberOption] = []


# ── Misc ──

class ActorOut(BaseModel):
    id: str
    name: str
    role: str

