from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from config import DELETE_PASSWORD_MAX_BYTES


def require_text(v, field_name: str):
    if v is None or not v.strip():
        raise ValueError(f'{field_name} is required')
    try:
        v.encode('utf-8')
    except UnicodeEncodeError:
        raise ValueError(f'{field_name} is not valid UTF-8 text')
    return v


def validate_password_length(v):
    v = require_text(v, 'Delete password')
    if len(v.encode('utf-8')) > DELETE_PASSWORD_MAX_BYTES:
        raise ValueError(f'Delete password must be at most {DELETE_PASSWORD_MAX_BYTES} bytes')
    return v


class ThreadCreate(BaseModel):
    text: str
    delete_password: str

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        return require_text(v, 'Text')

    @field_validator('delete_password')
    @classmethod
    def validate_delete_password(cls, v):
        return validate_password_length(v)


class ThreadReport(BaseModel):
    thread_id: Optional[str] = None
    report_id: Optional[str] = None

    @property
    def target_id(self) -> Optional[str]:
        # older clients send report_id
        return self.thread_id or self.report_id


class ThreadDelete(BaseModel):
    thread_id: str
    delete_password: Optional[str] = None


class ReplyCreate(BaseModel):
    thread_id: str
    text: str
    delete_password: str

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        return require_text(v, 'Text')

    @field_validator('delete_password')
    @classmethod
    def validate_delete_password(cls, v):
        return validate_password_length(v)


class ReplyReport(BaseModel):
    thread_id: str
    reply_id: str


class ReplyDelete(BaseModel):
    thread_id: str
    reply_id: str
    delete_password: Optional[str] = None


class ReplyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias='_id')
    text: str
    created_on: datetime


class ThreadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias='_id')
    text: str
    created_on: datetime
    bumped_on: datetime
    replies: List[ReplyResponse]


class ThreadSummaryResponse(ThreadResponse):
    replycount: int
