from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class BookStatus(str, Enum):
    TO_READ = "to_read"
    READING = "reading"
    FINISHED = "finished"
    ABANDONED = "abandoned"


# 终态：必须带 end_date
TERMINAL_STATUSES = frozenset({BookStatus.FINISHED, BookStatus.ABANDONED})

STATUS_CHOICES = ", ".join(s.value for s in BookStatus)


class BookRequest(BaseModel):
    """创建 / 全量更新的请求体；id、start_date、end_date 由服务端决定"""
    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    status: BookStatus | None = None
    category: str = ""
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def empty_status_as_missing(cls, v):
        return None if v == "" else v

    @field_validator("category", "notes", mode="before")
    @classmethod
    def null_text_as_empty(cls, v):
        return "" if v is None else v


class Book(BaseModel):
    id: int | None = None
    title: str
    author: str
    status: BookStatus = BookStatus.TO_READ
    category: str = ""
    notes: str = ""
    start_date: datetime
    end_date: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("category", "notes", mode="before")
    @classmethod
    def null_text_as_empty(cls, v):
        return "" if v is None else v
