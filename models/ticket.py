# models/ticket.py

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _sheet_bool(v: Any) -> bool:
    # Sheets hand back TRUE/FALSE as strings
    if isinstance(v, str):
        return v.strip().lower() in ("true", "yes", "1")
    return bool(v)


class TicketComment(BaseModel):
    author_email: str = ""
    text: str = ""
    timestamp: Optional[str] = None
    is_status_change: bool = False

    @field_validator("is_status_change", mode="before")
    @classmethod
    def parse_status_change(cls, v):
        return _sheet_bool(v)


class Ticket(BaseModel):
    """A Tickets sheet row after column translation."""

    ticket_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    campus: Optional[str] = None
    submitter: Optional[str] = None
    assignee: Optional[str] = None
    date_submitted: Optional[datetime] = None
    is_public: bool = False
    comments: List[TicketComment] = Field(default_factory=list)

    @field_validator(
        "title", "description", "category", "status", "priority", "campus",
        mode="before",
    )
    @classmethod
    def normalize_text(cls, v):
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("submitter", "assignee", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if v is None:
            return None
        text = str(v).strip().lower()
        return text or None

    @field_validator("date_submitted", mode="before")
    @classmethod
    def parse_date(cls, v):
        if v in (None, ""):
            return None
        if not isinstance(v, datetime):
            text = str(v).strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                v = datetime.fromisoformat(text)
            except ValueError:
                return None
        # Always aware so tickets sort together
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("is_public", mode="before")
    @classmethod
    def parse_bool(cls, v):
        return _sheet_bool(v)

    @field_validator("comments", mode="before")
    @classmethod
    def parse_comments(cls, v):
        # Sheets hold the thread as a JSON string
        if v in (None, ""):
            return []
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except ValueError:
                return []
        if not isinstance(v, list):
            return []
        return [
            {
                "author_email": str(c.get("Author_Email") or c.get("author_email") or "").strip().lower(),
                "text": str(c.get("Text") or c.get("text") or ""),
                "timestamp": str(c.get("Timestamp") or c.get("timestamp") or "") or None,
                "is_status_change": _sheet_bool(c.get("IsStatusChange", c.get("is_status_change", False))),
            }
            for c in v
            if isinstance(c, dict)
        ]

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Ticket":
        return cls(
            ticket_id=str(record.get("ticket.id") or ""),
            title=record.get("ticket.title"),
            description=record.get("ticket.description"),
            category=record.get("ticket.category"),
            status=record.get("ticket.status"),
            priority=record.get("ticket.priority"),
            campus=record.get("ticket.campus"),
            submitter=record.get("ticket.submitter"),
            assignee=record.get("ticket.assignee"),
            date_submitted=record.get("ticket.date_submitted"),
            is_public=record.get("ticket.is_public") or False,
            comments=record.get("ticket.comments"),
        )
