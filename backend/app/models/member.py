import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, func

from app.db import Base, UTCDateTime


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Member(Base):
    __tablename__ = "member"

    id = Column(String(32), primary_key=True, default=new_id)
    display_name = Column(String(40), nullable=False)
    created_at = Column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        UTCDateTime(),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
