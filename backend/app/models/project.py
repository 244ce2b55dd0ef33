from app.db import Base, UTCDateTime
from app.models.member import new_id, utcnow
from sqlalchemy import Column, String, func
from sqlalchemy.orm import relationship


class Project(Base):
    __tablename__ = "project"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(80), nullable=False)
    invite_code = Column(String(8), nullable=False, unique=True)
    created_at = Column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        UTCDateTime(),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    memberships = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectMember.joined_at",
    )
    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
