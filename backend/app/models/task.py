from app.db import Base, UTCDateTime
from app.models.member import new_id, utcnow
from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship


class Task(Base):
    __tablename__ = "task"

    id = Column(String(32), primary_key=True, default=new_id)
    project_id = Column(String(32), ForeignKey("project.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(8), nullable=False, default="TODO", server_default="TODO")
    # position inside the (project_id, status) column; not unique, gaps allowed
    order = Column(Integer, nullable=False, default=0, server_default="0")
    due_date = Column(UTCDateTime(), nullable=True)
    assignee_id = Column(String(32), ForeignKey("member.id", ondelete="SET NULL"), nullable=True)
    creator_id = Column(String(32), ForeignKey("member.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        UTCDateTime(),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    project = relationship("Project", back_populates="tasks")
    assignee = relationship("Member", foreign_keys=[assignee_id])
    creator = relationship("Member", foreign_keys=[creator_id])

    __table_args__ = (
        Index("ix_task_project_status_order", "project_id", "status", "order"),
        Index("ix_task_assignee_id", "assignee_id"),
    )
