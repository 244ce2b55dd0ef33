from app.db import Base, UTCDateTime
from app.models.member import Member, utcnow
from app.models.project import Project
from sqlalchemy import Column, ForeignKey, Index, String, func
from sqlalchemy.orm import relationship


class ProjectMember(Base):
    __tablename__ = "project_member"

    project_id = Column(String(32), ForeignKey("project.id", ondelete="CASCADE"), primary_key=True)
    member_id = Column(String(32), ForeignKey("member.id", ondelete="CASCADE"), primary_key=True)
    role = Column(String(16), nullable=False, default="MEMBER", server_default="MEMBER")
    joined_at = Column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)

    project = relationship(Project, back_populates="memberships")
    member = relationship(Member, backref="project_memberships")

    __table_args__ = (Index("ix_project_member_member_id", "member_id"),)
