from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class RegulationType(Base):
    """Seeded catalog entry: Boolean, Threshold or JUnit."""
    __tablename__ = "regulation_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)


class Regulation(Base):
    """Compliance rule attached to exactly one project."""
    __tablename__ = "regulations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(300))
    description: Mapped[str | None] = mapped_column(Text)
    config: Mapped[str | None] = mapped_column(String(500))
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    type_id: Mapped[int] = mapped_column(ForeignKey("regulation_types.id"), nullable=False)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_regulation_project_name"),
    )

    type: Mapped["RegulationType"] = relationship(lazy="joined")
    statuses: Mapped[list["RegulationStatus"]] = relationship(
        back_populates="regulation", cascade="all, delete-orphan", passive_deletes=True,
    )


class RegulationStatus(Base):
    """Latest reported value and/or verdict of one regulation for one version."""
    __tablename__ = "regulation_statuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    regulation_id: Mapped[int] = mapped_column(
        ForeignKey("regulations.id", ondelete="CASCADE"), nullable=False,
    )
    version_id: Mapped[int] = mapped_column(
        ForeignKey("upload_versions.id", ondelete="CASCADE"), nullable=False,
    )
    value: Mapped[str | None] = mapped_column(Text)
    report_details: Mapped[dict | list | str | None] = mapped_column(JSON)
    is_compliant: Mapped[bool | None] = mapped_column(Boolean)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("regulation_id", "version_id", name="regulation_version_unique_constraint"),
    )

    regulation: Mapped["Regulation"] = relationship(back_populates="statuses")
    version = relationship("UploadVersion")
