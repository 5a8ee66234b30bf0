"""SQLAlchemy models for the storage layer."""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PreviewSessionModel(Base):
    """SQLAlchemy model for admin preview sessions."""

    __tablename__ = "preview_sessions"

    session_id = Column(String, primary_key=True)
    persona = Column(String, nullable=True)
    funnel_stage = Column(String, nullable=True)
    variant_overrides = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to a preview store record.

        Unset columns are left out so the record matches what was saved.
        """
        record: Dict[str, Any] = {}
        if self.persona is not None:
            record["persona"] = self.persona
        if self.funnel_stage is not None:
            record["funnel_stage"] = self.funnel_stage
        if self.variant_overrides:
            record["variant_overrides"] = dict(self.variant_overrides)
        return record

    @classmethod
    def from_dict(cls, session_id: str, data: Dict[str, Any]) -> "PreviewSessionModel":
        """Create model from a preview store record."""
        return cls(
            session_id=session_id,
            persona=data.get("persona"),
            funnel_stage=data.get("funnel_stage"),
            variant_overrides=data.get("variant_overrides") or None,
        )
