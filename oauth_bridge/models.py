"""
SQLAlchemy model for the shared result store (multi-instance deployments).
"""
import json
from typing import Any

from sqlalchemy import Float, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class OAuthResultRow(Base):
    __tablename__ = "oauth_results"

    state: Mapped[str] = mapped_column(String(255), primary_key=True)
    # Unique per write; take deletes by it so an overwrite in between is not consumed by mistake
    entry_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    provider: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    tokens: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON object
    error: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Epoch seconds; wall clock since instances share the table
    created_at: Mapped[float] = mapped_column(Float, nullable=False, index=True)

    def get_tokens(self) -> dict[str, Any]:
        return json.loads(self.tokens) if self.tokens else {}
