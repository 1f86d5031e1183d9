"""Key-value row holding one persisted blob (rooms, readings, a setting)."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rentledger.models import Base, TimestampMixin


class StoredValue(Base, TimestampMixin):
    """One logical key and its structured-text value."""

    __tablename__ = "stored_values"

    key: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        comment="Logical key (e.g. 'rooms', 'readings', 'globalElecRate')",
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Whole-value blob (JSON text or plain string)",
    )

    def __repr__(self) -> str:
        return f"<StoredValue(key={self.key}, size={len(self.value or '')})>"


__all__ = ["StoredValue"]
