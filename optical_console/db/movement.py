import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .database import Base


class LensMovement(Base):
    """Append-only ledger of stock deltas written by the grid."""
    __tablename__ = "lens_movements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    lens_id = Column(
        UUID(as_uuid=True),
        ForeignKey("lenses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Copied from the lens so the ledger survives lens deletion
    sph = Column(Numeric(5, 2), nullable=False)
    cyl = Column(Numeric(5, 2), nullable=False)

    change = Column(Integer, nullable=False)
    source = Column(Text, nullable=False)  # 'grid_add' | 'grid_remove'
    reason = Column(Text, nullable=True)
    details = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "lens_id": self.lens_id,
            "sph": self.sph,
            "cyl": self.cyl,
            "change": self.change,
            "source": self.source,
            "reason": self.reason,
            "details": self.details,
            "created_at": self.created_at,
        }
