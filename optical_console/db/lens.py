import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .database import Base


class Lens(Base):
    """One stocked lens SKU: a power (sph/cyl) plus its descriptive attributes.

    Several rows may share the same (sph, cyl) when their attributes differ,
    e.g. the same power in HC and HMC coatings.
    """
    __tablename__ = "lenses"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_lenses_quantity_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    sph = Column(Numeric(5, 2), nullable=False, index=True)
    cyl = Column(Numeric(5, 2), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)

    lens_type = Column(Text, nullable=True)
    lens_thickness = Column(Text, nullable=True)
    lens_colour = Column(Text, nullable=True)
    lens_diameter = Column(Text, nullable=True)
    lens_coating = Column(Text, nullable=True)

    # Last restock / removal note
    reason = Column(Text, nullable=True)
    details = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "sph": self.sph,
            "cyl": self.cyl,
            "quantity": self.quantity,
            "lens_type": self.lens_type,
            "lens_thickness": self.lens_thickness,
            "lens_colour": self.lens_colour,
            "lens_diameter": self.lens_diameter,
            "lens_coating": self.lens_coating,
            "reason": self.reason,
            "details": self.details,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
