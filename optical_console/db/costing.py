import uuid

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .database import Base


class LensCosting(Base):
    __tablename__ = "lens_costings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    lens_type = Column(String, nullable=False, index=True)
    lens_use = Column(String, nullable=False)  # 'Single Vision' | 'Bifocal' | 'Progressive'
    lens_thickness = Column(Text, nullable=True)
    lens_colour = Column(Text, nullable=True)
    lens_diameter = Column(Text, nullable=True)
    lens_coating = Column(Text, nullable=True)
    supplier = Column(String, nullable=True)

    cost_price_minor = Column(Integer, nullable=True)
    selling_price_minor = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "lens_type": self.lens_type,
            "lens_use": self.lens_use,
            "lens_thickness": self.lens_thickness,
            "lens_colour": self.lens_colour,
            "lens_diameter": self.lens_diameter,
            "lens_coating": self.lens_coating,
            "supplier": self.supplier,
            "cost_price_minor": self.cost_price_minor,
            "selling_price_minor": self.selling_price_minor,
            "cost_price": float(self.cost_price_minor) / 100.0 if self.cost_price_minor is not None else None,
            "selling_price": float(self.selling_price_minor) / 100.0 if self.selling_price_minor is not None else None,
            "notes": self.notes,
            "created_at": self.created_at,
        }
