# models/variant_option.py
import json
from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class VariantOption(Base):
    """Пара ключ/значення конфігурації варіанту (напр. stitch_color)."""
    __tablename__ = 'options'

    id = Column(Integer, primary_key=True)
    variant_id = Column(Integer, ForeignKey('variants.id'), nullable=False, index=True)
    option_key = Column(String(100), nullable=False)
    value = Column(Text, nullable=False, default="") # Списки зберігаються як JSON

    variant = relationship("Variant", back_populates="options", lazy="raise")

    @staticmethod
    def serialize_value(value) -> str:
        if isinstance(value, (list, dict)):
            return json.dumps(value)
        if value is None:
            return ""
        return str(value)
