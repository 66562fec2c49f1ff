# models/variant_file.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base

PREVIEW_FILE_TYPE = "preview"


class VariantFile(Base):
    """Файл дизайну/друку або прев'ю, прив'язаний до варіанту."""
    __tablename__ = 'files'

    id = Column(Integer, primary_key=True)
    variant_id = Column(Integer, ForeignKey('variants.id'), nullable=False, index=True)
    remote_id = Column(Integer, nullable=True) # id файлу в Printful
    type = Column(String(50), nullable=False, default="default")
    hash = Column(String(100), nullable=True)
    url = Column(Text, nullable=True)
    filename = Column(String(255), nullable=True)
    mime_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    dpi = Column(Integer, nullable=True)
    status = Column(String(50), nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    preview_url = Column(Text, nullable=True)
    visible = Column(Boolean, nullable=False, default=True)
    is_temporary = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    variant = relationship("Variant", back_populates="files", lazy="raise")
