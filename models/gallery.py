# models/gallery.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base


class Gallery(Base):
    __tablename__ = 'galleries'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False, index=True)
    image = Column(String(250), nullable=False)
    color = Column(String(100), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="galleries", lazy="raise")
