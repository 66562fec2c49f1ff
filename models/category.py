# models/category.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base


class Category(Base):
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True)
    title = Column(String(250), nullable=False, unique=True, index=True) # Назва з Printful = ключ пошуку
    image = Column(String(250), nullable=False, default="") # Зображення з Printful
    custom_image = Column(String(250), nullable=True) # Власне зображення адміна (має пріоритет)
    state = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    products = relationship("Product", back_populates="category", lazy="raise")

    def __repr__(self):
        return f"<Category(id={self.id}, title='{self.title}')>"
