# models/product.py
from sqlalchemy import Column, Integer, String, Text, Enum as SQLAlchemyEnum, \
                     ForeignKey, DateTime, Boolean, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum
from .base import Base


class ProductState(str, Enum):
    ACTIVE = 'active'
    DRAFT = 'draft' # Створено вручну, ще не опубліковано
    DISCONTINUED = 'discontinued' # Зник з Printful (м'яке видалення)


class InventoryType(int, Enum):
    UNIT = 1
    VARIANTS = 2


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    remote_id = Column(String(64), unique=True, nullable=True, index=True) # ID товару в Printful (NULL для локальних)
    title = Column(String(250), nullable=False)
    slug = Column(String(1000), nullable=False, index=True)
    sku = Column(String(100), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey('categories.id'), nullable=True, index=True)

    price_eur = Column(Numeric(10, 2), nullable=False, default=0)
    price_usd = Column(Numeric(10, 2), nullable=False, default=0)
    cover_image = Column(String(255), nullable=False, default="") # Ім'я файлу в uploads/product

    description = Column(Text, nullable=True)
    summary = Column(Text, nullable=True)
    tags = Column(Text, nullable=False, default="[]") # JSON-список кольорів
    inventory_type = Column(Integer, nullable=False, default=InventoryType.VARIANTS.value)
    stock = Column(Integer, nullable=False, default=0)

    state = Column(SQLAlchemyEnum(ProductState, name="product_state_enum"), nullable=False,
                   default=ProductState.ACTIVE, index=True)
    printful_ignored = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    category = relationship("Category", back_populates="products", lazy="raise")
    variants = relationship("Variant", back_populates="product", lazy="raise")
    galleries = relationship("Gallery", back_populates="product", lazy="raise")

    def __repr__(self):
        return f"<Product(id={self.id}, remote_id={self.remote_id}, title='{self.title}')>"
