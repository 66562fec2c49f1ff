# models/variant.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base


class Variant(Base):
    """
    Варіант товару ("Variedad"): конкретний розмір/колір, який кладуть у кошик.
    Ключ звірки з Printful - `sku` в межах товару.
    """
    __tablename__ = 'variants'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False, index=True)
    remote_id = Column(String(64), nullable=True, index=True) # ID sync-варіанту в Printful
    catalog_variant_id = Column(Integer, nullable=True, index=True) # variant_id каталогу Printful

    value = Column(String(100), nullable=False, default="") # Розмір
    color = Column(String(100), nullable=True)
    stock = Column(Integer, nullable=False, default=0)

    retail_price = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(10), nullable=True)
    sku = Column(String(100), nullable=False)
    name = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    product = relationship("Product", back_populates="variants", lazy="raise")
    link = relationship("ProductVariantLink", back_populates="variant", uselist=False, lazy="raise")
    files = relationship("VariantFile", back_populates="variant", lazy="raise")
    options = relationship("VariantOption", back_populates="variant", lazy="raise")

    __table_args__ = (
        UniqueConstraint("product_id", "sku", name="uq_variant_product_sku"),
    )

    def __repr__(self):
        return f"<Variant(id={self.id}, product_id={self.product_id}, sku='{self.sku}')>"


class ProductVariantLink(Base):
    """Допоміжний рядок 1:1 до варіанту з даними зображення каталогу Printful."""
    __tablename__ = 'product_variants'

    id = Column(Integer, primary_key=True)
    variant_id = Column(Integer, ForeignKey('variants.id'), nullable=False, unique=True, index=True)
    catalog_variant_id = Column(Integer, nullable=True)
    catalog_product_id = Column(Integer, nullable=True)
    image = Column(String(500), nullable=True)
    name = Column(String(255), nullable=True)

    variant = relationship("Variant", back_populates="link", lazy="raise")
