"""Store catalog models: categories and products."""

from decimal import Decimal
from typing import Optional

from libs.db.base import Base, TimestampMixin
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Category(TimestampMixin, Base):
    """Product categories (e.g., 'Bouquets', 'Single Stems', 'Gift Boxes')."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    products = relationship(
        "Product", back_populates="category", passive_deletes=True
    )

    def __repr__(self):
        return f"<Category {self.name}>"


class Product(TimestampMixin, Base):
    """Handmade flower products."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    stock: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (CheckConstraint("stock >= 0", name="stock_non_negative"),)

    category = relationship("Category", back_populates="products")

    @property
    def category_name(self) -> Optional[str]:
        # Callers must eager-load ``category``.
        return self.category.name if self.category else None

    def __repr__(self):
        return f"<Product {self.name} stock={self.stock}>"
