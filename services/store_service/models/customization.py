"""Custom-order requests and social content links."""

from datetime import date
from decimal import Decimal
from typing import Optional

from libs.db.base import Base, TimestampMixin
from services.store_service.models.enums import (
    ContentPlatform,
    CustomizationStatus,
    CustomizationType,
    enum_values,
)
from sqlalchemy import Date
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Customization(TimestampMixin, Base):
    """
    A customer's request for a bespoke arrangement.

    Moves pending -> reviewing -> quoted -> accepted/rejected under admin
    control; an accepted request with a quote converts into one order and
    becomes completed.
    """

    __tablename__ = "customizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[CustomizationType] = mapped_column(
        SAEnum(
            CustomizationType,
            values_callable=enum_values,
            name="customization_type_enum",
        ),
        default=CustomizationType.BOUQUET,
        server_default="bouquet",
        nullable=False,
    )
    occasion: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    preferred_colors: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    budget: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    special_requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[CustomizationStatus] = mapped_column(
        SAEnum(
            CustomizationStatus,
            values_callable=enum_values,
            name="customization_status_enum",
        ),
        default=CustomizationStatus.PENDING,
        server_default="pending",
        nullable=False,
        index=True,
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quoted_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2), nullable=True
    )

    user = relationship("User")

    def __repr__(self):
        return f"<Customization {self.id} status={self.status}>"


class Content(TimestampMixin, Base):
    """Social video links shown on the storefront."""

    __tablename__ = "contents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    platform: Mapped[ContentPlatform] = mapped_column(
        SAEnum(
            ContentPlatform, values_callable=enum_values, name="content_platform_enum"
        ),
        default=ContentPlatform.TIKTOK,
        server_default="tiktok",
        nullable=False,
    )
