from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Index,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


# --- Directory: clients, their abbreviations, products ---

class Client(Base):
    __tablename__ = "clients"

    id = Column(String, primary_key=True)  # e.g. "C00013"
    name = Column(String, nullable=False)
    zone = Column(String, nullable=True)
    accounting_mode = Column(String, nullable=True)
    # Habitual packaging size code: "1", "25", "5" or "3"
    default_format = Column(String, nullable=False, default="1")


class ClientAbbreviation(Base):
    """
    One shorthand a driver may type for a client ("aziz", "bgh nasr").

    client_id is deliberately not a foreign key: abbreviation sheets are
    maintained separately and may reference clients that have no full record
    yet. Resolution then falls back to the name stored here.
    """
    __tablename__ = "client_abbreviations"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(String, nullable=False, index=True)
    client_name = Column(String, nullable=False)
    abbreviation = Column(String, nullable=False, unique=True)  # stored lower-cased
    # Table iteration order; fuzzy-match ties go to the lowest position
    position = Column(Integer, nullable=False, default=0)


class Product(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True)  # e.g. "C1L", "F25CLS"
    name = Column(String, nullable=False)
    format = Column(String, nullable=True)  # "1L", "25CL", "5L", "3L"
    is_frozen = Column(Boolean, nullable=False, default=False)
    unit_price = Column(Float, nullable=False, default=0.0)


# --- Order sink: recorded deliveries and returns ---

class Delivery(Base):
    __tablename__ = "deliveries"

    id = Column(Integer, primary_key=True, index=True)
    delivery_ref = Column(String, nullable=False, unique=True)  # "LIV-20260115-1a2b3c4d"
    client_id = Column(String, nullable=True, index=True)
    client_name = Column(String, nullable=False)
    order_type = Column(String, nullable=False, default="delivery")  # delivery/return
    status = Column(String, nullable=False, default="delivered")  # delivered/returned
    total_price = Column(Float, nullable=False, default=0.0)
    source_message = Column(Text, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    items = relationship("DeliveryItem", back_populates="delivery", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_deliveries_type_created_at", "order_type", "created_at"),
    )


class DeliveryItem(Base):
    __tablename__ = "delivery_items"

    id = Column(Integer, primary_key=True, index=True)
    delivery_id = Column(Integer, ForeignKey("deliveries.id"), nullable=False, index=True)
    product_id = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    line_total = Column(Float, nullable=False)

    delivery = relationship("Delivery", back_populates="items")
