from sqlalchemy import Column, Integer, String, Float, Text, DateTime
from sqlalchemy.sql import func

from inventory.database import Base


class Product(Base):
    """
    Product model representing one catalog item.

    Attributes:
        id: Unique identifier assigned by the database
        name: Product name
        description: Free text description
        price: Unit price (non-negative)
        stock: Units on hand (non-negative integer)
        image: URL or server-relative path of the product image
        status: Catalog status, "Active" unless told otherwise
        product_code: Short SKU code
        file_name: Name of the uploaded file backing ``image``, if any
        last_update: Timestamp of the last write. There is no separate
            creation timestamp.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=True)
    location = Column(String(100), nullable=True)
    image = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="Active")
    brand = Column(String(100), nullable=True)
    sizes = Column(String(100), nullable=True)
    product_code = Column(String(50), nullable=True, index=True)
    order_name = Column(String(255), nullable=True)
    store_availability = Column(String(255), nullable=True)
    file_type = Column(String(100), nullable=True)
    file_name = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    last_update = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"
