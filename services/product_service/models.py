from sqlalchemy import Column, Integer, String
from shared.config.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    description = Column(String(500), nullable=False, default="")

    def __repr__(self):
        return f"<Product {self.id} {self.name}>"
