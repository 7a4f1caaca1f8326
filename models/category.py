from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from core.db import Base
from models.restaurant import restaurant_categories


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    is_custom = Column(Boolean, default=True, nullable=False)  # False for Cafe, Pub, Restaurant

    restaurants = relationship("Restaurant", secondary=restaurant_categories, back_populates="categories")

    def __repr__(self):
        return f"<Category {self.name}{' (custom)' if self.is_custom else ''}>"
