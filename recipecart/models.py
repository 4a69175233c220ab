from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
# relationship not used; deletes cascade in the database

from .db import Base


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(300), nullable=False)
    link = Column(String(500), nullable=False)  # not unique, duplicates allowed
    category = Column(String(100), nullable=True, index=True)
    steps = Column(Text, nullable=True)  # newline-joined


class Ingredient(Base):
    __tablename__ = "ingredients"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(500), nullable=False, index=True)
    # NULL for entries added straight to the shopping list
    recipe_id = Column(
        Integer,
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    have = Column(Boolean, nullable=False, default=False, server_default="0")
