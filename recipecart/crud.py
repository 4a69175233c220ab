"""Single-session statements. Callers own commit and rollback."""
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from . import models, schemas


def get_recipe(db: Session, recipe_id: int):
    return db.query(models.Recipe).filter(models.Recipe.id == recipe_id).first()


def get_recipes(db: Session, category: Optional[str] = None):
    query = db.query(models.Recipe)
    if category is not None:
        query = query.filter(models.Recipe.category == category)
    return query.order_by(models.Recipe.id).all()


def create_recipe(db: Session, recipe: schemas.RecipeCreate):
    db_recipe = models.Recipe(
        title=recipe.title,
        link=recipe.link,
        category=recipe.category,
        steps=recipe.steps,
    )
    db.add(db_recipe)
    db.flush()
    return db_recipe


def delete_recipe(db: Session, recipe_id: int) -> int:
    # ingredients go with it through ON DELETE CASCADE
    return (
        db.query(models.Recipe)
        .filter(models.Recipe.id == recipe_id)
        .delete(synchronize_session=False)
    )


def get_recipe_ingredient_names(db: Session, recipe_id: int) -> List[str]:
    rows = (
        db.query(models.Ingredient.name)
        .filter(models.Ingredient.recipe_id == recipe_id)
        .order_by(models.Ingredient.id)
        .all()
    )
    return [name for (name,) in rows]


def create_ingredients(
    db: Session, recipe_id: Optional[int], names: Iterable[str]
):
    rows = [
        models.Ingredient(name=name, recipe_id=recipe_id, have=False)
        for name in names
    ]
    db.add_all(rows)
    db.flush()
    return rows


def get_needed_ingredients(db: Session):
    return (
        db.query(models.Ingredient)
        .filter(models.Ingredient.have.is_(False))
        .order_by(models.Ingredient.id)
        .all()
    )


def mark_have_by_name(db: Session, name: str) -> int:
    return (
        db.query(models.Ingredient)
        .filter(models.Ingredient.name == name)
        .filter(models.Ingredient.have.is_(False))
        .update({models.Ingredient.have: True}, synchronize_session=False)
    )


def mark_have_by_names(db: Session, names: List[str]) -> int:
    return (
        db.query(models.Ingredient)
        .filter(models.Ingredient.name.in_(names))
        .update({models.Ingredient.have: True}, synchronize_session=False)
    )


def delete_ingredients_by_names(db: Session, names: List[str]) -> int:
    return (
        db.query(models.Ingredient)
        .filter(models.Ingredient.name.in_(names))
        .delete(synchronize_session=False)
    )


def mark_have_by_ids(db: Session, ids: List[int]) -> int:
    return (
        db.query(models.Ingredient)
        .filter(models.Ingredient.id.in_(ids))
        .update({models.Ingredient.have: True}, synchronize_session=False)
    )


def delete_ingredients_by_ids(db: Session, ids: List[int]) -> int:
    return (
        db.query(models.Ingredient)
        .filter(models.Ingredient.id.in_(ids))
        .delete(synchronize_session=False)
    )
