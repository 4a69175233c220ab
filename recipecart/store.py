"""The recipe store.

Owns recipes, their ingredients and the have/need flag of every ingredient.
The shopping list is never stored: it is read back from the ingredient
table on every call.

Ingredient matching in ``set_have`` and ``mark_and_remove`` is by exact
name, so rows with the same name across different recipes act as a single
shopping-list entry. ``mark_and_remove_ids`` matches by row id instead.
"""
from contextlib import contextmanager
from typing import Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as SchemaError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from . import crud, schemas
from .config import get_settings
from .db import init_db, make_engine, make_session_factory
from .errors import NotFoundError, PersistenceError, ValidationError

RecipeInput = Union[schemas.RecipeBase, Mapping]


class RecipeStore:
    """Persistent recipes and shopping list backed by a SQLAlchemy engine.

    One store is meant to be the only writer of its database for the life
    of the process. Every public method runs in its own session and either
    commits or rolls back before returning.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = make_session_factory(engine)
        try:
            init_db(engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"could not initialise schema: {exc}") from exc

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "RecipeStore":
        return cls(make_engine(url or get_settings().db_url))

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "RecipeStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def _transaction(self):
        db = self._sessions()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(str(exc)) from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # recipes

    @staticmethod
    def _validate_recipe(recipe: RecipeInput) -> schemas.RecipeCreate:
        try:
            if isinstance(recipe, schemas.RecipeBase):
                data = schemas.RecipeCreate.model_validate(recipe.model_dump())
            else:
                data = schemas.RecipeCreate.model_validate(recipe)
        except SchemaError as exc:
            raise ValidationError(str(exc)) from exc
        if not data.title or not data.title.strip():
            raise ValidationError("recipe title must not be empty")
        if not data.link or not data.link.strip():
            raise ValidationError("recipe link must not be empty")
        return data

    def add_recipe(self, recipe: RecipeInput) -> int:
        """Insert a recipe and return its new id."""
        data = self._validate_recipe(recipe)
        with self._transaction() as db:
            return crud.create_recipe(db, data).id

    def add_recipe_with_ingredients(
        self, recipe: RecipeInput, names: Iterable[str]
    ) -> int:
        """Insert a recipe and its ingredients in one transaction."""
        data = self._validate_recipe(recipe)
        names = list(names)
        with self._transaction() as db:
            recipe_id = crud.create_recipe(db, data).id
            if names:
                crud.create_ingredients(db, recipe_id, names)
            return recipe_id

    def delete_recipe(self, recipe_id: int) -> None:
        """Delete a recipe and, by cascade, every ingredient it owns."""
        with self._transaction() as db:
            if crud.delete_recipe(db, recipe_id) == 0:
                raise NotFoundError(f"recipe {recipe_id} does not exist")

    def get_recipe(self, recipe_id: int) -> schemas.Recipe:
        with self._transaction() as db:
            row = crud.get_recipe(db, recipe_id)
            if row is None:
                raise NotFoundError(f"recipe {recipe_id} does not exist")
            return schemas.Recipe.model_validate(row)

    def list_recipes(self, category: Optional[str] = None) -> List[schemas.Recipe]:
        """Return recipes in id order, optionally those whose category equals
        `category` exactly."""
        with self._transaction() as db:
            return [
                schemas.Recipe.model_validate(row)
                for row in crud.get_recipes(db, category)
            ]

    def get_recipe_ingredients(self, recipe_id: int) -> List[str]:
        with self._transaction() as db:
            return crud.get_recipe_ingredient_names(db, recipe_id)

    # ingredients and the shopping list

    def add_ingredients(
        self, recipe_id: Optional[int], names: Iterable[str]
    ) -> None:
        """Add one needed ingredient per name.

        A `recipe_id` of None adds manual shopping-list entries. Names are
        stored as given.
        """
        names = list(names)
        if not names:
            return
        with self._transaction() as db:
            crud.create_ingredients(db, recipe_id, names)

    def get_shopping_list(self) -> List[str]:
        with self._transaction() as db:
            return [row.name for row in crud.get_needed_ingredients(db)]

    def get_shopping_items(self) -> List[schemas.Ingredient]:
        with self._transaction() as db:
            return [
                schemas.Ingredient.model_validate(row)
                for row in crud.get_needed_ingredients(db)
            ]

    def set_have(self, name: str, have: bool) -> None:
        """Set the have flag on every row named `name`.

        The flag only moves from needed to acquired. `have=False` leaves the
        rows alone; to need an ingredient again, add it with add_ingredients.
        """
        if not have:
            return
        with self._transaction() as db:
            crud.mark_have_by_name(db, name)

    def mark_and_remove(self, names: Iterable[str]) -> int:
        """Mark every ingredient named in `names` as bought and remove it.

        Both steps share one transaction: on any failure nothing changes and
        PersistenceError is raised. Returns the number of rows removed.
        """
        names = list(dict.fromkeys(names))
        if not names:
            return 0
        with self._transaction() as db:
            crud.mark_have_by_names(db, names)
            return crud.delete_ingredients_by_names(db, names)

    def mark_and_remove_ids(self, ingredient_ids: Iterable[int]) -> int:
        """Like mark_and_remove, matching ingredient rows by id."""
        ids = list(dict.fromkeys(ingredient_ids))
        if not ids:
            return 0
        with self._transaction() as db:
            crud.mark_have_by_ids(db, ids)
            return crud.delete_ingredients_by_ids(db, ids)
