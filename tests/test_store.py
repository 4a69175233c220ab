# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `recipecart` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from recipecart import crud, models, schemas
from recipecart.db import init_db, make_engine
from recipecart.errors import NotFoundError, PersistenceError, ValidationError
from recipecart.store import RecipeStore


@pytest.fixture
def store():
    s = RecipeStore(make_engine("sqlite:///:memory:"))
    yield s
    s.close()


def count_rows(store, model):
    db = store._sessions()
    try:
        return db.query(model).count()
    finally:
        db.close()


def lentil_soup(**overrides):
    data = {"title": "Lentil Soup", "link": "http://x/1", "category": "soup"}
    data.update(overrides)
    return schemas.RecipeCreate(**data)


def test_schema_created_with_both_tables(store):
    tables = set(inspect(store.engine).get_table_names())
    assert {"recipes", "ingredients"} <= tables


def test_init_db_is_idempotent(store):
    rid = store.add_recipe(lentil_soup())
    init_db(store.engine)
    init_db(store.engine)
    assert [r.id for r in store.list_recipes()] == [rid]


def test_scenario_save_shop_mark_delete(store):
    rid = store.add_recipe(lentil_soup())
    assert rid == 1
    store.add_ingredients(1, ["lentils", "onion"])
    assert sorted(store.get_shopping_list()) == ["lentils", "onion"]

    store.mark_and_remove(["lentils"])
    assert store.get_shopping_list() == ["onion"]

    store.delete_recipe(1)
    assert store.get_recipe_ingredients(1) == []


def test_add_recipe_returns_new_ids(store):
    first = store.add_recipe(lentil_soup())
    second = store.add_recipe(lentil_soup(title="Menemen", link="http://x/2"))
    assert second != first
    assert store.get_recipe(second).title == "Menemen"


def test_add_recipe_accepts_mapping(store):
    rid = store.add_recipe({"title": "Pilav", "link": "http://x/3"})
    recipe = store.get_recipe(rid)
    assert recipe.category is None
    assert recipe.steps is None


def test_duplicate_links_are_allowed(store):
    store.add_recipe(lentil_soup())
    store.add_recipe(lentil_soup())
    assert len(store.list_recipes()) == 2


@pytest.mark.parametrize("field", ["title", "link"])
@pytest.mark.parametrize("value", ["", "   "])
def test_add_recipe_rejects_empty_title_or_link(store, field, value):
    with pytest.raises(ValidationError):
        store.add_recipe(lentil_soup(**{field: value}))
    assert count_rows(store, models.Recipe) == 0


def test_add_recipe_rejects_missing_fields(store):
    with pytest.raises(ValidationError):
        store.add_recipe({"title": "No link"})


def test_delete_missing_recipe_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.delete_recipe(42)


def test_delete_cascades_to_ingredients(store):
    keep = store.add_recipe(lentil_soup(title="Keep", link="http://x/keep"))
    gone = store.add_recipe(lentil_soup())
    store.add_ingredients(keep, ["salt"])
    store.add_ingredients(gone, ["lentils", "onion"])
    store.add_ingredients(None, ["milk"])

    store.delete_recipe(gone)

    assert store.get_recipe_ingredients(gone) == []
    assert store.get_recipe_ingredients(keep) == ["salt"]
    assert sorted(store.get_shopping_list()) == ["milk", "salt"]
    assert count_rows(store, models.Ingredient) == 2


def test_get_recipe_missing_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.get_recipe(7)


def test_category_filter_is_exact(store):
    soup = store.add_recipe(lentil_soup(category="soup"))
    store.add_recipe(lentil_soup(category="Soup"))
    store.add_recipe(lentil_soup(category=None))

    found = store.list_recipes("soup")
    assert [r.id for r in found] == [soup]
    assert len(store.list_recipes()) == 3
    assert store.list_recipes("sou") == []


def test_list_recipes_order_is_stable(store):
    ids = [store.add_recipe(lentil_soup(title=f"R{i}")) for i in range(5)]
    assert [r.id for r in store.list_recipes()] == ids
    assert [r.id for r in store.list_recipes()] == ids


def test_recipe_ingredients_for_unknown_recipe_is_empty(store):
    assert store.get_recipe_ingredients(99) == []


def test_add_recipe_with_ingredients(store):
    rid = store.add_recipe_with_ingredients(lentil_soup(), ["lentils", "onion"])
    assert store.get_recipe_ingredients(rid) == ["lentils", "onion"]


def test_add_recipe_with_ingredients_rolls_back_together(store, monkeypatch):
    def broken(db, recipe_id, names):
        raise OperationalError("INSERT INTO ingredients", {}, Exception("disk I/O error"))

    monkeypatch.setattr(crud, "create_ingredients", broken)
    with pytest.raises(PersistenceError):
        store.add_recipe_with_ingredients(lentil_soup(), ["lentils"])
    assert store.list_recipes() == []


def test_manual_ingredients_have_no_recipe(store):
    store.add_ingredients(None, ["milk", "bread"])
    items = store.get_shopping_items()
    assert [i.name for i in items] == ["milk", "bread"]
    assert all(i.recipe_id is None and i.have is False for i in items)


def test_ingredient_for_missing_recipe_is_rejected(store):
    store.add_ingredients(None, ["milk"])
    with pytest.raises(PersistenceError):
        store.add_ingredients(123, ["ghost"])
    assert store.get_shopping_list() == ["milk"]


def test_names_are_stored_verbatim(store):
    store.add_ingredients(None, ["Onion", "onion ", "onion"])
    assert store.get_shopping_list() == ["Onion", "onion ", "onion"]


def test_shopping_list_is_derived_from_have_flag(store):
    rid = store.add_recipe(lentil_soup())
    store.add_ingredients(rid, ["lentils", "onion", "carrot"])
    store.set_have("onion", True)
    assert store.get_shopping_list() == ["lentils", "carrot"]


def test_set_have_keeps_name_if_another_row_still_needed(store):
    a = store.add_recipe(lentil_soup(title="A"))
    store.add_ingredients(a, ["onion"])
    store.set_have("onion", True)
    store.add_ingredients(None, ["onion"])
    assert store.get_shopping_list() == ["onion"]


def test_set_have_matches_every_row_with_the_name(store):
    a = store.add_recipe(lentil_soup(title="A"))
    b = store.add_recipe(lentil_soup(title="B"))
    store.add_ingredients(a, ["onion", "garlic"])
    store.add_ingredients(b, ["onion"])
    store.set_have("onion", True)
    assert store.get_shopping_list() == ["garlic"]


def test_set_have_unknown_name_is_silent(store):
    store.add_ingredients(None, ["milk"])
    store.set_have("caviar", True)
    assert store.get_shopping_list() == ["milk"]


def test_mark_and_remove_removes_rows_across_recipes(store):
    a = store.add_recipe(lentil_soup(title="A"))
    b = store.add_recipe(lentil_soup(title="B"))
    store.add_ingredients(a, ["onion", "lentils"])
    store.add_ingredients(b, ["onion"])
    store.add_ingredients(None, ["milk"])

    store.mark_and_remove(["onion", "milk", "not-on-list"])

    assert store.get_shopping_list() == ["lentils"]
    assert store.get_recipe_ingredients(b) == []
    assert count_rows(store, models.Ingredient) == 1


def test_mark_and_remove_rolls_back_on_failure(store, monkeypatch):
    rid = store.add_recipe(lentil_soup())
    store.add_ingredients(rid, ["lentils", "onion"])
    before = store.get_shopping_items()

    def broken(db, names):
        raise OperationalError("DELETE FROM ingredients", {}, Exception("disk I/O error"))

    monkeypatch.setattr(crud, "delete_ingredients_by_names", broken)
    with pytest.raises(PersistenceError):
        store.mark_and_remove(["lentils", "onion"])

    assert store.get_shopping_items() == before
    assert all(item.have is False for item in store.get_shopping_items())


def test_mark_and_remove_ids_matches_single_row(store):
    a = store.add_recipe(lentil_soup(title="A"))
    b = store.add_recipe(lentil_soup(title="B"))
    store.add_ingredients(a, ["onion"])
    store.add_ingredients(b, ["onion"])
    first = store.get_shopping_items()[0]

    store.mark_and_remove_ids([first.id])

    assert store.get_recipe_ingredients(a) == []
    assert store.get_recipe_ingredients(b) == ["onion"]


def test_mark_and_remove_ids_rolls_back_on_failure(store, monkeypatch):
    store.add_ingredients(None, ["milk"])
    before = store.get_shopping_items()

    def broken(db, ids):
        raise OperationalError("DELETE FROM ingredients", {}, Exception("locked"))

    monkeypatch.setattr(crud, "delete_ingredients_by_ids", broken)
    with pytest.raises(PersistenceError):
        store.mark_and_remove_ids([i.id for i in before])
    assert store.get_shopping_items() == before


def test_empty_inputs_are_noops(store):
    rid = store.add_recipe(lentil_soup())
    store.add_ingredients(rid, ["lentils"])
    recipes, ingredients = count_rows(store, models.Recipe), count_rows(store, models.Ingredient)

    store.add_ingredients(rid, [])
    store.add_ingredients(None, [])
    store.mark_and_remove([])
    store.mark_and_remove_ids([])

    assert count_rows(store, models.Recipe) == recipes
    assert count_rows(store, models.Ingredient) == ingredients


def test_names_with_sql_characters_are_bound(store):
    tricky = "salt'); DROP TABLE ingredients; --"
    store.add_ingredients(None, [tricky, "pepper"])
    store.mark_and_remove([tricky])
    assert store.get_shopping_list() == ["pepper"]


def test_file_database_persists_and_cascades(tmp_path):
    url = f"sqlite:///{tmp_path / 'recipes.db'}"
    with RecipeStore.from_url(url) as first:
        rid = first.add_recipe_with_ingredients(lentil_soup(), ["lentils"])
        first.add_ingredients(None, ["milk"])

    with RecipeStore.from_url(url) as second:
        assert [r.title for r in second.list_recipes()] == ["Lentil Soup"]
        second.delete_recipe(rid)
        assert second.get_shopping_list() == ["milk"]


def test_set_have_false_does_not_put_name_back_on_list(store):
    store.add_ingredients(None, ["milk"])
    store.set_have("milk", True)
    store.set_have("milk", False)
    assert store.get_shopping_list() == []


def test_set_have_false_leaves_needed_rows_needed(store):
    store.add_ingredients(None, ["milk"])
    store.set_have("milk", False)
    items = store.get_shopping_items()
    assert [(i.name, i.have) for i in items] == [("milk", False)]


def test_readding_an_acquired_name_needs_it_again(store):
    store.add_ingredients(None, ["milk"])
    store.set_have("milk", True)
    store.add_ingredients(None, ["milk"])
    assert store.get_shopping_list() == ["milk"]


def test_mark_and_remove_returns_removed_row_count(store):
    a = store.add_recipe(lentil_soup(title="A"))
    store.add_ingredients(a, ["onion", "lentils"])
    store.add_ingredients(None, ["onion"])
    assert store.mark_and_remove(["onion", "caviar"]) == 2
    assert store.mark_and_remove(["caviar"]) == 0
    assert store.mark_and_remove([]) == 0


def test_mark_and_remove_ids_returns_removed_row_count(store):
    store.add_ingredients(None, ["milk", "bread"])
    ids = [i.id for i in store.get_shopping_items()]
    assert store.mark_and_remove_ids(ids + [999]) == 2
    assert store.mark_and_remove_ids([]) == 0
