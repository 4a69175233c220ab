import logging
from pathlib import Path

from recipecart.errors import RecipeCartError
from recipecart.recipes import load_recipes
from recipecart.store import RecipeStore

logger = logging.getLogger(__name__)


def import_recipes(store, data):
    """Save seed recipes that are not stored yet. Returns how many were added."""
    existing = {r.link for r in store.list_recipes()}
    added = 0
    for r in data:
        title = r.get('title')
        link = r.get('link')
        if not title or not link:
            continue
        if link in existing:
            continue
        recipe = {
            'title': title,
            'link': link,
            'category': r.get('category'),
            'steps': r.get('steps'),
        }
        try:
            store.add_recipe_with_ingredients(recipe, r.get('ingredients', []))
        except RecipeCartError as e:
            logger.warning("Skipping %s: %s", title, e)
            continue
        existing.add(link)
        added += 1
    return added


def main():
    logging.basicConfig(level=logging.INFO)
    p = Path(__file__).resolve().parents[1] / 'data' / 'recipes.json'
    if not p.exists():
        print('data/recipes.json not found')
        return
    with RecipeStore.from_url() as store:
        added = import_recipes(store, load_recipes(p))
    print(f'Imported {added} recipes')


if __name__ == '__main__':
    main()
