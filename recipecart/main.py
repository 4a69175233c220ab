import argparse
import logging

from .config import get_settings
from .store import RecipeStore

logger = logging.getLogger(__name__)


def serve():
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "recipecart.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def summary(store):
    recipes = store.list_recipes()
    print(f"Saved {len(recipes)} recipe(s).")
    for r in recipes:
        label = f" [{r.category}]" if r.category else ""
        print(f"- {r.id}: {r.title}{label}")
    items = store.get_shopping_list()
    print(f"Shopping list ({len(items)}):")
    for i, name in enumerate(items, start=1):
        print(f"{i}. {name}")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="recipecart")
    parser.add_argument("command", choices=["serve", "summary"], nargs="?", default="summary")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        serve()
        return
    with RecipeStore.from_url() as store:
        logger.debug("Using database %s", store.engine.url)
        summary(store)


if __name__ == "__main__":
    main()
