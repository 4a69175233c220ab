import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from . import schemas, source
from .errors import FetchError, NotFoundError, PersistenceError, ValidationError
from .store import RecipeStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One store per process, opened at startup
    store = RecipeStore.from_url()
    app.state.store = store
    logger.info("Recipe store opened at %s", store.engine.url)
    yield
    store.close()


app = FastAPI(lifespan=lifespan)

# Allow CORS for API clients (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store(request: Request) -> RecipeStore:
    return request.app.state.store


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


app.add_exception_handler(ValidationError, _error_handler(422))
app.add_exception_handler(NotFoundError, _error_handler(404))
app.add_exception_handler(PersistenceError, _error_handler(500))
app.add_exception_handler(FetchError, _error_handler(502))


def _clean_names(names: List[str]) -> List[str]:
    # the store keeps names verbatim, so blank entries are dropped here
    return [n.strip() for n in names if n and n.strip()]


@app.get("/api/search", response_model=List[schemas.SearchResult])
def search_recipes(q: str):
    return source.search(q)


@app.post("/api/recipes/import", response_model=schemas.RecipeDetail)
def import_recipe(payload: schemas.ImportRequest, store: RecipeStore = Depends(get_store)):
    details = source.fetch_details(payload.link)
    recipe = schemas.RecipeCreate(
        title=payload.title,
        link=payload.link,
        category=payload.category or None,
        steps="\n".join(details.steps) or None,
    )
    rid = store.add_recipe_with_ingredients(recipe, _clean_names(details.materials))
    logger.info("Saved recipe %s (%s)", rid, payload.title)
    return _detail(store, rid)


@app.post("/api/recipes", response_model=schemas.RecipeDetail)
def create_recipe(payload: schemas.RecipeSave, store: RecipeStore = Depends(get_store)):
    recipe = schemas.RecipeCreate(**payload.model_dump(exclude={"ingredients"}))
    rid = store.add_recipe_with_ingredients(recipe, _clean_names(payload.ingredients))
    return _detail(store, rid)


@app.get("/api/recipes", response_model=List[schemas.Recipe])
def list_recipes(category: Optional[str] = None, store: RecipeStore = Depends(get_store)):
    return store.list_recipes(category)


def _detail(store: RecipeStore, recipe_id: int) -> schemas.RecipeDetail:
    recipe = store.get_recipe(recipe_id)
    return schemas.RecipeDetail(
        **recipe.model_dump(),
        ingredients=store.get_recipe_ingredients(recipe_id),
        step_list=[s for s in (recipe.steps or "").split("\n") if s],
    )


@app.get("/api/recipes/{recipe_id}", response_model=schemas.RecipeDetail)
def get_recipe(recipe_id: int, store: RecipeStore = Depends(get_store)):
    return _detail(store, recipe_id)


@app.delete("/api/recipes/{recipe_id}")
def delete_recipe(recipe_id: int, store: RecipeStore = Depends(get_store)):
    store.delete_recipe(recipe_id)
    logger.info("Deleted recipe %s", recipe_id)
    return {"deleted": True}


@app.get("/api/shopping-list")
def shopping_list(store: RecipeStore = Depends(get_store)):
    return {"items": store.get_shopping_list()}


@app.post("/api/shopping-list")
def add_to_shopping_list(payload: schemas.NamesRequest, store: RecipeStore = Depends(get_store)):
    names = _clean_names(payload.names)
    store.add_ingredients(None, names)
    return {"added": len(names)}


@app.post("/shopping-list")
def add_to_shopping_list_form(ingredients: str = Form(''), store: RecipeStore = Depends(get_store)):
    # Receive newline-separated ingredients from a textarea
    store.add_ingredients(None, _clean_names(ingredients.split('\n')))
    return RedirectResponse(url="/api/shopping-list", status_code=303)


@app.post("/api/shopping-list/mark")
def mark_bought(payload: schemas.NamesRequest, store: RecipeStore = Depends(get_store)):
    return {"removed": store.mark_and_remove(payload.names)}


@app.post("/api/shopping-list/mark-ids")
def mark_bought_by_id(payload: schemas.IdsRequest, store: RecipeStore = Depends(get_store)):
    return {"removed": store.mark_and_remove_ids(payload.ids)}


@app.get("/api/shopping-list/items", response_model=List[schemas.Ingredient])
def shopping_items(store: RecipeStore = Depends(get_store)):
    return store.get_shopping_items()


@app.post("/api/ingredients/have")
def set_have(payload: schemas.HaveRequest, store: RecipeStore = Depends(get_store)):
    # have=false is ignored: re-add the name to need it again
    store.set_have(payload.name, payload.have)
    return {"name": payload.name, "have": payload.have}
