from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecipeBase(BaseModel):
    title: str = Field(
        ..., json_schema_extra={"example": "Lentil Soup"}
    )
    link: str = Field(
        ..., json_schema_extra={"example": "https://example.com/lentil-soup"}
    )
    category: Optional[str] = Field(
        default=None, json_schema_extra={"example": "soup"}
    )
    steps: Optional[str] = Field(
        default=None,
        json_schema_extra={"example": "Rinse the lentils\nSimmer 30 minutes"},
    )


class RecipeCreate(RecipeBase):
    pass


class Recipe(RecipeBase):
    model_config = ConfigDict(from_attributes=True)

    id: int


class RecipeSave(RecipeCreate):
    ingredients: List[str] = Field(
        default_factory=list,
        json_schema_extra={"example": ["lentils", "onion"]},
    )


class RecipeDetail(Recipe):
    ingredients: List[str] = Field(default_factory=list)
    step_list: List[str] = Field(default_factory=list)


class Ingredient(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    recipe_id: Optional[int] = None
    have: bool = False


class SearchResult(BaseModel):
    title: str
    link: str


class RecipeDetails(BaseModel):
    materials: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)


class ImportRequest(BaseModel):
    title: str
    link: str
    category: Optional[str] = None


class NamesRequest(BaseModel):
    names: List[str] = Field(
        default_factory=list, json_schema_extra={"example": ["lentils"]}
    )


class IdsRequest(BaseModel):
    ids: List[int] = Field(
        default_factory=list, json_schema_extra={"example": [3, 4]}
    )


class HaveRequest(BaseModel):
    name: str
    have: bool = True
