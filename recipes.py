"""Recipe catalog ("receitas") operations."""
import logging
from typing import List

from pymongo.database import Database

from database import RECIPES, object_id, to_str_id
from errors import NotFound
from schemas import RecipeRequest, RecipeTitleRequest

logger = logging.getLogger(__name__)


def _find(db: Database, recipe_id: str):
    oid = object_id(recipe_id)
    return db[RECIPES].find_one({"_id": oid}) if oid is not None else None


def create_recipe(db: Database, payload: RecipeRequest) -> dict:
    result = db[RECIPES].insert_one(payload.model_dump())
    return to_str_id(db[RECIPES].find_one({"_id": result.inserted_id}))


def list_recipes(db: Database) -> List[dict]:
    return [to_str_id(r) for r in db[RECIPES].find()]


def get_recipe(db: Database, recipe_id: str) -> dict:
    recipe = _find(db, recipe_id)
    if not recipe:
        raise NotFound("Essa receita não existe!")
    return to_str_id(recipe)


def delete_recipe(db: Database, recipe_id: str) -> None:
    oid = object_id(recipe_id)
    result = db[RECIPES].delete_one({"_id": oid}) if oid is not None else None
    if result is None or result.deleted_count == 0:
        raise NotFound("Essa receita não existe!")


def delete_by_ingredients(db: Database, ingredientes: str) -> int:
    """Delete every recipe whose ingredient list is exactly `ingredientes`."""
    result = db[RECIPES].delete_many({"ingredientes": ingredientes})
    logger.info("Deleted %d recipe(s) with ingredientes=%r", result.deleted_count, ingredientes)
    return result.deleted_count


def update_recipe(db: Database, recipe_id: str, payload: RecipeRequest) -> None:
    # Fields missing from the body are written as null.
    oid = object_id(recipe_id)
    if oid is None:
        raise NotFound("esse item não existe!")
    result = db[RECIPES].update_one(
        {"_id": oid},
        {"$set": {
            "titulo": payload.titulo,
            "preparo": payload.preparo,
            "ingredientes": payload.ingredientes,
        }},
    )
    if result.matched_count == 0:
        raise NotFound("esse item não existe!")


def update_by_ingredients(db: Database, pattern: str, payload: RecipeTitleRequest) -> int:
    """Retitle every recipe whose ingredients match `pattern` (regex, case-insensitive)."""
    result = db[RECIPES].update_many(
        {"ingredientes": {"$regex": pattern, "$options": "i"}},
        {"$set": {"titulo": payload.titulo}},
    )
    return result.modified_count
