# brewlab_backend/app/db/seed.py
# One-time import of the legacy seed catalogue into the SQL store.
import logging
from typing import List, Optional

from sqlalchemy.engine import Engine

from brewlab_backend.app.schemas import Recipe
from brewlab_backend.app.services.legacy_cards import build_seed_recipes
from .session import build_engine
from .store import SqlRecipeStore

log = logging.getLogger("brewlab.seed")

def seed_recipes(engine: Engine, recipes: Optional[List[Recipe]] = None) -> List[str]:
    """
    Upsert every seed recipe (same ids, so re-running is idempotent).
    Seed timestamps are kept as-is.
    """
    store = SqlRecipeStore(engine)
    written: List[str] = []
    for recipe in recipes if recipes is not None else build_seed_recipes():
        store.upsert_recipe(recipe)
        written.append(recipe.id)
    log.info(f"[seed] upserted {len(written)} recipes")
    return written

def main(db_url: Optional[str] = None) -> None:
    logging.basicConfig(level=logging.INFO)
    ids = seed_recipes(build_engine(db_url))
    print(f"seeded {len(ids)} recipes")

if __name__ == "__main__":
    main()
