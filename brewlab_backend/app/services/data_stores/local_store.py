# brewlab_backend/app/services/data_stores/local_store.py
from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from brewlab_backend.app.config.paths import ensure_data_dir_exists
from brewlab_backend.app.schemas import Recipe, ShareLink
from .io_utils import read_json, write_json

log = logging.getLogger("brewlab.local_store")

_IO_LOCK = RLock()


class LocalRecipeStore:
    """
    File-backed recipe + share link store (the local-storage backend).

    Layout under <root> (defaults to DATA_DIR/recipes):
        recipes.json      {recipe_id: recipe-json}
        share_links.json  [share-json, ...] newest first
    Last write wins; there is no merge.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root else ensure_data_dir_exists("recipes")
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def recipes_path(self) -> Path:
        return self.root / "recipes.json"

    @property
    def shares_path(self) -> Path:
        return self.root / "share_links.json"

    # ---------- recipes ----------
    def _recipes_blob(self) -> Dict[str, Dict[str, Any]]:
        raw = read_json(self.recipes_path, default={})
        return raw if isinstance(raw, dict) else {}

    def list_recipes(self) -> List[Recipe]:
        out: List[Recipe] = []
        with _IO_LOCK:
            blob = self._recipes_blob()
        for rid, doc in blob.items():
            try:
                out.append(Recipe.model_validate(doc))
            except ValidationError as e:
                log.warning(f"[local_store] skipping invalid recipe {rid}: {e.error_count()} errors")
        out.sort(key=lambda r: r.updated_at, reverse=True)
        return out

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        with _IO_LOCK:
            doc = self._recipes_blob().get(recipe_id)
        if doc is None:
            return None
        try:
            return Recipe.model_validate(doc)
        except ValidationError:
            return None

    def get_recipe_by_slug(self, slug: str) -> Optional[Recipe]:
        return next((r for r in self.list_recipes() if r.slug == slug), None)

    def upsert_recipe(self, recipe: Recipe) -> Recipe:
        with _IO_LOCK:
            blob = self._recipes_blob()
            blob[recipe.id] = recipe.model_dump(mode="json", by_alias=True)
            write_json(self.recipes_path, blob)
        return recipe

    # ---------- share links ----------
    def list_share_links(self) -> List[ShareLink]:
        with _IO_LOCK:
            raw = read_json(self.shares_path, default=[])
        links: List[ShareLink] = []
        for doc in raw if isinstance(raw, list) else []:
            try:
                links.append(ShareLink.model_validate(doc))
            except ValidationError:
                continue
        return links

    def upsert_share_link(self, link: ShareLink) -> ShareLink:
        with _IO_LOCK:
            links = [l for l in self.list_share_links() if l.id != link.id]
            links.insert(0, link)
            write_json(self.shares_path, [l.model_dump(mode="json", by_alias=True) for l in links])
        return link
