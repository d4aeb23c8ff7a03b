# brewlab_backend/app/services/repository.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from brewlab_backend.app.config import STORE_BACKEND, DB_URL
from brewlab_backend.app.schemas import Recipe, RecipeVersion, ShareLink, utc_now_iso
from brewlab_backend.app.utils.strings import new_id
from .legacy_cards import build_seed_recipes, create_blank_recipe

log = logging.getLogger("brewlab.repository")

SEED_TOKEN_PREFIX = "seed-"


class SlugTakenError(ValueError):
    """Another recipe (stored or seed) already owns this slug."""

    def __init__(self, slug: str, owner_recipe_id: str) -> None:
        super().__init__(f"slug {slug!r} is already used by recipe {owner_recipe_id}")
        self.slug = slug
        self.owner_recipe_id = owner_recipe_id


class RecipeStore(Protocol):
    """What the repository needs from a backend (local JSON files or SQL)."""

    def list_recipes(self) -> List[Recipe]: ...
    def get_recipe(self, recipe_id: str) -> Optional[Recipe]: ...
    def get_recipe_by_slug(self, slug: str) -> Optional[Recipe]: ...
    def upsert_recipe(self, recipe: Recipe) -> Recipe: ...
    def list_share_links(self) -> List[ShareLink]: ...
    def upsert_share_link(self, link: ShareLink) -> ShareLink: ...


def _dedupe_by_id(recipes: List[Recipe]) -> List[Recipe]:
    # later entries win, first-seen order kept
    merged: Dict[str, Recipe] = {}
    for r in recipes:
        merged[r.id] = r
    return list(merged.values())


class RecipeRepository:
    """
    Recipe + share link operations over one injected store.
    Seed recipes (legacy cards) are always visible and never written to the store
    unless someone saves them explicitly (e.g. the SQL seeding command).
    """

    def __init__(self, store: RecipeStore, seed_recipes: Optional[List[Recipe]] = None) -> None:
        self.store = store
        self.seed_recipes: List[Recipe] = build_seed_recipes() if seed_recipes is None else seed_recipes

    # ---------- reads ----------
    def _all_recipes(self) -> List[Recipe]:
        return _dedupe_by_id([*self.seed_recipes, *self.store.list_recipes()])

    def list_public_recipes(self) -> List[Recipe]:
        return [r for r in self._all_recipes() if r.is_public]

    def list_recipes_by_owner(self, owner_id: str) -> List[Recipe]:
        return [r for r in self.store.list_recipes() if r.owner_id == owner_id]

    def get_recipe_by_slug(self, slug: str) -> Optional[Recipe]:
        found = self.store.get_recipe_by_slug(slug)
        if found:
            return found
        return next((r for r in self.seed_recipes if r.slug == slug), None)

    def get_recipe_by_id(self, recipe_id: str) -> Optional[Recipe]:
        found = self.store.get_recipe(recipe_id)
        if found:
            return found
        return next((r for r in self.seed_recipes if r.id == recipe_id), None)

    # ---------- writes ----------
    @staticmethod
    def normalize_recipe(recipe: Recipe) -> Recipe:
        """
        Sort steps by step_order and versions newest first, re-validate the whole
        document and stamp updated_at.
        """
        versions = sorted(
            (
                v.model_copy(update={"steps": sorted(v.steps, key=lambda s: s.step_order)})
                for v in recipe.versions
            ),
            key=lambda v: v.version_number,
            reverse=True,
        )
        doc = recipe.model_copy(update={"versions": versions, "updated_at": utc_now_iso()})
        return Recipe.model_validate(doc.model_dump(by_alias=True))

    def save_recipe_draft(self, recipe: Recipe, owner_id: str) -> Recipe:
        """
        Upsert under `owner_id` (last write wins). Raises SlugTakenError when the slug
        belongs to a different recipe, seeds included.
        """
        holders = [self.store.get_recipe_by_slug(recipe.slug)]
        holders += [r for r in self.seed_recipes if r.slug == recipe.slug]
        for holder in holders:
            if holder is not None and holder.id != recipe.id:
                raise SlugTakenError(recipe.slug, holder.id)
        normalized = self.normalize_recipe(recipe.model_copy(update={"owner_id": owner_id}))
        saved = self.store.upsert_recipe(normalized)
        log.info(f"[repo] saved recipe {saved.id} for {owner_id}")
        return saved

    def publish_recipe(self, recipe_id: str, owner_id: str) -> Optional[Recipe]:
        recipe = self.get_recipe_by_id(recipe_id)
        if not recipe or recipe.owner_id != owner_id:
            return None
        return self.save_recipe_draft(recipe.model_copy(update={"is_public": True}), owner_id)

    def create_draft_recipe(self, owner_id: str) -> Recipe:
        return self.save_recipe_draft(create_blank_recipe(owner_id), owner_id)

    # ---------- remix ----------
    @staticmethod
    def _clone_version(version: RecipeVersion, recipe_id: str, version_id: str) -> RecipeVersion:
        steps = [
            step.model_copy(update={
                "id": f"{recipe_id}-step-{index + 1}",
                "version_id": version_id,
                "step_order": index,
            })
            for index, step in enumerate(version.steps)
        ]
        return version.model_copy(update={
            "id": version_id,
            "recipe_id": recipe_id,
            "steps": steps,
            "version_number": 1,
            "created_at": utc_now_iso(),
        })

    def remix_recipe(self, source: Recipe, owner_id: str) -> Recipe:
        recipe_id = new_id(12)
        version_id = f"{recipe_id}-v1"
        now = utc_now_iso()
        remixed = source.model_copy(update={
            "id": recipe_id,
            "owner_id": owner_id,
            "slug": f"{source.slug}-remix-{recipe_id[:4].lower()}",
            "title": f"{source.title} Remix",
            "is_public": False,
            "active_version_id": version_id,
            "versions": [self._clone_version(source.active_version(), recipe_id, version_id)],
            "created_at": now,
            "updated_at": now,
        })
        return self.save_recipe_draft(remixed, owner_id)

    # ---------- share links ----------
    def create_or_get_share_link(self, recipe_id: str, owner_id: str) -> Optional[ShareLink]:
        existing = next(
            (l for l in self.store.list_share_links()
             if l.recipe_id == recipe_id and l.created_by == owner_id and not l.revoked_at),
            None,
        )
        if existing:
            return existing

        recipe = self.get_recipe_by_id(recipe_id)
        if not recipe:
            return None
        link = ShareLink(
            id=new_id(12),
            recipe_id=recipe_id,
            token=new_id(10),
            published_version_id=recipe.active_version_id,
            created_by=owner_id,
            revoked_at=None,
        )
        return self.store.upsert_share_link(link)

    def revoke_share_link(self, token: str, owner_id: str) -> bool:
        revoked = False
        stamp = utc_now_iso()
        for link in self.store.list_share_links():
            if link.token == token and link.created_by == owner_id and not link.revoked_at:
                self.store.upsert_share_link(link.model_copy(update={"revoked_at": stamp}))
                revoked = True
        return revoked

    def get_recipe_by_share_token(self, token: str) -> Optional[Recipe]:
        if token.startswith(SEED_TOKEN_PREFIX):
            slug = token[len(SEED_TOKEN_PREFIX):]
            return next((r for r in self.seed_recipes if r.slug == slug), None)

        share = next(
            (l for l in self.store.list_share_links() if l.token == token and not l.revoked_at),
            None,
        )
        if not share:
            return None
        return self.get_recipe_by_id(share.recipe_id)

    def remix_recipe_from_share_token(self, token: str, owner_id: str) -> Optional[Recipe]:
        source = self.get_recipe_by_share_token(token)
        if not source:
            return None
        return self.remix_recipe(source, owner_id)


# What it does:
# Build the store + repository once at process start; the app keeps it on app.state.
def build_repository(backend: Optional[str] = None, db_url: Optional[str] = None) -> RecipeRepository:
    backend = (backend or STORE_BACKEND).lower()
    if backend == "sql":
        from brewlab_backend.app.db.session import build_engine
        from brewlab_backend.app.db.store import SqlRecipeStore

        store: RecipeStore = SqlRecipeStore(build_engine(db_url or DB_URL))
    elif backend == "local":
        from brewlab_backend.app.services.data_stores import LocalRecipeStore

        store = LocalRecipeStore()
    else:
        raise ValueError(f"unknown store backend: {backend!r} (expected 'local' or 'sql')")
    log.info(f"[repo] using {backend} store")
    return RecipeRepository(store)
