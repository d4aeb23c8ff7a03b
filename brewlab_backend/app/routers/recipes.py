from __future__ import annotations
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, HTTPException, status

from brewlab_backend.app.deps import get_repository, recipe_or_404
from brewlab_backend.app.schemas import OwnerRequest, Recipe
from brewlab_backend.app.services.repository import RecipeRepository, SlugTakenError

router = APIRouter(prefix="/recipes", tags=["recipes"])

def _out(recipe: Recipe) -> Dict[str, Any]:
    return recipe.model_dump(mode="json", by_alias=True)

def _list(recipes: List[Recipe]) -> Dict[str, Any]:
    return {"recipes": [_out(r) for r in recipes]}

# What it does:
# Public catalogue (seed cards + published recipes).
@router.get("")
def list_public(repo: RecipeRepository = Depends(get_repository)):
    return _list(repo.list_public_recipes())

# What it does:
# Drafts and published recipes owned by one user.
@router.get("/mine")
def list_mine(owner_id: str, repo: RecipeRepository = Depends(get_repository)):
    return _list(repo.list_recipes_by_owner(owner_id))

@router.get("/{slug}")
def get_recipe(slug: str, repo: RecipeRepository = Depends(get_repository)):
    return _out(recipe_or_404(repo, slug))

# What it does:
# New blank draft from the 3-step template.
@router.post("/drafts", status_code=status.HTTP_201_CREATED)
def create_draft(payload: OwnerRequest, repo: RecipeRepository = Depends(get_repository)):
    return _out(repo.create_draft_recipe(payload.owner_id))

# What it does:
# Save (upsert) a full recipe document. Last write wins; only the owner may overwrite,
# and a slug already used by another recipe is a 409.
@router.put("/{recipe_id}")
def save_recipe(recipe_id: str, recipe: Recipe, owner_id: str, repo: RecipeRepository = Depends(get_repository)):
    if recipe.id != recipe_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="recipe id mismatch")
    existing = repo.get_recipe_by_id(recipe_id)
    if existing is not None and existing.owner_id != owner_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="not the owner of this recipe")
    try:
        saved = repo.save_recipe_draft(recipe, owner_id)
    except SlugTakenError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return _out(saved)

@router.post("/{recipe_id}/publish")
def publish(recipe_id: str, payload: OwnerRequest, repo: RecipeRepository = Depends(get_repository)):
    if repo.get_recipe_by_id(recipe_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="recipe not found")
    published = repo.publish_recipe(recipe_id, payload.owner_id)
    if published is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="not the owner of this recipe")
    return _out(published)

# What it does:
# Private copy of any visible recipe for the caller.
@router.post("/{recipe_id}/remix", status_code=status.HTTP_201_CREATED)
def remix(recipe_id: str, payload: OwnerRequest, repo: RecipeRepository = Depends(get_repository)):
    source = repo.get_recipe_by_id(recipe_id)
    if source is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="recipe not found")
    return _out(repo.remix_recipe(source, payload.owner_id))
