from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, status

from brewlab_backend.app.deps import get_repository
from brewlab_backend.app.schemas import OwnerRequest, ShareCreateRequest
from brewlab_backend.app.services.repository import RecipeRepository

router = APIRouter(prefix="/shares", tags=["shares"])

# What it does:
# Return the caller's live share link for a recipe, issuing one if needed.
@router.post("")
def create_share(payload: ShareCreateRequest, repo: RecipeRepository = Depends(get_repository)):
    link = repo.create_or_get_share_link(payload.recipe_id, payload.owner_id)
    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="recipe not found")
    return link.model_dump(mode="json", by_alias=True)

@router.get("/{token}")
def read_shared(token: str, repo: RecipeRepository = Depends(get_repository)):
    recipe = repo.get_recipe_by_share_token(token)
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="share link not found or revoked")
    return recipe.model_dump(mode="json", by_alias=True)

@router.delete("/{token}")
def revoke_share(token: str, owner_id: str, repo: RecipeRepository = Depends(get_repository)):
    return {"ok": True, "revoked": repo.revoke_share_link(token, owner_id)}

@router.post("/{token}/remix", status_code=status.HTTP_201_CREATED)
def remix_shared(token: str, payload: OwnerRequest, repo: RecipeRepository = Depends(get_repository)):
    remixed = repo.remix_recipe_from_share_token(token, payload.owner_id)
    if remixed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="share link not found or revoked")
    return remixed.model_dump(mode="json", by_alias=True)
