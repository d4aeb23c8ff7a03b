# brewlab_backend/app/deps.py
from __future__ import annotations
from fastapi import HTTPException, Request, status

from brewlab_backend.app.schemas import Recipe
from brewlab_backend.app.services.repository import RecipeRepository

def get_repository(request: Request) -> RecipeRepository:
    return request.app.state.repository

def recipe_or_404(repo: RecipeRepository, slug: str) -> Recipe:
    recipe = repo.get_recipe_by_slug(slug)
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="recipe not found")
    return recipe
