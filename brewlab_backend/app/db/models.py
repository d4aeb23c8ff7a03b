# models.py  (relational backend for recipes / versions / steps / share links)

from typing import Optional, List
from sqlmodel import SQLModel, Field, Column, JSON


# ---------- Recipes ----------

class RecipeRow(SQLModel, table=True):
    __tablename__ = "recipes"

    id: str = Field(primary_key=True)
    owner_id: Optional[str] = Field(default=None, index=True)     # NULL = seed / unclaimed
    slug: str = Field(index=True, unique=True)
    title: str
    brewer: str
    description: str
    quote: str
    cover_image_url: str
    is_public: bool = Field(default=False, index=True)
    difficulty: str                                               # Easy | Medium | Advanced
    brew_time_min: int
    active_version_id: str
    created_at: str
    updated_at: str = Field(index=True)


# ---------- Versions & Steps ----------

class RecipeVersionRow(SQLModel, table=True):
    __tablename__ = "recipe_versions"

    id: str = Field(primary_key=True)
    recipe_id: str = Field(foreign_key="recipes.id", index=True)
    version_number: int
    base_water_grams: float
    base_dose_grams: float
    target_temp_c: float
    grind_label: str
    notes: str = ""
    equipment: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    created_at: str

class RecipeStepRow(SQLModel, table=True):
    __tablename__ = "recipe_steps"

    id: str = Field(primary_key=True)
    version_id: str = Field(foreign_key="recipe_versions.id", index=True)
    step_order: int
    type: str                                                     # prep|pour|wait|stir|press|serve
    instruction: str
    target_water_grams: Optional[float] = None
    duration_sec: Optional[int] = None
    window_start_sec: Optional[int] = None
    window_end_sec: Optional[int] = None
    tips: Optional[str] = None


# ---------- Sharing ----------

class ShareLinkRow(SQLModel, table=True):
    __tablename__ = "share_links"

    id: str = Field(primary_key=True)
    recipe_id: str = Field(foreign_key="recipes.id", index=True)
    token: str = Field(index=True, unique=True)
    published_version_id: str
    created_by: str = Field(index=True)
    revoked_at: Optional[str] = None
    created_at: str
