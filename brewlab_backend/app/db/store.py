# brewlab_backend/app/db/store.py
from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy import delete
from sqlmodel import Session, select, col

from brewlab_backend.app.schemas import Recipe, RecipeStep, RecipeVersion, ShareLink
from .models import RecipeRow, RecipeStepRow, RecipeVersionRow, ShareLinkRow
from .session import init_db


# ---------- row <-> model mapping ----------

def _step_from_row(row: RecipeStepRow) -> RecipeStep:
    return RecipeStep(
        id=row.id,
        version_id=row.version_id,
        step_order=row.step_order,
        type=row.type,
        instruction=row.instruction,
        target_water_grams=row.target_water_grams,
        duration_sec=row.duration_sec,
        window_start_sec=row.window_start_sec,
        window_end_sec=row.window_end_sec,
        tips=row.tips,
    )

def _version_from_row(row: RecipeVersionRow, steps: List[RecipeStepRow]) -> RecipeVersion:
    return RecipeVersion(
        id=row.id,
        recipe_id=row.recipe_id,
        version_number=row.version_number,
        base_water_grams=row.base_water_grams,
        base_dose_grams=row.base_dose_grams,
        target_temp_c=row.target_temp_c,
        grind_label=row.grind_label,
        notes=row.notes,
        equipment=list(row.equipment or []),
        created_at=row.created_at,
        steps=[_step_from_row(s) for s in sorted(steps, key=lambda s: s.step_order)],
    )

def _share_from_row(row: ShareLinkRow) -> ShareLink:
    return ShareLink(
        id=row.id,
        recipe_id=row.recipe_id,
        token=row.token,
        published_version_id=row.published_version_id,
        created_by=row.created_by,
        revoked_at=row.revoked_at,
        created_at=row.created_at,
    )


class SqlRecipeStore:
    """
    Relational backend (SQLModel). Same surface as LocalRecipeStore.
    A recipe is stored as one recipes row, its versions, and their steps; saving
    replaces the steps of every saved version (last write wins).
    """

    def __init__(self, engine: Engine, create_tables: bool = True) -> None:
        self.engine = engine
        if create_tables:
            init_db(engine)

    # Purpose:
    # Rebuild a full Recipe (versions newest first, steps by order); None if it has no versions.
    def _hydrate(self, session: Session, row: RecipeRow) -> Optional[Recipe]:
        versions = session.exec(
            select(RecipeVersionRow)
            .where(RecipeVersionRow.recipe_id == row.id)
            .order_by(col(RecipeVersionRow.version_number).desc())
        ).all()
        if not versions:
            return None
        version_ids = [v.id for v in versions]
        steps = session.exec(
            select(RecipeStepRow).where(col(RecipeStepRow.version_id).in_(version_ids))
        ).all()
        by_version: Dict[str, List[RecipeStepRow]] = {}
        for s in steps:
            by_version.setdefault(s.version_id, []).append(s)

        return Recipe(
            id=row.id,
            owner_id=row.owner_id,
            slug=row.slug,
            title=row.title,
            brewer=row.brewer,
            description=row.description,
            quote=row.quote,
            cover_image_url=row.cover_image_url,
            is_public=row.is_public,
            difficulty=row.difficulty,
            brew_time_min=row.brew_time_min,
            active_version_id=row.active_version_id,
            versions=[_version_from_row(v, by_version.get(v.id, [])) for v in versions],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _hydrate_all(self, session: Session, rows) -> List[Recipe]:
        out = [self._hydrate(session, r) for r in rows]
        return [r for r in out if r is not None]

    # ---------- recipes ----------
    def list_recipes(self) -> List[Recipe]:
        with Session(self.engine) as session:
            rows = session.exec(select(RecipeRow).order_by(col(RecipeRow.updated_at).desc())).all()
            return self._hydrate_all(session, rows)

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        with Session(self.engine) as session:
            row = session.get(RecipeRow, recipe_id)
            return self._hydrate(session, row) if row else None

    def get_recipe_by_slug(self, slug: str) -> Optional[Recipe]:
        with Session(self.engine) as session:
            row = session.exec(select(RecipeRow).where(RecipeRow.slug == slug)).first()
            return self._hydrate(session, row) if row else None

    def upsert_recipe(self, recipe: Recipe) -> Recipe:
        with Session(self.engine) as session:
            values = recipe.model_dump(mode="json", exclude={"versions"})
            row = session.get(RecipeRow, recipe.id)
            if row:
                for k, v in values.items():
                    setattr(row, k, v)
            else:
                row = RecipeRow(**values)
            session.add(row)

            version_ids = [v.id for v in recipe.versions]
            for version in recipe.versions:
                vvalues = version.model_dump(mode="json", exclude={"steps"})
                vrow = session.get(RecipeVersionRow, version.id)
                if vrow:
                    for k, v in vvalues.items():
                        setattr(vrow, k, v)
                else:
                    vrow = RecipeVersionRow(**vvalues)
                session.add(vrow)

            # steps are replaced wholesale for the saved versions
            session.execute(delete(RecipeStepRow).where(col(RecipeStepRow.version_id).in_(version_ids)))
            for version in recipe.versions:
                for step in version.steps:
                    svalues = step.model_dump(mode="json")
                    svalues["version_id"] = version.id
                    session.add(RecipeStepRow(**svalues))

            session.commit()
        return recipe

    # ---------- share links ----------
    def list_share_links(self) -> List[ShareLink]:
        with Session(self.engine) as session:
            rows = session.exec(select(ShareLinkRow).order_by(col(ShareLinkRow.created_at).desc())).all()
            return [_share_from_row(r) for r in rows]

    def upsert_share_link(self, link: ShareLink) -> ShareLink:
        with Session(self.engine) as session:
            values = link.model_dump(mode="json")
            row = session.get(ShareLinkRow, link.id)
            if row:
                for k, v in values.items():
                    setattr(row, k, v)
            else:
                row = ShareLinkRow(**values)
            session.add(row)
            session.commit()
        return link
