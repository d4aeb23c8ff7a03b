# main.py: backend entrypoint (uvicorn brewlab_backend.app.main:app)
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from brewlab_backend.app.config import APP_NAME, CORS_ORIGINS
from brewlab_backend.app.config.manifest import validate_manifest
from brewlab_backend.app.routers import brew, recipes, sessions, shares
from brewlab_backend.app.services.repository import RecipeRepository, build_repository

log = logging.getLogger("brewlab.main")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)


def create_app(repository: Optional[RecipeRepository] = None) -> FastAPI:
    app = FastAPI(title=f"{APP_NAME} API")

    # --- CORS for the web client ---------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # one repository per process; routers reach it through deps.get_repository
    app.state.repository = repository or build_repository()

    # --- Include routers under /api ------------------------------------------
    for module in (recipes, brew, sessions, shares):
        app.include_router(module.router, prefix="/api")
        log.info(f"✓ Mounted {module.router.prefix} at /api")

    # --- Health --------------------------------------------------------------
    @app.get("/health")
    @app.get("/api/health")
    async def health():
        return {"ok": True, "manifest": validate_manifest()}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("brewlab_backend.app.main:app", host="127.0.0.1", port=8000, reload=False)
