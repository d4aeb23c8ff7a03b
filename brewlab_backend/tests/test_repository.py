import pytest

from brewlab_backend.app.db.session import build_engine
from brewlab_backend.app.db.seed import seed_recipes
from brewlab_backend.app.db.store import SqlRecipeStore
from brewlab_backend.app.services.data_stores import LocalRecipeStore
from brewlab_backend.app.services.repository import RecipeRepository, SlugTakenError, build_repository


@pytest.fixture(params=["local", "sql"])
def any_repo(request, tmp_path):
    if request.param == "sql":
        return RecipeRepository(SqlRecipeStore(build_engine("sqlite://")))
    return RecipeRepository(LocalRecipeStore(tmp_path / "recipes"))


def test_seeds_are_public(any_repo):
    slugs = {r.slug for r in any_repo.list_public_recipes()}
    assert {"hario-v60", "chemex", "aeropress"} <= slugs
    assert any_repo.get_recipe_by_slug("chemex").id == "seed-chemex"
    assert any_repo.get_recipe_by_id("seed-chemex").slug == "chemex"
    assert any_repo.get_recipe_by_slug("nope") is None

def test_draft_save_and_publish(any_repo):
    draft = any_repo.create_draft_recipe("u1")
    assert not draft.is_public
    assert [r.id for r in any_repo.list_recipes_by_owner("u1")] == [draft.id]
    assert draft.id not in {r.id for r in any_repo.list_public_recipes()}

    version = draft.active_version()
    shuffled = version.model_copy(update={"steps": list(reversed(version.steps))})
    edited = draft.model_copy(update={"title": "Morning V60", "versions": [shuffled]})
    saved = any_repo.save_recipe_draft(edited, "u1")
    assert saved.title == "Morning V60"
    assert [s.step_order for s in any_repo.get_recipe_by_id(draft.id).active_version().steps] == [0, 1, 2]

    assert any_repo.publish_recipe(draft.id, "someone-else") is None
    published = any_repo.publish_recipe(draft.id, "u1")
    assert published.is_public
    assert draft.id in {r.id for r in any_repo.list_public_recipes()}

def test_remix_makes_private_copy(any_repo):
    source = any_repo.get_recipe_by_slug("hario-v60")
    remix = any_repo.remix_recipe(source, "u2")
    assert remix.id != source.id
    assert remix.owner_id == "u2" and not remix.is_public
    assert remix.title == "Hario V60 Remix"
    assert remix.slug.startswith("hario-v60-remix-")

    version = remix.active_version()
    assert version.id == f"{remix.id}-v1" and version.version_number == 1
    assert all(s.version_id == version.id for s in version.steps)
    assert [s.id for s in version.steps][0] == f"{remix.id}-step-1"
    assert [s.target_water_grams for s in version.steps] == [
        s.target_water_grams for s in source.active_version().steps
    ]
    # the seed is untouched
    assert any_repo.get_recipe_by_slug("hario-v60").owner_id is None

def test_share_links(any_repo):
    draft = any_repo.create_draft_recipe("u1")
    link = any_repo.create_or_get_share_link(draft.id, "u1")
    assert link.published_version_id == draft.active_version_id
    assert any_repo.create_or_get_share_link(draft.id, "u1").token == link.token
    assert any_repo.create_or_get_share_link("missing", "u1") is None

    assert any_repo.get_recipe_by_share_token(link.token).id == draft.id
    remix = any_repo.remix_recipe_from_share_token(link.token, "u3")
    assert remix.owner_id == "u3"

    assert any_repo.revoke_share_link(link.token, "u3") is False
    assert any_repo.revoke_share_link(link.token, "u1") is True
    assert any_repo.get_recipe_by_share_token(link.token) is None
    assert any_repo.remix_recipe_from_share_token(link.token, "u3") is None

    fresh = any_repo.create_or_get_share_link(draft.id, "u1")
    assert fresh.token != link.token

def test_seed_share_tokens(any_repo):
    assert any_repo.get_recipe_by_share_token("seed-aeropress").id == "seed-aeropress"
    assert any_repo.get_recipe_by_share_token("seed-unknown") is None

def test_sql_seeding_is_idempotent():
    engine = build_engine("sqlite://")
    first = seed_recipes(engine)
    second = seed_recipes(engine)
    assert first == second and len(first) == 7
    store = SqlRecipeStore(engine)
    assert len(store.list_recipes()) == 7
    assert len(store.get_recipe("seed-hario-v60").active_version().steps) == 7

def test_build_repository_backends(tmp_data_tree):
    assert isinstance(build_repository("local").store, LocalRecipeStore)
    assert isinstance(build_repository("sql", "sqlite://").store, SqlRecipeStore)
    with pytest.raises(ValueError):
        build_repository("mongo")

def test_slug_stays_unique(any_repo):
    alice = any_repo.create_draft_recipe("alice")
    bob = any_repo.create_draft_recipe("bob")

    with pytest.raises(SlugTakenError):
        any_repo.save_recipe_draft(bob.model_copy(update={"slug": alice.slug}), "bob")
    with pytest.raises(SlugTakenError):
        any_repo.save_recipe_draft(bob.model_copy(update={"slug": "hario-v60"}), "bob")

    assert any_repo.get_recipe_by_slug(alice.slug).owner_id == "alice"
    assert any_repo.get_recipe_by_slug("hario-v60").id == "seed-hario-v60"
    assert any_repo.get_recipe_by_id(bob.id).slug == bob.slug

    # re-saving under its own slug is fine
    renamed = any_repo.save_recipe_draft(alice.model_copy(update={"title": "Alice V60"}), "alice")
    assert renamed.slug == alice.slug
