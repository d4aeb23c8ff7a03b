from brewlab_backend.app.schemas import BrewStepType
from brewlab_backend.app.services.brew import build_prep_checklist, split_steps
from brewlab_backend.app.services.brew.prep import DEFAULT_FILTER_ITEM_ID, DEFAULT_HEAT_ITEM_ID

def test_split_keeps_order_and_catches_prep_like_text(make_step):
    steps = [
        make_step(0, BrewStepType.PREP, "Grind the coffee."),
        make_step(1, BrewStepType.POUR, "Bloom to 50g.", target_water_grams=50),
        make_step(2, BrewStepType.WAIT, "Rinse the filter while waiting."),
        make_step(3, BrewStepType.POUR, "Pour to 300g.", target_water_grams=300),
    ]
    prep, brew = split_steps(steps)
    assert [s.id for s in prep] == ["s0", "s2"]
    assert [s.id for s in brew] == ["s1", "s3"]

def test_checklist_adds_defaults_when_uncovered(make_step):
    steps = [
        make_step(0, BrewStepType.PREP, "Grind the coffee."),
        make_step(1, BrewStepType.POUR, "Pour to 300g.", target_water_grams=300),
    ]
    prep, _ = split_steps(steps)
    checklist = build_prep_checklist(prep, steps, 93)
    assert [c.id for c in checklist] == ["s0", DEFAULT_HEAT_ITEM_ID, DEFAULT_FILTER_ITEM_ID]
    assert checklist[1].instruction == "Heat water to about 93°C before brewing."
    assert checklist[2].instruction == "Place and rinse your filter before adding coffee."

def test_checklist_skips_defaults_covered_anywhere(make_step):
    steps = [
        make_step(0, BrewStepType.PREP, "Heat the kettle."),
        make_step(1, BrewStepType.PREP, "Rinse the paper."),
    ]
    checklist = build_prep_checklist(steps, steps, 96)
    assert [c.id for c in checklist] == ["s0", "s1"]

def test_duplicate_prep_ids_collapse(make_step):
    step = make_step(0, BrewStepType.PREP, "Heat water and rinse filter.")
    checklist = build_prep_checklist([step, step], [step], 96)
    assert len(checklist) == 1
