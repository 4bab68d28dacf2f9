import pytest
from sqlalchemy import delete, func, select

from signal_engine.components.video_evaluation.rubric_loader import load_rubric_for_role_family, seed_default_rubric
from signal_engine.models.rubric import RoleFamily, RubricDimension, RubricLevel
from signal_engine.shared.errors import RubricNotFoundError


async def _dimension(db, slug):
    return (await db.execute(select(RubricDimension).where(RubricDimension.slug == slug))).scalar_one()


async def test_seed_is_idempotent(seeded_db):
    await seed_default_rubric(seeded_db)

    families = (await seeded_db.execute(select(func.count()).select_from(RoleFamily))).scalar_one()
    dimensions = (await seeded_db.execute(select(func.count()).select_from(RubricDimension))).scalar_one()
    levels = (await seeded_db.execute(select(func.count()).select_from(RubricLevel))).scalar_one()
    assert families == 1
    assert dimensions == 7
    assert levels == 28


async def test_load_engineering_rubric(session_factory, seeded_db):
    async with session_factory() as db:
        rubric = await load_rubric_for_role_family(db, "engineering")

    assert rubric.role_family_name == "Software Engineering"
    assert [d.slug for d in rubric.dimensions] == [
        "communication",
        "practical_maturity",
        "collaboration_coachability",
        "problem_decomposition_design",
        "technical_execution",
        "learning_velocity",
        "work_process",
    ]
    assert [d.is_universal for d in rubric.dimensions[:3]] == [True, True, True]
    assert rubric.dimensions[-1].is_universal is False
    for dimension in rubric.dimensions:
        assert [lvl.level for lvl in dimension.levels] == [1, 2, 3, 4]
        assert [lvl.label for lvl in dimension.levels] == ["Foundational", "Competent", "Advanced", "Expert"]
    assert "no_verification" in {f.slug for f in rubric.red_flags}


async def test_role_family_override_is_preferred(session_factory, seeded_db):
    family = (await seeded_db.execute(select(RoleFamily).where(RoleFamily.slug == "engineering"))).scalar_one()
    communication = await _dimension(seeded_db, "communication")
    seeded_db.add(
        RubricLevel(
            dimension_id=communication.id,
            role_family_id=family.id,
            level=2,
            label="Competent",
            pattern="Explains tradeoffs to an engineering audience",
            evidence=["Names the failure mode before fixing it"],
        )
    )
    await seeded_db.commit()

    async with session_factory() as db:
        rubric = await load_rubric_for_role_family(db, "engineering")

    levels = {lvl.level: lvl for lvl in rubric.dimension_lookup()["communication"].levels}
    assert levels[2].pattern == "Explains tradeoffs to an engineering audience"
    assert levels[2].evidence == ["Names the failure mode before fixing it"]
    assert levels[1].pattern != levels[2].pattern


async def test_missing_level_is_a_data_error(session_factory, seeded_db):
    work_process = await _dimension(seeded_db, "work_process")
    await seeded_db.execute(
        delete(RubricLevel).where(RubricLevel.dimension_id == work_process.id, RubricLevel.level == 4)
    )
    await seeded_db.commit()

    async with session_factory() as db:
        with pytest.raises(RubricNotFoundError, match="Missing rubric level 4 for dimension work_process"):
            await load_rubric_for_role_family(db, "engineering")


async def test_unknown_role_family_raises(seeded_db):
    with pytest.raises(RubricNotFoundError):
        await load_rubric_for_role_family(seeded_db, "data_science")
