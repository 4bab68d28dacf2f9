"""Load role-family rubrics from the database.

Levels 1-4 prefer the role-family override and fall back to the default
level (``role_family_id IS NULL``). A missing level is a data error.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .rubric_seed import ENGINEERING_ROLE_FAMILY, LEVEL_LABELS, UNIVERSAL_DIMENSIONS
from .schemas import DimensionWithRubric, RedFlagData, RubricLevelData, RubricPromptInput
from ...models.rubric import RoleFamily, RoleFamilyDimension, RubricDimension, RubricLevel, RubricRedFlag
from ...shared.errors import RubricNotFoundError

logger = logging.getLogger(__name__)

RUBRIC_LEVELS = (1, 2, 3, 4)


async def load_rubric_for_role_family(db: AsyncSession, role_family_slug: str) -> RubricPromptInput:
    result = await db.execute(
        select(RoleFamily)
        .where(RoleFamily.slug == role_family_slug)
        .options(
            selectinload(RoleFamily.dimensions)
            .selectinload(RoleFamilyDimension.dimension)
            .selectinload(RubricDimension.levels),
            selectinload(RoleFamily.red_flags),
        )
    )
    family = result.scalar_one_or_none()
    if family is None:
        raise RubricNotFoundError(f"Role family not found: {role_family_slug}")

    dimensions = []
    for link in sorted(family.dimensions, key=lambda d: d.sort_order):
        dimension = link.dimension
        overrides = {lvl.level: lvl for lvl in dimension.levels if lvl.role_family_id == family.id}
        defaults = {lvl.level: lvl for lvl in dimension.levels if lvl.role_family_id is None}

        levels = []
        for level in RUBRIC_LEVELS:
            source = overrides.get(level) or defaults.get(level)
            if source is None:
                raise RubricNotFoundError(
                    f"Missing rubric level {level} for dimension {dimension.slug} in role family {role_family_slug}"
                )
            levels.append(
                RubricLevelData(
                    level=source.level,
                    label=source.label,
                    pattern=source.pattern,
                    evidence=list(source.evidence or []),
                )
            )

        dimensions.append(
            DimensionWithRubric(
                slug=dimension.slug,
                name=dimension.name,
                description=dimension.description or "",
                is_universal=bool(dimension.is_universal),
                levels=levels,
            )
        )

    red_flags = [
        RedFlagData(slug=flag.slug, name=flag.name, description=flag.description or "")
        for flag in sorted(family.red_flags, key=lambda f: f.id)
    ]

    return RubricPromptInput(
        role_family_name=family.name,
        role_family_slug=family.slug,
        dimensions=dimensions,
        red_flags=red_flags,
    )


async def _get_or_create_dimension(db: AsyncSession, definition: Dict[str, Any], is_universal: bool) -> RubricDimension:
    existing = (
        await db.execute(select(RubricDimension).where(RubricDimension.slug == definition["slug"]))
    ).scalar_one_or_none()
    if existing is not None:
        return existing

    dimension = RubricDimension(
        slug=definition["slug"],
        name=definition["name"],
        description=definition["description"],
        is_universal=is_universal,
    )
    db.add(dimension)
    await db.flush()
    for level, (pattern, evidence) in definition["levels"].items():
        db.add(
            RubricLevel(
                dimension_id=dimension.id,
                role_family_id=None,
                level=level,
                label=LEVEL_LABELS[level],
                pattern=pattern,
                evidence=list(evidence),
            )
        )
    return dimension


async def seed_default_rubric(db: AsyncSession) -> RoleFamily:
    """Create the engineering role family and its dimensions if missing. Idempotent."""
    existing = (
        await db.execute(select(RoleFamily).where(RoleFamily.slug == ENGINEERING_ROLE_FAMILY["slug"]))
    ).scalar_one_or_none()
    if existing is not None:
        return existing

    family = RoleFamily(slug=ENGINEERING_ROLE_FAMILY["slug"], name=ENGINEERING_ROLE_FAMILY["name"])
    db.add(family)
    await db.flush()

    definitions = [(definition, True) for definition in UNIVERSAL_DIMENSIONS] + [
        (definition, False) for definition in ENGINEERING_ROLE_FAMILY["dimensions"]
    ]
    for sort_order, (definition, is_universal) in enumerate(definitions):
        dimension = await _get_or_create_dimension(db, definition, is_universal)
        db.add(RoleFamilyDimension(role_family_id=family.id, dimension_id=dimension.id, sort_order=sort_order))

    for slug, name, description in ENGINEERING_ROLE_FAMILY["red_flags"]:
        db.add(RubricRedFlag(role_family_id=family.id, slug=slug, name=name, description=description))

    await db.commit()
    logger.info("Seeded default rubric for role family %s", family.slug)
    return family
