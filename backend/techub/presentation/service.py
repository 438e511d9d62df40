from typing import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techub.presentation.models import PresentationSettings
from techub.presentation.schemas import PresentationSettingsBase, PresentationSettingsUpdate

logger = structlog.get_logger()

DEFAULT_PRESENTATION_SETTINGS = PresentationSettingsBase().model_dump()


async def get_settings(db: AsyncSession, monitoring_type: str) -> PresentationSettings:
    """Stored settings for the type, or an unsaved instance carrying the defaults."""
    result = await db.execute(
        select(PresentationSettings).where(PresentationSettings.monitoring_type == monitoring_type)
    )
    stored = result.scalar_one_or_none()
    if stored is not None:
        return stored
    return PresentationSettings(monitoring_type=monitoring_type, **DEFAULT_PRESENTATION_SETTINGS)


async def upsert_settings(
    db: AsyncSession,
    monitoring_type: str,
    data: PresentationSettingsUpdate,
) -> PresentationSettings:
    result = await db.execute(
        select(PresentationSettings).where(PresentationSettings.monitoring_type == monitoring_type)
    )
    stored = result.scalar_one_or_none()
    if stored is None:
        stored = PresentationSettings(monitoring_type=monitoring_type)
        db.add(stored)
    for field, value in data.model_dump().items():
        setattr(stored, field, value)
    await db.commit()
    await db.refresh(stored)
    logger.info("presentation_settings_saved", monitoring_type=monitoring_type)
    return stored


def color_for(percentage: float, config: PresentationSettingsBase) -> str:
    if percentage >= config.threshold_excellent:
        return "green"
    if percentage >= config.threshold_attention:
        return "yellow"
    return "red"


def is_visible(percentage: float, config: PresentationSettingsBase) -> bool:
    if config.min_percentage is not None and percentage < config.min_percentage:
        return False
    if config.max_percentage is not None and percentage > config.max_percentage:
        return False
    color = color_for(percentage, config)
    return not getattr(config, f"ignore_{color}")


def paginate_for_presentation(items: Sequence[dict], config: PresentationSettingsBase) -> list[list[dict]]:
    """Filter items by range and color, then split into display pages.

    Items need ``name`` and ``percentage``. There is always at least one page,
    so an empty wall still has something to render.
    """
    visible = [
        {"name": item["name"], "percentage": item["percentage"], "status": color_for(item["percentage"], config)}
        for item in items
        if is_visible(item["percentage"], config)
    ]
    per_page = max(1, config.companies_per_page)
    pages = [visible[i:i + per_page] for i in range(0, len(visible), per_page)]
    return pages or [[]]
