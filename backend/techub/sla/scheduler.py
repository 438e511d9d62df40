"""Background SLA refresh.

Every cycle re-reads the latest SLA snapshots of both kinds and the latest
fleet readings, pushing any warranted alerts through the deduplication gate.
Alerts are therefore raised even when nobody has a dashboard open.
"""

import asyncio

import structlog

from techub.config import settings
from techub.database import async_session_factory
from techub.fleet.service import get_monitoring_data
from techub.sla.models import SLA_KINDS
from techub.sla.service import get_sla_overview

logger = structlog.get_logger()


async def run_sla_refresh_cycle() -> int:
    """Refresh every SLA kind and the fleet once. Returns how many items were evaluated."""
    evaluated = 0
    for kind in SLA_KINDS:
        try:
            async with async_session_factory() as db:
                overview = await get_sla_overview(db, kind)
                evaluated += len(overview["items"])
        except Exception:
            logger.exception("sla_refresh_kind_error", kind=kind)

    try:
        async with async_session_factory() as db:
            evaluated += len(await get_monitoring_data(db))
    except Exception:
        logger.exception("fleet_refresh_error")

    logger.info("sla_refresh_cycle_complete", items_evaluated=evaluated)
    return evaluated


async def sla_refresh_loop() -> None:
    """Run the SLA refresh every SLA_REFRESH_INTERVAL_SECONDS indefinitely."""
    logger.info("sla_refresh_loop_started", interval=settings.SLA_REFRESH_INTERVAL_SECONDS)
    while True:
        try:
            await run_sla_refresh_cycle()
        except Exception:
            logger.exception("sla_refresh_loop_error")
        await asyncio.sleep(settings.SLA_REFRESH_INTERVAL_SECONDS)
