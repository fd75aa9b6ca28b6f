"""Long-running service: periodically check feeds and publish new items."""

import logging
import time
from typing import Callable, ContextManager, Optional

import pendulum

from .config import ServiceConfig
from .db import Connection
from .errors import SyncError
from .publishing import PublishPipeline
from .sync import SyncScheduler

logger = logging.getLogger(__name__)


def run_service(
    connect: Callable[[], ContextManager[Connection]],
    scheduler: SyncScheduler,
    pipeline: PublishPipeline,
    settings: ServiceConfig,
    max_passes: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Run check and publish passes until stopped.

    Each pass opens a fresh connection, checks every feed, publishes all
    unpublished items of ready feeds, then sleeps for the configured interval.
    Feed check failures are logged and do not stop the pass. A
    ConfigurationError ends the loop.

    Args:
        connect: Factory returning a connection context manager
        scheduler: Sync scheduler used for feed checks
        pipeline: Publish pipeline
        settings: Service settings
        max_passes: Stop after this many passes (None runs forever)
        sleep: Delay function used between passes

    Returns:
        Number of completed passes
    """
    logger.info("Starting the service")
    passes = 0
    while max_passes is None or passes < max_passes:
        logger.info("Service loop: starting pass %d", passes + 1)
        with connect() as conn:
            try:
                scheduler.check_all(conn)
            except SyncError as e:
                logger.error("Feed check finished with errors: %s", e)

            report = pipeline.publish_all(conn)
        passes += 1

        logger.info("Service loop: pass finished, %d items processed", report.total)
        if max_passes is not None and passes >= max_passes:
            break

        interval = settings.interval_minutes * 60
        next_run = pendulum.now().add(seconds=int(interval))
        logger.info("Sleeping until %s", next_run.format("YYYY-MM-DD HH:mm:ss"))
        sleep(interval)

    return passes
