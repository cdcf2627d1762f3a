"""Product analytics events, written to the log as one line per event."""

import json
import logging
from typing import Optional

logger = logging.getLogger("declutter.analytics")


def track(event: str, user_id: Optional[str] = None, **properties) -> None:
    logger.info(
        "analytics event=%s user=%s properties=%s",
        event,
        user_id or "-",
        json.dumps(properties, sort_keys=True, default=str),
    )
