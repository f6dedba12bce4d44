"""
Block-wait helper: poll the chain height until it has advanced.

The baseline read must succeed; later reads are allowed to fail (the node may be
busy sealing) and are only logged. The loop sleeps one second per poll.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, Optional, Union

from ..errors import BlockWaitTimeout, OntSdkError

if TYPE_CHECKING:  # pragma: no cover
    from .manager import ClientManager

log = logging.getLogger(__name__)

DEFAULT_BLOCK_COUNT = 2
POLL_INTERVAL_S = 1

Timeout = Union[int, float, timedelta]


def _whole_seconds(timeout: Timeout) -> int:
    if isinstance(timeout, timedelta):
        secs = int(timeout.total_seconds())
    else:
        secs = int(timeout)
    return max(secs, 1)


def wait_for_generate_block(
    manager: "ClientManager",
    timeout: Timeout,
    block_count: Optional[int] = None,
    *,
    sleep: Optional[Callable[[float], None]] = None,
) -> bool:
    """
    Block until the chain height grows by `block_count` (default 2).

    Returns True once it has. Raises OntSdkError if the starting height cannot
    be read, and BlockWaitTimeout after `timeout` whole seconds (at least 1)
    of polling without enough progress.
    """
    sleep = sleep or time.sleep
    target = block_count if block_count and block_count > 0 else DEFAULT_BLOCK_COUNT
    try:
        start = manager.get_current_block_height()
    except Exception as e:
        raise OntSdkError(f"GetCurrentBlockHeight error:{e}") from e

    secs = _whole_seconds(timeout)
    for i in range(secs):
        sleep(POLL_INTERVAL_S)
        try:
            height = manager.get_current_block_height()
        except Exception as e:
            log.debug("wait_for_generate_block: poll %d failed: %s", i + 1, e)
            continue
        log.debug("wait_for_generate_block: height=%d start=%d target=+%d", height, start, target)
        if height - start >= target:
            return True
    raise BlockWaitTimeout(secs)


__all__ = ["wait_for_generate_block", "DEFAULT_BLOCK_COUNT"]
