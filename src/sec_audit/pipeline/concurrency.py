"""Join-all / fail-fast execution of independent backend queries."""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Mapping

from sec_audit.errors import CancelledError, StageError

logger = logging.getLogger(__name__)


def run_all_or_fail(
    queries: Mapping[str, Callable[[], str]],
    *,
    error_cls: type[StageError],
) -> dict[str, str]:
    """Run *queries* concurrently and return their results keyed by name.

    The barrier completes only once every query succeeded. On the first
    failure the still-pending queries are cancelled and *error_cls* is
    raised naming the failed query (first in *queries* order when several
    fail together). Cancellation is re-raised as is.
    """
    pool = ThreadPoolExecutor(max_workers=len(queries), thread_name_prefix="sec-audit")
    futures = {name: pool.submit(fn) for name, fn in queries.items()}
    try:
        done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
        for name, fut in futures.items():
            if fut not in done:
                continue
            exc = fut.exception()
            if exc is None:
                continue
            for other in pending:
                other.cancel()
            if isinstance(exc, CancelledError):
                raise exc
            logger.debug("query %r failed: %s", name, exc)
            raise error_cls(f"{name} query failed: {exc}", stage=name) from exc
        return {name: fut.result() for name, fut in futures.items()}
    finally:
        # Do not block on in-flight calls after a failure; each one is
        # bounded by the backend's own timeout.
        pool.shutdown(wait=False, cancel_futures=True)
