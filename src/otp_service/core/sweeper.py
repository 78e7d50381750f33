"""Background task that evicts expired OTP records on a fixed interval."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from otp_service.core.otp_store import OTPStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically calls :meth:`OTPStore.sweep_expired`.

    Purely memory reclamation: verification already rejects expired
    records on access.  The task is started and cancelled by the
    application lifespan.
    """

    def __init__(self, store: OTPStore, interval_seconds: float = 300) -> None:
        self._store = store
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run_forever(), name="otp-expiry-sweeper")
        logger.info("Expiry sweeper started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Expiry sweeper stopped")

    def run_once(self) -> int:
        removed = self._store.sweep_expired()
        if removed:
            logger.info("Swept %d expired OTP(s)", removed)
        else:
            logger.debug("No expired OTPs to sweep")
        return removed

    async def _run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.run_once()
            except Exception:
                logger.exception("Expiry sweeper error")
