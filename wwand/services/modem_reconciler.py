"""
Modem Reconciler - reconciliation loop

One tick:
  1. ENUMERATE:   list modems (failure aborts the tick)
  2. PER MODEM:   fetch status; with zero bearers, simple-connect and re-fetch
  3. PER BEARER:  delegate to BearerReconciler
  4. STOP:        the first successfully reconciled bearer ends the tick

Per-modem and per-bearer failures are logged and skipped. The fixed timer
is the only retry mechanism; ticks run sequentially and never overlap.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..errors import WwanError
from ..providers.base.modem_provider import Modem, ModemProvider, ModemStatus
from ..utils.logger import LogContext
from .bearer_reconciler import BearerReconciler

logger = logging.getLogger(__name__)

# Seconds between reconciliation ticks
DEFAULT_INTERVAL = 60.0

TRIGGER_STARTUP = "startup"
TRIGGER_INTERVAL = "interval"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a tick that converged one bearer"""

    modem_index: int
    bearer_path: str
    interface: str

    def to_dict(self) -> dict:
        return {"modem": self.modem_index, "bearer": self.bearer_path, "interface": self.interface}


class ModemReconciler:
    """Runs a single reconciliation pass over all modems."""

    def __init__(self, modems: ModemProvider, bearers: BearerReconciler, apn: str):
        self.modems = modems
        self.bearers = bearers
        self.apn = apn

    async def reconcile(self, ctx: Optional[LogContext] = None) -> Optional[ReconcileResult]:
        """
        Run one tick.

        Raises:
            WwanError: modem enumeration failed (including NoModemsFound)
        Returns:
            ReconcileResult for the first converged bearer, or None.
        """
        ctx = ctx or LogContext()

        modem_list = await self.modems.list_modems()

        for modem in modem_list:
            result = await self._reconcile_modem(modem, ctx.with_fields(modem=modem.index))
            if result is not None:
                return result

        ctx.logger(__name__).warning(f"No bearer reconciled across {len(modem_list)} modem(s)")
        return None

    async def _reconcile_modem(self, modem: Modem, ctx: LogContext) -> Optional[ReconcileResult]:
        log = ctx.logger(__name__)

        try:
            status = await self.modems.get_status(modem)
        except WwanError as e:
            log.warning(f"Failed to get modem status: {e}")
            return None

        log.info(f"Successfully queried modem status (state={status.state})")

        if not status.bearers:
            status = await self._simple_connect(modem, ctx)
            if status is None:
                return None
            if not status.bearers:
                log.warning("Modem reports no bearers after connecting")
                return None

        for ref in status.bearers:
            bearer_ctx = ctx.with_fields(bearer=ref)
            try:
                bearer = await self.bearers.reconcile_bearer(modem, ref, bearer_ctx)
            except WwanError as e:
                bearer_ctx.logger(__name__).warning(f"Failed to reconcile bearer: {e}")
                continue

            bearer_ctx.logger(__name__).info(f"Successfully reconciled modem (interface={bearer.interface})")
            return ReconcileResult(modem_index=modem.index, bearer_path=ref, interface=bearer.interface)

        return None

    async def _simple_connect(self, modem: Modem, ctx: LogContext) -> Optional[ModemStatus]:
        log = ctx.logger(__name__)
        log.info(f"Connecting modem (apn={self.apn})")

        try:
            await self.modems.simple_connect(modem, self.apn)
        except WwanError as e:
            log.warning(f"Failed to connect modem: {e}")
            return None

        # Connecting does not populate the bearer list we already hold
        try:
            return await self.modems.get_status(modem)
        except WwanError as e:
            log.warning(f"Failed to get modem status after connecting: {e}")
            return None


ResultCallback = Callable[[Optional[ReconcileResult]], Awaitable[None]]


class ReconciliationLoop:
    """
    Fixed-cadence driver for ModemReconciler.

    Runs a tick immediately, then every ``interval`` seconds. A failing tick
    is logged and never stops the loop. Stopping cancels the running task,
    which kills any in-flight external command.
    """

    def __init__(
        self,
        reconciler: ModemReconciler,
        interval: float = DEFAULT_INTERVAL,
        on_result: Optional[ResultCallback] = None,
        ctx: Optional[LogContext] = None,
    ):
        self.reconciler = reconciler
        self.interval = interval
        self.on_result = on_result
        self.ctx = ctx or LogContext()
        self._task: Optional[asyncio.Task] = None
        self._ticks = 0
        self._last_tick: float = 0.0
        self._last_result: Optional[ReconcileResult] = None
        self._last_error: Optional[str] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run(), name="reconciliation-loop")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Reconciliation loop stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        logger.info(f"Reconciliation loop started (interval={self.interval}s)")
        await self.tick(TRIGGER_STARTUP)
        while True:
            await asyncio.sleep(self.interval)
            await self.tick(TRIGGER_INTERVAL)

    # ─────────────────────────────────────────────────────────────────────────
    # Tick
    # ─────────────────────────────────────────────────────────────────────────

    async def tick(self, trigger: str = TRIGGER_INTERVAL) -> Optional[ReconcileResult]:
        self._ticks += 1
        ctx = self.ctx.with_fields(trigger=trigger, tick=self._ticks)
        log = ctx.logger(__name__)

        result = None
        try:
            result = await self.reconciler.reconcile(ctx)
            self._last_error = None
        except WwanError as e:
            log.error(f"Failed to reconcile: {e}")
            self._last_error = str(e)

        self._last_tick = time.time()
        self._last_result = result

        if self.on_result is not None:
            try:
                await self.on_result(result)
            except Exception as e:
                log.error(f"Failed to publish reconciliation result: {e}")

        return result

    def get_status(self) -> dict:
        """Synchronous status snapshot (no I/O)."""
        return {
            "running": self.running,
            "interval": self.interval,
            "ticks": self._ticks,
            "last_tick": self._last_tick,
            "last_result": self._last_result.to_dict() if self._last_result else None,
            "last_error": self._last_error,
        }
