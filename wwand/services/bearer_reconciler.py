"""
Bearer Reconciler

Ensures one bearer of one modem is connected and its data interface is
configured. Performs no looping and no retries; the reconciliation loop
decides what happens after a failure.
"""

import logging
from typing import Optional

from ..errors import (
    AddressParseFailed,
    BearerConnectFailed,
    BearerFetchFailed,
    CommandFailed,
    InterfaceConfigFailed,
    InterfaceLookupFailed,
    WwanError,
)
from ..providers.base.modem_provider import Bearer, Modem, ModemProvider
from ..providers.base.network_interface import InterfaceReconciler, NetworkInterface
from ..utils.logger import LogContext

logger = logging.getLogger(__name__)


class BearerReconciler:
    def __init__(self, modems: ModemProvider, interfaces: InterfaceReconciler):
        self.modems = modems
        self.interfaces = interfaces

    async def reconcile_bearer(self, modem: Modem, ref: str, ctx: Optional[LogContext] = None) -> Bearer:
        """
        Reconcile a single bearer reference.

        1. Fetch the bearer.
        2. If disconnected, connect it and fetch it again; connecting does
           not update the local copy, so IPv4 config must be re-read.
        3. Configure the bearer's interface from its IPv4 config.

        Returns the bearer as last fetched.
        """
        ctx = (ctx or LogContext()).with_fields(modem=modem.index, bearer=ref)
        log = ctx.logger(__name__)

        bearer = await self._fetch(modem, ref)

        if not bearer.connected:
            log.info("Connecting bearer")
            try:
                await self.modems.connect_bearer(bearer)
            except WwanError as e:
                raise BearerConnectFailed(f"failed to connect bearer {ref}: {e}") from e

            bearer = await self._fetch(modem, ref)
            log.info("Bearer connected")

        config = bearer.ipv4_config
        try:
            target = NetworkInterface.from_values(
                bearer.interface,
                config.cidr,
                config.gateway,
                config.dns,
                config.mtu,
            )
            await self.interfaces.reconcile(target, ctx)
        except (InterfaceLookupFailed, AddressParseFailed, CommandFailed) as e:
            raise InterfaceConfigFailed(f"failed to configure interface {bearer.interface!r}: {e}") from e

        return bearer

    async def _fetch(self, modem: Modem, ref: str) -> Bearer:
        try:
            return await self.modems.get_bearer(modem, ref)
        except WwanError as e:
            raise BearerFetchFailed(f"failed to fetch bearer {ref}: {e}") from e
