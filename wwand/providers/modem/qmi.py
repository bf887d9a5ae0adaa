"""
QMI data-plane status probe

Companion check for hosts where the modem's QMI control device is known
(WWAND_DEVICE). Only qmicli's command-line surface is used.
"""

import logging
from typing import Optional

from ...utils.command import CommandRunner, SubprocessRunner

logger = logging.getLogger(__name__)

QMICLI = "qmicli"
DEFAULT_DEVICE = "/dev/cdc-wdm0"
QMI_TIMEOUT = 5.0


class QmiStatusProbe:
    """Reports whether the WDS packet service on a QMI device is connected."""

    def __init__(self, device: str = DEFAULT_DEVICE, runner: Optional[CommandRunner] = None, executable: str = QMICLI):
        self.device = device
        self.runner = runner or SubprocessRunner()
        self.executable = executable

    async def check_connection(self) -> bool:
        result = await self.runner.run(
            self.executable,
            [f"--device={self.device}", "--device-open-proxy", "--wds-get-packet-service-status"],
            timeout=QMI_TIMEOUT,
        )
        if not result.ok:
            logger.error(f"Failed to run qmicli command: {result.output}")
            return False

        # e.g. "[/dev/cdc-wdm0] Connection status: 'connected'"
        for line in result.output.splitlines():
            if "connection status" in line.lower():
                status = line.split(":", 1)[-1].strip().strip("'\"").lower()
                return status == "connected"
        return False
