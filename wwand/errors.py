"""
Error taxonomy for wwand

Adapter errors carry the captured output of the external tool so the
reconciliation loop can log it with full context. Per-modem and per-bearer
errors are caught by the loop; only ConfigurationError is fatal.
"""

from typing import List, Optional


class WwanError(Exception):
    """Base class for all wwand errors."""


class ConfigurationError(WwanError):
    """Required startup configuration is missing or invalid."""


# ─────────────────────────────────────────────────────────────────────────────
# Modem adapter
# ─────────────────────────────────────────────────────────────────────────────


class AdapterInvocationFailed(WwanError):
    """External command exited non-zero or timed out."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: int = -1,
        output: str = "",
        timed_out: bool = False,
    ):
        super().__init__(message)
        self.command = list(command or [])
        self.returncode = returncode
        self.output = output
        self.timed_out = timed_out

    def __str__(self) -> str:
        base = super().__str__()
        if self.timed_out:
            base = f"{base} (timed out)"
        elif self.returncode:
            base = f"{base} (exit {self.returncode})"
        if self.output:
            base = f"{base}: {self.output}"
        return base


class DecodeFailed(WwanError, ValueError):
    """Structured output of an external tool could not be decoded."""


class InvalidModemPath(DecodeFailed):
    """A modem path does not end in a numeric index."""


class NoModemsFound(WwanError):
    """The device manager reported an empty modem list."""


# ─────────────────────────────────────────────────────────────────────────────
# Bearer reconciler
# ─────────────────────────────────────────────────────────────────────────────


class BearerFetchFailed(WwanError):
    """Bearer state could not be fetched."""


class BearerConnectFailed(WwanError):
    """Bearer connect command failed."""


class InterfaceConfigFailed(WwanError):
    """Bearer interface could not be configured."""


# ─────────────────────────────────────────────────────────────────────────────
# Network interface reconciler
# ─────────────────────────────────────────────────────────────────────────────


class InterfaceLookupFailed(WwanError):
    """The named host interface does not exist."""


class AddressParseFailed(WwanError):
    """Address, prefix, gateway or DNS value could not be parsed."""


class CommandFailed(WwanError):
    """A host networking step failed."""

    def __init__(self, step: str, command: List[str], returncode: int = -1, output: str = ""):
        message = f"failed to {step}"
        if output:
            message = f"{message}: {output}"
        super().__init__(message)
        self.step = step
        self.command = list(command)
        self.returncode = returncode
        self.output = output
