"""
Modem Provider - Abstract base class for modem integration
Holds the per-tick modem, status and bearer models decoded from the
device manager, plus the adapter contract the reconcilers depend on.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ...errors import InvalidModemPath
from ..modem.codec import MMBool, MMOptionalInt

MIN_MODEM_SEGMENTS = 2


@dataclass(frozen=True)
class Modem:
    """A modem known to the device manager"""

    index: int
    path: str

    @classmethod
    def from_path(cls, path: str) -> "Modem":
        """Build a modem from its D-Bus path, e.g. /org/freedesktop/ModemManager1/Modem/0"""
        segments = path.split("/")
        if len(segments) < MIN_MODEM_SEGMENTS:
            raise InvalidModemPath(f"invalid modem path: {path}")

        last = segments[-1]
        if not last.isdigit():
            raise InvalidModemPath(f"invalid modem path: {path}")

        return cls(index=int(last), path=path)


class _MMModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class ModemStatus(_MMModel):
    """Point-in-time snapshot of a modem"""

    dbus_path: str = Field("", alias="dbus-path")
    state: str = ""
    bearers: List[str] = Field(default_factory=list)


class BearerIPv4Config(_MMModel):
    address: str = ""
    dns: List[str] = Field(default_factory=list)
    # "--" when the modem provides none
    gateway: str = ""
    method: str = ""
    mtu: MMOptionalInt = 0
    prefix: MMOptionalInt = 0

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefix}"


class BearerStatus(_MMModel):
    connected: MMBool = False
    interface: str = ""
    suspended: MMBool = False


class Bearer(_MMModel):
    """A data session endpoint tied to a modem"""

    dbus_path: str = Field("", alias="dbus-path")
    ipv4_config: BearerIPv4Config = Field(default_factory=BearerIPv4Config, alias="ipv4-config")
    status: BearerStatus = Field(default_factory=BearerStatus)

    @property
    def connected(self) -> bool:
        return self.status.connected

    @property
    def interface(self) -> str:
        return self.status.interface


class ModemProvider(ABC):
    """
    Abstract base class for modem adapters.

    Implementations must never retry internally; the reconciliation loop's
    next tick is the only retry mechanism.
    """

    name: str = ""
    display_name: str = ""

    @abstractmethod
    async def list_modems(self) -> List[Modem]:
        """Enumerate modems. Raises NoModemsFound on an empty list."""
        pass

    @abstractmethod
    async def get_status(self, modem: Modem) -> ModemStatus:
        pass

    @abstractmethod
    async def simple_connect(self, modem: Modem, apn: str) -> None:
        """Connect the modem to ``apn`` requesting dual-stack addressing."""
        pass

    @abstractmethod
    async def get_bearer(self, modem: Modem, ref: str) -> Bearer:
        pass

    @abstractmethod
    async def connect_bearer(self, bearer: Bearer) -> None:
        pass
