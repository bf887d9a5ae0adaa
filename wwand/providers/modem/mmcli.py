"""
ModemManager Provider
Drives modems through mmcli and decodes its --output-json responses.
"""

import json
import logging
from typing import Any, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...errors import AdapterInvocationFailed, DecodeFailed, NoModemsFound
from ...utils.command import CommandResult, CommandRunner, SubprocessRunner
from ..base.modem_provider import Bearer, Modem, ModemProvider, ModemStatus

logger = logging.getLogger(__name__)

MMCLI = "mmcli"

# Seconds allowed for modem enumeration
DEFAULT_LIST_TIMEOUT = 0.1

T = TypeVar("T", bound=BaseModel)


class ModemListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    modem_list: List[str] = Field(default_factory=list, alias="modem-list")


class ModemStatusGeneric(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bearers: List[str] = Field(default_factory=list)
    state: str = ""


class ModemStatusBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    dbus_path: str = Field("", alias="dbus-path")
    generic: ModemStatusGeneric = Field(default_factory=ModemStatusGeneric)


class ModemStatusResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    modem: ModemStatusBody


class BearerResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bearer: Bearer


def decode_response(output: str, model: Type[T], what: str) -> T:
    """Decode mmcli JSON output into ``model``. Raises DecodeFailed."""
    try:
        data: Any = json.loads(output)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeFailed(f"failed to decode {what}: {e}") from e

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DecodeFailed(f"failed to decode {what}: {e}") from e


class MMCLIModemAdapter(ModemProvider):
    """
    Modem adapter backed by ModemManager's command-line client.

    All reads pass --output-json. Failures carry mmcli's combined output
    and are never retried here.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        executable: str = MMCLI,
        list_timeout: float = DEFAULT_LIST_TIMEOUT,
        command_timeout: Optional[float] = None,
    ):
        self.name = "mmcli"
        self.display_name = "ModemManager (mmcli)"
        self.runner = runner or SubprocessRunner()
        self.executable = executable
        self.list_timeout = list_timeout
        self.command_timeout = command_timeout

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    async def list_modems(self) -> List[Modem]:
        output = await self._run(["--list-modems", "--output-json"], "list modems", timeout=self.list_timeout)
        resp = decode_response(output, ModemListResponse, "modem list")

        if not resp.modem_list:
            raise NoModemsFound("no modems detected")

        return [Modem.from_path(path) for path in resp.modem_list]

    async def get_status(self, modem: Modem) -> ModemStatus:
        output = await self._run([f"--modem={modem.index}", "--output-json"], "query modem status")
        resp = decode_response(output, ModemStatusResponse, "modem status")

        return ModemStatus(
            dbus_path=resp.modem.dbus_path,
            state=resp.modem.generic.state,
            bearers=list(resp.modem.generic.bearers),
        )

    async def simple_connect(self, modem: Modem, apn: str) -> None:
        await self._run(
            [f"--modem={modem.index}", f"--simple-connect=apn={apn},ip-type=ipv4v6"],
            "connect modem",
        )

    async def get_bearer(self, modem: Modem, ref: str) -> Bearer:
        output = await self._run(
            [f"--modem={modem.index}", f"--bearer={ref}", "--output-json"],
            "query bearer",
        )
        return decode_response(output, BearerResponse, "bearer").bearer

    async def connect_bearer(self, bearer: Bearer) -> None:
        await self._run([f"--bearer={bearer.dbus_path}", "--connect"], "connect bearer")

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    async def _run(self, args: Sequence[str], action: str, timeout: Optional[float] = None) -> str:
        """Run mmcli and return its output; raise AdapterInvocationFailed on failure."""
        if timeout is None:
            timeout = self.command_timeout

        result: CommandResult = await self.runner.run(self.executable, list(args), timeout=timeout)
        if not result.ok:
            logger.error(f"Failed to run command: {self.executable} {' '.join(args)}: {result.output}")
            raise AdapterInvocationFailed(
                f"failed to {action}",
                command=[self.executable, *args],
                returncode=result.returncode,
                output=result.output,
                timed_out=result.timed_out,
            )
        return result.output
