"""
Test doubles for wwand tests

FakeRunner replaces real executables with canned output and records every
invocation. The *_json builders produce mmcli --output-json responses in
the exact shape (and quirks) ModemManager emits.
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from wwand.utils.command import CommandResult, CommandRunner

MODEM_PATH = "/org/freedesktop/ModemManager1/Modem/{}"
BEARER_PATH = "/org/freedesktop/ModemManager1/Bearer/{}"


@dataclass
class Call:
    name: str
    args: List[str]
    timeout: Optional[float] = None

    @property
    def argv(self) -> List[str]:
        return [self.name, *self.args]


Response = Union[CommandResult, List[CommandResult]]


class FakeRunner(CommandRunner):
    """
    Deterministic CommandRunner.

    Responses are keyed by (name, args). A list of results is consumed in
    order, the last one repeating. Unknown commands succeed with no output.
    """

    def __init__(self):
        self.responses: Dict[Tuple[str, Tuple[str, ...]], Response] = {}
        self.calls: List[Call] = []

    def on(self, name: str, args: Sequence[str], output: str = "", returncode: int = 0, timed_out: bool = False):
        self.responses[(name, tuple(args))] = CommandResult(output, returncode, timed_out)
        return self

    def on_sequence(self, name: str, args: Sequence[str], results: List[CommandResult]):
        self.responses[(name, tuple(args))] = list(results)
        return self

    async def run(self, name: str, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        self.calls.append(Call(name, list(args), timeout))
        resp = self.responses.get((name, tuple(args)))
        if resp is None:
            return CommandResult("", 0)
        if isinstance(resp, list):
            return resp.pop(0) if len(resp) > 1 else resp[0]
        return resp

    def calls_to(self, name: str) -> List[Call]:
        return [c for c in self.calls if c.name == name]


# ─────────────────────────────────────────────────────────────────────────────
# mmcli JSON builders
# ─────────────────────────────────────────────────────────────────────────────


def modem_list_json(*paths: str) -> str:
    return json.dumps({"modem-list": list(paths)})


def modem_status_json(index: int, bearers: Sequence[str] = (), state: str = "registered") -> str:
    return json.dumps(
        {
            "modem": {
                "dbus-path": MODEM_PATH.format(index),
                "generic": {
                    "bearers": list(bearers),
                    "state": state,
                    "manufacturer": "Quectel",
                    "model": "EM06-E",
                },
            }
        }
    )


def bearer_json(
    index: int,
    connected: bool = True,
    address: str = "10.0.0.5",
    prefix: str = "30",
    gateway: str = "10.0.0.6",
    dns: Sequence[str] = ("10.0.0.1",),
    mtu: str = "1500",
    interface: str = "wwan0",
) -> str:
    if connected:
        ipv4 = {
            "address": address,
            "dns": list(dns),
            "gateway": gateway,
            "method": "static",
            "mtu": mtu,
            "prefix": prefix,
        }
    else:
        ipv4 = {"address": "--", "dns": [], "gateway": "--", "method": "--", "mtu": "--", "prefix": "--"}

    return json.dumps(
        {
            "bearer": {
                "dbus-path": BEARER_PATH.format(index),
                "ipv4-config": ipv4,
                "status": {
                    "connected": "yes" if connected else "no",
                    "interface": interface if connected else "--",
                    "suspended": "no",
                },
            }
        }
    )


# ─────────────────────────────────────────────────────────────────────────────
# Command argument helpers
# ─────────────────────────────────────────────────────────────────────────────


def list_args() -> List[str]:
    return ["--list-modems", "--output-json"]


def status_args(index: int) -> List[str]:
    return [f"--modem={index}", "--output-json"]


def bearer_args(modem: int, bearer: int) -> List[str]:
    return [f"--modem={modem}", f"--bearer={BEARER_PATH.format(bearer)}", "--output-json"]


def connect_bearer_args(bearer: int) -> List[str]:
    return [f"--bearer={BEARER_PATH.format(bearer)}", "--connect"]


def simple_connect_args(modem: int, apn: str) -> List[str]:
    return [f"--modem={modem}", f"--simple-connect=apn={apn},ip-type=ipv4v6"]
