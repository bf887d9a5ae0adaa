"""
Scalar codecs for mmcli JSON output

mmcli renders integers as quoted decimal strings ("1500") and booleans as
the bare tokens yes/no. Both get a dedicated codec with explicit decode and
encode, and an Annotated type that plugs the codec into pydantic models.
"""

import json
from typing import Any, Annotated

from pydantic import BeforeValidator, PlainSerializer

from ...errors import DecodeFailed

# mmcli prints this for any property that has no value
EMPTY_VALUE = "--"


class QuotedInt:
    """Integer carried as a quoted decimal string."""

    @staticmethod
    def decode(raw: Any) -> int:
        if isinstance(raw, bool):
            raise DecodeFailed(f"failed to decode integer: {raw!r}")
        if isinstance(raw, int):
            return raw
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeFailed(f"failed to decode integer: {e}") from e
        if not isinstance(raw, str):
            raise DecodeFailed(f"failed to decode integer: {raw!r}")

        text = raw.strip().strip('"').strip()
        try:
            return int(text, 10)
        except ValueError as e:
            raise DecodeFailed(f"failed to decode integer: {raw!r}") from e

    @staticmethod
    def encode(value: int) -> str:
        return f'"{int(value)}"'


def decode_optional_int(raw: Any) -> int:
    """QuotedInt that reads mmcli's empty placeholder as 0."""
    if isinstance(raw, str) and raw.strip().strip('"') == EMPTY_VALUE:
        return 0
    return QuotedInt.decode(raw)


class YesNoBool:
    """Boolean carried as yes/no. Any other token, JSON true included, decodes to False."""

    @staticmethod
    def decode(raw: Any) -> bool:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        if not isinstance(raw, str):
            return False
        return raw.strip().strip('"') == "yes"

    @staticmethod
    def encode(value: bool) -> str:
        return json.dumps(bool(value))


_int_serializer = PlainSerializer(lambda v: str(int(v)), return_type=str)

MMInt = Annotated[int, BeforeValidator(QuotedInt.decode), _int_serializer]
# Numeric bearer properties, unset ("--") while the bearer is disconnected
MMOptionalInt = Annotated[int, BeforeValidator(decode_optional_int), _int_serializer]
MMBool = Annotated[bool, BeforeValidator(YesNoBool.decode), PlainSerializer(lambda v: bool(v), return_type=bool)]
