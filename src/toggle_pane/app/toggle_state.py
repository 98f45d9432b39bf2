"""Per-tab toggle state and its on-disk record envelope.

In memory, "no pane" is ``None``. On disk the record keeps the ``-1``
sentinel so files written by earlier installs still load.

// [LAW:one-source-of-truth] Record shape is encoded/decoded only here.
"""

from __future__ import annotations

from dataclasses import dataclass

NONE_SENTINEL = -1


class RecordError(ValueError):
    """Persisted record is structurally invalid or belongs to another tab."""


@dataclass
class ToggleState:
    """Toggle pane, invoker pane, and remembered zoom for one tab."""

    pane_id: int | None = None
    invoker_id: int | None = None
    zoomed: bool = False

    @property
    def is_empty(self) -> bool:
        return self.pane_id is None and self.invoker_id is None

    def to_record(self, tab_id: int, timestamp: int) -> dict:
        return {
            "tab_id": tab_id,
            "timestamp": timestamp,
            "state": {
                "pane_id": _encode_id(self.pane_id),
                "invoker_id": _encode_id(self.invoker_id),
                "zoomed": bool(self.zoomed),
            },
        }

    @classmethod
    def from_record(cls, data: object, tab_id: int) -> "ToggleState":
        """Decode a record envelope, cross-checking its tab id.

        Raises RecordError for anything that is not exactly the expected shape.
        """
        if not isinstance(data, dict):
            raise RecordError("record is {}, not an object".format(type(data).__name__))
        if not _is_int(data.get("tab_id")) or data["tab_id"] != tab_id:
            raise RecordError("mismatched tab_id {!r}".format(data.get("tab_id")))
        state = data.get("state")
        if not isinstance(state, dict):
            raise RecordError("missing state object")
        pane_id = state.get("pane_id")
        invoker_id = state.get("invoker_id")
        zoomed = state.get("zoomed")
        if not (_is_int(pane_id) and _is_int(invoker_id) and isinstance(zoomed, bool)):
            raise RecordError("malformed state structure")
        return cls(
            pane_id=_decode_id(pane_id),
            invoker_id=_decode_id(invoker_id),
            zoomed=zoomed,
        )


def _is_int(value: object) -> bool:
    # bool is an int subclass; a JSON true is never a pane id.
    return isinstance(value, int) and not isinstance(value, bool)


def _encode_id(value: int | None) -> int:
    return NONE_SENTINEL if value is None else int(value)


def _decode_id(value: int) -> int | None:
    if value == NONE_SENTINEL:
        return None
    if value < 0:
        raise RecordError("invalid pane id {!r}".format(value))
    return value
