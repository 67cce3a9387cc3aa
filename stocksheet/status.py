"""Status events reported to the UI after every session operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

IDLE = "idle"
LOADING = "loading"
SUCCESS = "success"
ERROR = "error"

STATUS_KINDS = (IDLE, LOADING, SUCCESS, ERROR)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Status:
    kind: str
    message: str
    emitted_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self) -> None:
        if self.kind not in STATUS_KINDS:
            raise ValueError(f"Unknown status kind '{self.kind}'. Expected one of: {', '.join(STATUS_KINDS)}")

    def as_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "emitted_at": self.emitted_at}


def idle_status() -> Status:
    return Status(IDLE, "Drop an .xlsx file or use the uploader to begin.")
