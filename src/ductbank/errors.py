"""Error and warning types shared across the engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class InvalidConductorSize(ValueError):
    """Raised when a conductor size has no entry in the conductor property table."""

    def __init__(self, size: object, cable_tag: Optional[str] = None) -> None:
        self.size = size
        self.cable_tag = cable_tag
        where = f" for cable {cable_tag}" if cable_tag else ""
        super().__init__(f"Invalid conductor size: {size!r}{where}")


@dataclass
class Issue:
    """Non-fatal data-quality or solver warning."""

    severity: str
    code: str
    path: str
    message: str

    def to_dict(self) -> dict:
        return {
            "severity": self.severity,
            "code": self.code,
            "path": self.path,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"[{self.severity}] {self.path}: {self.message}"


def warning(code: str, path: str, message: str) -> Issue:
    return Issue(severity="warning", code=code, path=path, message=message)
