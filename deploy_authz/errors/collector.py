"""Error collector – accumulates rejections raised while vetting an operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class ErrorCollector(Protocol):
    def reject(self, code: str, message: str) -> None: ...


@dataclass(frozen=True)
class Rejection:
    code: str
    message: str


class DescriptionValidationError(Exception):
    """Raised by callers that turn collected rejections into control flow."""

    def __init__(self, rejections: list[Rejection]):
        self.rejections = list(rejections)
        super().__init__("; ".join(r.message for r in self.rejections) or "Operation rejected")


@dataclass
class OperationErrors:
    """Concrete ``ErrorCollector`` – never raises on ``reject``."""

    rejections: list[Rejection] = field(default_factory=list)

    def reject(self, code: str, message: str) -> None:
        self.rejections.append(Rejection(code, message))

    @property
    def has_errors(self) -> bool:
        return bool(self.rejections)

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.rejections]

    def by_code(self, code: str) -> list[Rejection]:
        return [r for r in self.rejections if r.code == code]

    def raise_if_rejected(self) -> None:
        if self.rejections:
            raise DescriptionValidationError(self.rejections)
