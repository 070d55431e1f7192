from __future__ import annotations

from dataclasses import dataclass

from cinema_explorer.core.exceptions import CinemaError


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str


class FormatError(CinemaError):
    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("\n".join(f"{i.code}: {i.message}" for i in issues))

    @property
    def codes(self) -> list[str]:
        return [i.code for i in self.issues]
