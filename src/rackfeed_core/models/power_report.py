from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["FAIL", "WARN", "INFO"]


class Finding(BaseModel):
    """A single plan finding with severity, code, message, and context."""

    model_config = ConfigDict(extra="ignore")
    severity: Severity
    code: str
    message: str
    context: dict = Field(default_factory=dict)


class Report(BaseModel):
    """Complete power plan report with summary and findings."""

    model_config = ConfigDict(extra="ignore")
    summary: dict
    findings: list[Finding]

    def by_code(self, code: str) -> list[Finding]:
        return [f for f in self.findings if f.code == code]

    @property
    def has_failures(self) -> bool:
        return any(f.severity == "FAIL" for f in self.findings)
