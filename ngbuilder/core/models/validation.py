"""
Validation report — the contract between the sandbox and the builder.

Like an adapter receipt, a report is returned rather than raised: the
sandbox captures script failures here and the builder decides whether a
failed report is a warning or a stop.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LeakedGlobal(BaseModel):
    """An identifier a script wrote to (or read from) the global scope."""

    name: str
    kind: Literal["function", "var", "unknown"] = "unknown"


class ValidationReport(BaseModel):
    """Outcome of running one source block in the sandbox."""

    status: Literal["valid", "leaked", "timed_out", "error"] = "valid"
    leaks: list[LeakedGlobal] = Field(default_factory=list)
    error: str | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Whether the block passed validation."""
        return self.status == "valid"

    @property
    def leak_names(self) -> list[str]:
        return [leak.name for leak in self.leaks]

    def merge_leaks(self, extra: list[LeakedGlobal]) -> ValidationReport:
        """Return a copy with additional leaks (duplicates dropped)."""
        if not extra:
            return self
        seen = set(self.leak_names)
        leaks = list(self.leaks)
        for leak in extra:
            if leak.name not in seen:
                seen.add(leak.name)
                leaks.append(leak)
        status = self.status if self.status != "valid" else "leaked"
        return self.model_copy(update={"leaks": leaks, "status": status})

    def describe(self) -> str:
        """One-line human summary of the failure reason."""
        if self.status == "valid":
            return "valid"
        if self.status == "timed_out":
            return "execution timed out"
        if self.status == "error":
            return f"execution failed: {self.error}"
        return "global scope leakage: " + ", ".join(self.leak_names)

    @classmethod
    def valid(cls, **kwargs) -> ValidationReport:
        return cls(status="valid", **kwargs)

    @classmethod
    def leaked(cls, leaks: list[LeakedGlobal], **kwargs) -> ValidationReport:
        return cls(status="leaked", leaks=leaks, **kwargs)

    @classmethod
    def timed_out(cls, error: str = "", **kwargs) -> ValidationReport:
        return cls(status="timed_out", error=error or None, **kwargs)

    @classmethod
    def failure(cls, error: str, **kwargs) -> ValidationReport:
        return cls(status="error", error=error, **kwargs)
