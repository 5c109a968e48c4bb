"""
Compute/execute separation for commands that write generated code.

`compute_*` produces a plan (pure, no side effects); `execute_*` performs
the writes described by that plan. Every write command supports a dry run
by stopping after the compute phase.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from .engine import BatchResult


@dataclass
class BasePlan(ABC):
    """Base class for operation plans (diagnostic output)."""
    source_path: Path

    @abstractmethod
    def summary(self) -> str:
        """Human-readable summary of what would be done."""
        ...


@dataclass
class BaseResult:
    """Base class for operation results (action output)."""
    bytes_written: int = 0
    success: bool = True
    error: str | None = None


@dataclass
class GeneratePlan(BasePlan):
    """Plan for generating code from a declaration file."""
    batch: BatchResult = field(default_factory=BatchResult)
    in_place: bool = False
    target_path: Path | None = None
    generated_content: str = ""
    existing_content: str = ""
    updated_content: str = ""

    def summary(self) -> str:
        impls = sum(len(r.stubs) for r in self.batch.results)
        tests = sum(len(r.tests) for r in self.batch.results)
        lines = [
            "Generate Plan",
            f"  Declarations: {self.source_path}",
            f"  Targets: {len(self.batch.results)} ok, {len(self.batch.diagnostics)} failed",
            f"  Impl stubs: {impls}",
            f"  Property tests: {tests}",
            f"  Mode: {'in-place update' if self.in_place else 'generate new'}",
        ]
        if self.target_path:
            lines.append(f"  Target: {self.target_path}")
        if self.in_place and self.existing_content:
            existing_len = len(self.existing_content.encode("utf-8"))
            updated_len = len(self.updated_content.encode("utf-8"))
            lines.append(f"  Size change: {existing_len} -> {updated_len} bytes")
        return "\n".join(lines)


@dataclass
class GenerateResult(BaseResult):
    """Result of generate execution."""
    output_path: Path | None = None
