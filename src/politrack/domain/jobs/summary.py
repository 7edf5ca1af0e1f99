"""Per-run outcome counts with a bounded sample of error messages."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

DEFAULT_ERROR_SAMPLE_SIZE = 10


@dataclass(slots=True)
class JobSummary:
    job_name: str
    error_sample_size: int = DEFAULT_ERROR_SAMPLE_SIZE
    counts: Counter[str] = field(default_factory=Counter[str])
    errors: list[str] = field(default_factory=list[str])
    error_count: int = 0
    cancelled: bool = False

    def count(self, category: str, amount: int = 1) -> None:
        self.counts[str(category)] += amount

    def record_error(self, message: str) -> None:
        self.error_count += 1
        if len(self.errors) < self.error_sample_size:
            self.errors.append(message)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def __getitem__(self, category: str) -> int:
        return self.counts[str(category)]


def format_summary(summary: JobSummary) -> str:
    header = f"{summary.job_name}: {summary.total} records"
    if summary.cancelled:
        header += " (cancelled)"
    lines = [header]
    for category, amount in sorted(summary.counts.items()):
        lines.append(f"  {category}: {amount}")
    if summary.error_count:
        lines.append(f"  errors: {summary.error_count}")
        lines.extend(f"    - {message}" for message in summary.errors)
        hidden = summary.error_count - len(summary.errors)
        if hidden > 0:
            lines.append(f"    ... and {hidden} more")
    return "\n".join(lines)
