from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LabelSeries:
    """Parallel arrays: labels[i] names the group, data[i] holds its summed hours."""

    labels: list[str] = field(default_factory=list)
    data: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"labels": list(self.labels), "data": list(self.data)}


@dataclass(frozen=True)
class StatisticsResult:
    timestamp: int
    total_entries: int
    hours_day: LabelSeries
    hours_project: LabelSeries
    hours_employee: LabelSeries

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "totalEntries": self.total_entries,
            "hoursDay": self.hours_day.to_dict(),
            "hoursProject": self.hours_project.to_dict(),
            "hoursEmployee": self.hours_employee.to_dict(),
        }
