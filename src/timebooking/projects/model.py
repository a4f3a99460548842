from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str

    def to_dict(self) -> dict:
        return {"id": self.project_id, "name": self.name}
