"""Canonical dependency record."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dependency:
    """A single resolved package as recorded in a lockfile."""

    name: str
    version: str
    integrity: str | None = None
    resolved: str | None = None
    link: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Dependency name must be non-empty")
        if not self.version:
            raise ValueError(f"Dependency {self.name} must have a non-empty version")

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"name": self.name, "version": self.version}
        if self.integrity:
            data["integrity"] = self.integrity
        if self.resolved:
            data["resolved"] = self.resolved
        if self.link:
            data["link"] = True
        return data
