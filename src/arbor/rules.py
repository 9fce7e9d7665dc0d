"""Security rules documents."""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel, Field


class RuleSet(BaseModel):
    """The ``{"rules": {...}}`` document stored at ``/.settings/rules``."""

    rules: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def default(cls) -> RuleSet:
        """Only authenticated users can read or write."""
        return cls(rules={".read": "auth != null", ".write": "auth != null"})

    @classmethod
    def public(cls) -> RuleSet:
        return cls(rules={".read": True, ".write": True})

    @classmethod
    def private(cls) -> RuleSet:
        return cls(rules={".read": False, ".write": False})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuleSet:
        if "rules" not in data:
            raise ValueError("A rules document must have a top-level 'rules' key")
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()

    def with_index(self, path: str, index_on: str) -> RuleSet:
        """Copy of this rule set with ``index_on`` added to ``.indexOn`` at ``path``."""
        data = copy.deepcopy(self.rules)
        node = data
        for segment in path.split("/"):
            if not segment:
                continue
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child

        existing = node.get(".indexOn")
        if existing is None:
            node[".indexOn"] = index_on
        else:
            indexes = existing if isinstance(existing, list) else [existing]
            if index_on not in indexes:
                indexes = [*indexes, index_on]
            node[".indexOn"] = indexes[0] if len(indexes) == 1 else indexes
        return RuleSet(rules=data)
