"""
Named query declarations attached to entity classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class NamedQuery:
    name: str
    query: str
    hints: Mapping[str, object] = field(default_factory=dict)
