"""
Actor context passed into every mutating operation
"""

from dataclasses import dataclass

from app.core.errors import InvalidActor


@dataclass(frozen=True)
class Actor:
    """Operator responsible for a change, recorded as the audit entry's admin user"""

    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidActor()
        object.__setattr__(self, "name", self.name.strip())

    def __str__(self):
        return self.name
