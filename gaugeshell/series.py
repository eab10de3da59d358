"""Data structures for metric identities."""
from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class Metric:
    """A metric name plus the tags narrowing it to one series."""
    name: str
    tags: Dict[str, str] = field(default_factory=dict)

    def label_key(self) -> str:
        """Generate a stable key from sorted tags."""
        items = sorted(self.tags.items())
        return ",".join(f"{k}={v}" for k, v in items)

    def __str__(self) -> str:
        if not self.tags:
            return self.name
        return f"{self.name}[{self.label_key()}]"
