# jinplate/core/metrics.py
"""Per-run counters and timings collected while gathering and rendering."""
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class Metrics:
    templates_gathered: int = 0
    templates_processed: int = 0
    errors: int = 0
    # durations in seconds
    gather_duration: float = 0.0
    render_durations: Dict[str, float] = field(default_factory=dict)
    total_render_duration: float = 0.0

    def summary(self) -> str:
        return (
            f"rendered {self.templates_processed} template(s) with {self.errors} error(s) "
            f"in {self.total_render_duration:.3f}s"
        )
