from typing import Dict, Optional, Protocol


class MetricsPort(Protocol):
    """Sink for counter samples produced once a job has finished."""

    def counter(self, name: str, value: int, tags: Optional[Dict[str, str]] = None) -> None:  # pragma: no cover - protocol
        ...
