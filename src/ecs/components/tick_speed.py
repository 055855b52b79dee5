from dataclasses import dataclass

@dataclass(slots=True)
class TickSpeed:
    """Fall interval; ``current_ms`` only ever shrinks towards the floor."""
    base_ms: float
    current_ms: float
    min_ms: float = 80.0

    @property
    def ratio(self) -> float:
        return self.base_ms / self.current_ms if self.current_ms > 0 else 1.0

    def reset(self) -> None:
        self.current_ms = self.base_ms
