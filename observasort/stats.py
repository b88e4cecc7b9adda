from dataclasses import dataclass, asdict


@dataclass
class Stats:
    """Operation counters for the current run plus the last command's label."""
    reads: int = 0
    writes: int = 0
    comparisons: int = 0
    swaps: int = 0
    action: str = ""

    def reset(self):
        self.reads = 0
        self.writes = 0
        self.comparisons = 0
        self.swaps = 0
        self.action = ""

    def snapshot(self) -> dict:
        return asdict(self)
