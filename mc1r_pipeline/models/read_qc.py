# mc1r_pipeline/models/read_qc.py

from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class ReadQcSummary:
    is_dirty: bool
    reason: str = ""
    total_aligned: int = 0
    high_quality_aligned: int = 0
    median_quality: float = 0.0
    median_purity: float = 0.0
    frac_low_purity: float = 0.0
    frac_moderate_secondary: float = 0.0
    frac_strong_secondary: float = 0.0
    max_moderate_run: int = 0
    moderate_count: int = 0
    strong_count: int = 0
    max_moderate_in_window: int = 0
    max_strong_in_window: int = 0
    looks_localized: bool = False
    pattern: str = ""

    @staticmethod
    def not_evaluated(reason: str) -> "ReadQcSummary":
        """Summary for reads that never reached the QC stage."""
        return ReadQcSummary(is_dirty=True, reason=reason, pattern="not evaluated")

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def dict(self):
        return self.to_dict()
