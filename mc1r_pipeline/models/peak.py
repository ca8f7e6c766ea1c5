# mc1r_pipeline/models/peak.py

from dataclasses import dataclass


@dataclass(frozen=True)
class PeakSummary:
    top_base: str
    second_base: str
    top: int
    second: int
    total: int
    purity: float
    secondary_fraction: float
    secondary_over_top: float

    def to_dict(self) -> dict:
        return {
            "top_base": self.top_base,
            "second_base": self.second_base,
            "top": int(self.top),
            "second": int(self.second),
            "total": int(self.total),
            "purity": float(self.purity),
            "secondary_fraction": float(self.secondary_fraction),
            "secondary_over_top": float(self.secondary_over_top),
        }

    @property
    def dict(self):
        return self.to_dict()
