# mc1r_pipeline/models/sample.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from mc1r_pipeline.models.genotype import SiteCall, NO_CALL
from mc1r_pipeline.models.read_qc import ReadQcSummary


class Orientation(str, Enum):
    FORWARD = "Forward"
    REVERSE_COMPLEMENT = "ReverseComplement"


@dataclass(frozen=True)
class SampleCallResult:
    sample_name: str
    file_path: str
    orientation: Orientation
    alignment_score: int
    is_dirty: bool
    dirty_reason: str
    site_calls: Tuple[SiteCall, ...]
    allele_labels: Dict[str, str] = field(default_factory=dict)
    qc: Optional[ReadQcSummary] = None

    def site_call(self, site: str) -> SiteCall:
        for call in self.site_calls:
            if call.site == site:
                return call
        raise KeyError(site)

    def genotype(self, site: str) -> str:
        try:
            return self.site_call(site).genotype
        except KeyError:
            return NO_CALL

    @property
    def dirty_flag(self) -> str:
        return "DIRTY" if self.is_dirty else "OK"

    def to_dict(self) -> dict:
        return {
            "sample_name": self.sample_name,
            "file_path": self.file_path,
            "orientation": self.orientation.value,
            "alignment_score": int(self.alignment_score),
            "is_dirty": bool(self.is_dirty),
            "dirty_reason": self.dirty_reason,
            "site_calls": [c.to_dict() for c in self.site_calls],
            "allele_labels": dict(self.allele_labels),
            "qc": self.qc.to_dict() if self.qc else None,
        }

    @property
    def dict(self):
        return self.to_dict()
