# mc1r_pipeline/models/reference.py

from dataclasses import dataclass


@dataclass(frozen=True)
class Reference:
    header: str
    cds_sequence: str
    source_path: str

    def __len__(self) -> int:
        return len(self.cds_sequence)

    def base_at(self, cds_position: int) -> str:
        """Reference base at a 1-based CDS coordinate."""
        return self.cds_sequence[cds_position - 1]
