# mc1r_pipeline/models/genotype.py

from dataclasses import dataclass
from typing import Optional

NO_CALL = "NoCall"


@dataclass(frozen=True)
class SiteCall:
    site: str
    cds_position: int
    genotype: str = NO_CALL
    note: Optional[str] = None

    @property
    def is_called(self) -> bool:
        return self.genotype != NO_CALL

    @property
    def alleles(self) -> tuple:
        if not self.is_called:
            return ()
        return tuple(self.genotype.split("/"))

    @property
    def is_heterozygous(self) -> bool:
        alleles = self.alleles
        return len(alleles) == 2 and alleles[0] != alleles[1]

    def to_dict(self) -> dict:
        return {
            "site": self.site,
            "cds_position": int(self.cds_position),
            "genotype": self.genotype,
            "note": self.note or "",
        }

    @property
    def dict(self):
        return self.to_dict()
