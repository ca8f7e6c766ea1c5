# mc1r_pipeline/models/chromatogram.py

import os
from dataclasses import dataclass
from typing import Dict

import numpy as np

from mc1r_pipeline.errors import FormatError


@dataclass(frozen=True, eq=False)
class Chromatogram:
    """
    Decoded Sanger trace. The per-base arrays (bases, qualities, peak_locations)
    share one length; traces are keyed by the four channel_order letters and
    each has its own length (one value per scan point).
    """
    file_path: str
    bases: str
    qualities: np.ndarray
    peak_locations: np.ndarray
    channel_order: str
    traces: Dict[str, np.ndarray]

    def __post_init__(self):
        if not (len(self.bases) == len(self.qualities) == len(self.peak_locations)):
            raise FormatError(
                f"Inconsistent PBAS/PCON/PLOC lengths "
                f"({len(self.bases)}/{len(self.qualities)}/{len(self.peak_locations)})."
            )
        if sorted(self.traces) != sorted(self.channel_order):
            raise FormatError(
                f"Trace channels {sorted(self.traces)} do not match channel order '{self.channel_order}'."
            )
        for arr in (self.qualities, self.peak_locations, *self.traces.values()):
            arr.setflags(write=False)

    @property
    def sample_name(self) -> str:
        return os.path.basename(self.file_path)

    def __len__(self) -> int:
        return len(self.bases)
