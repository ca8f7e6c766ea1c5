# mc1r_pipeline/core/peak_summarizer.py

from typing import Dict, Optional

import numpy as np
from scipy.ndimage import maximum_filter1d

from mc1r_pipeline.config.global_config import PeakConfig
from mc1r_pipeline.models.chromatogram import Chromatogram
from mc1r_pipeline.models.peak import PeakSummary

BASES = ("A", "C", "G", "T")


class PeakSummarizer:
    """
    Ranks the four channels at a basecall's peak position.

    Each channel contributes its maximum intensity within +/- window scans of
    the reported peak location, which absorbs small offsets between the
    basecaller's position and the true apex. Missing channels and empty
    windows contribute 0.
    """

    def __init__(self, chromatogram: Chromatogram, config: Optional[PeakConfig] = None):
        self.chromatogram = chromatogram
        self.config = config or PeakConfig()
        self._maxima: Dict[str, np.ndarray] = {}
        for base in BASES:
            trace = chromatogram.traces.get(base)
            if trace is not None and len(trace) > 0:
                filtered = maximum_filter1d(
                    trace.astype(np.int64), size=2 * self.config.window + 1, mode="nearest"
                )
                self._maxima[base] = np.maximum(filtered, 0)

    def channel_max(self, base: str, x: int) -> int:
        maxima = self._maxima.get(base)
        if maxima is None:
            return 0
        if 0 <= x < len(maxima):
            return int(maxima[x])

        # peak location off the end of the trace; only part of the window overlaps
        trace = self.chromatogram.traces[base]
        w = self.config.window
        lo, hi = max(0, x - w), min(len(trace) - 1, x + w)
        if lo > hi:
            return 0
        return max(0, int(trace[lo:hi + 1].max()))

    def summarize(self, base_index: int) -> PeakSummary:
        x = int(self.chromatogram.peak_locations[base_index])
        values = [(base, self.channel_max(base, x)) for base in BASES]
        ranked = sorted(values, key=lambda item: item[1], reverse=True)

        (top_base, top), (second_base, second) = ranked[0], ranked[1]
        total = sum(v for _, v in values)

        return PeakSummary(
            top_base=top_base,
            second_base=second_base,
            top=top,
            second=second,
            total=total,
            purity=top / total if total > 0 else 0.0,
            secondary_fraction=second / total if total > 0 else 0.0,
            secondary_over_top=second / top if top > 0 else 0.0,
        )


def summarize_peak(chromatogram: Chromatogram, base_index: int, window: int = 2) -> PeakSummary:
    return PeakSummarizer(chromatogram, PeakConfig(window=window)).summarize(base_index)
