# mc1r_pipeline/core/read_qc.py

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from mc1r_pipeline.config.global_config import GlobalConfig, ReadQcConfig
from mc1r_pipeline.core.orientation import OrientedAlignment
from mc1r_pipeline.core.peak_summarizer import PeakSummarizer
from mc1r_pipeline.models.chromatogram import Chromatogram
from mc1r_pipeline.models.read_qc import ReadQcSummary

logger = logging.getLogger(__name__)

REASON_INSUFFICIENT = "insufficient high-quality aligned region"
REASON_LOW_QUALITY = "low base-call quality across read"
REASON_STRONG = "strong secondary peaks across read"
REASON_PERSISTENT = "persistent secondary peaks"
REASON_LONG_RUN = "long run of secondary peaks"
REASON_CLUSTERED = "clustered secondary peaks"
REASON_LOW_PURITY = "low peak purity"
MIXED_TEMPLATE_ADVICE = "DIRTY / MIXED TEMPLATE - repeat PCR/sequencing"

PATTERN_INSUFFICIENT = "insufficient data"
PATTERN_MIXED = "mixed template"
PATTERN_LOW_QUALITY = "low quality"
PATTERN_LOCALIZED = "localized secondary peaks"
PATTERN_REDUCED_PURITY = "reduced purity"
PATTERN_CLEAN = "clean"


def median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.median(values))


def max_in_window(flags: Sequence[bool], window: int) -> int:
    """Largest number of set flags inside any run of `window` consecutive positions."""
    arr = np.asarray(flags, dtype=np.int64)
    if arr.size == 0:
        return 0
    if arr.size <= window:
        return int(arr.sum())
    return int(np.convolve(arr, np.ones(window, dtype=np.int64), mode="valid").max())


def _mixed(reason: str) -> str:
    return f"{MIXED_TEMPLATE_ADVICE} ({reason})"


def _verdict(
    qc: ReadQcConfig,
    hq: int,
    median_q: float,
    median_purity: float,
    frac_low: float,
    frac_moderate: float,
    frac_strong: float,
    max_run: int,
    max_moderate_window: int,
    max_strong_window: int,
    localized: bool,
) -> Tuple[bool, str, str]:
    if hq < qc.min_high_quality_aligned:
        return True, REASON_INSUFFICIENT, PATTERN_INSUFFICIENT
    if median_q < qc.min_median_quality:
        return True, REASON_LOW_QUALITY, PATTERN_LOW_QUALITY

    if not localized:
        if frac_strong > qc.max_strong_fraction:
            return True, _mixed(REASON_STRONG), PATTERN_MIXED
        if frac_moderate > qc.max_moderate_fraction and median_purity < qc.persistent_median_purity:
            return True, _mixed(REASON_PERSISTENT), PATTERN_MIXED
        if max_run >= qc.max_moderate_run:
            return True, _mixed(REASON_LONG_RUN), PATTERN_MIXED
        if max_strong_window >= qc.max_strong_in_window or max_moderate_window >= qc.max_moderate_in_window:
            return True, _mixed(REASON_CLUSTERED), PATTERN_MIXED

    if frac_low > qc.max_low_purity_fraction or median_purity < qc.min_median_purity:
        return True, REASON_LOW_PURITY, PATTERN_LOW_QUALITY

    return False, "", ""


def classify_read(
    chromatogram: Chromatogram,
    oriented: OrientedAlignment,
    config: Optional[GlobalConfig] = None,
    summarizer: Optional[PeakSummarizer] = None,
) -> ReadQcSummary:
    """
    Decides whether the read as a whole looks like a mixed template.

    Walks the aligned reference positions in order and classifies every
    high-quality position by the strength of its secondary peak. A read is
    only condemned for secondary signal when that signal is not confined to
    a few isolated positions, so a genuine heterozygous site keeps a clean
    read clean.
    """
    config = config or GlobalConfig()
    qc = config.read_qc
    summarizer = summarizer or PeakSummarizer(chromatogram, config.peaks)
    alignment = oriented.alignment

    total_aligned = 0
    purities: List[float] = []
    moderate_flags: List[bool] = []
    strong_flags: List[bool] = []
    low_purity = 0
    run = 0
    max_run = 0

    for ref_index in alignment.mapped_ref_positions():
        bidx = oriented.read_index(int(alignment.ref_to_query[ref_index]))
        if not 0 <= bidx < len(chromatogram):
            continue
        total_aligned += 1

        if chromatogram.qualities[bidx] < qc.min_quality:
            run = 0
            continue

        peak = summarizer.summarize(bidx)
        if peak.total < config.peaks.min_signal_sum:
            run = 0
            continue

        moderate = (
            peak.secondary_fraction >= qc.moderate_secondary_fraction
            and peak.secondary_over_top >= qc.moderate_secondary_over_top
        )
        strong = (
            peak.secondary_fraction >= qc.strong_secondary_fraction
            and peak.secondary_over_top >= qc.strong_secondary_over_top
        )

        purities.append(peak.purity)
        moderate_flags.append(moderate)
        strong_flags.append(strong)
        if peak.purity < qc.low_purity:
            low_purity += 1

        if moderate:
            run += 1
            max_run = max(max_run, run)
        else:
            run = 0

    hq = len(purities)
    moderate_count = sum(moderate_flags)
    strong_count = sum(strong_flags)
    frac_low = low_purity / hq if hq else 0.0
    frac_moderate = moderate_count / hq if hq else 0.0
    frac_strong = strong_count / hq if hq else 0.0
    median_q = median(chromatogram.qualities)
    median_purity = median(purities)
    max_moderate_window = max_in_window(moderate_flags, qc.window_size)
    max_strong_window = max_in_window(strong_flags, qc.window_size)

    localized = (
        strong_count <= qc.localized_max_strong_count
        and max_run <= qc.localized_max_run
        and frac_strong <= qc.localized_max_strong_fraction
        and max_moderate_window <= qc.localized_max_moderate_in_window
    )

    is_dirty, reason, pattern = _verdict(
        qc, hq, median_q, median_purity, frac_low, frac_moderate, frac_strong,
        max_run, max_moderate_window, max_strong_window, localized,
    )
    if not is_dirty:
        if moderate_count > 0 and localized:
            pattern = PATTERN_LOCALIZED
        elif median_purity < qc.pattern_median_purity:
            pattern = PATTERN_REDUCED_PURITY
        else:
            pattern = PATTERN_CLEAN

    logger.info(
        "%s: hq=%d medianQ=%.1f medianPurity=%.3f strong=%d maxRun=%d -> %s",
        chromatogram.sample_name, hq, median_q, median_purity, strong_count, max_run,
        reason or "clean",
    )

    return ReadQcSummary(
        is_dirty=is_dirty,
        reason=reason,
        total_aligned=total_aligned,
        high_quality_aligned=hq,
        median_quality=median_q,
        median_purity=median_purity,
        frac_low_purity=frac_low,
        frac_moderate_secondary=frac_moderate,
        frac_strong_secondary=frac_strong,
        max_moderate_run=max_run,
        moderate_count=moderate_count,
        strong_count=strong_count,
        max_moderate_in_window=max_moderate_window,
        max_strong_in_window=max_strong_window,
        looks_localized=localized,
        pattern=pattern,
    )
