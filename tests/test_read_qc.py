import pytest

from mc1r_pipeline.core import read_qc
from mc1r_pipeline.core.orientation import resolve_orientation
from mc1r_pipeline.core.read_qc import classify_read, max_in_window, median
from mc1r_pipeline.utils.toy_data import synthesize_trace, to_chromatogram

from .conftest import other_bases


def _classify(ref_seq, read, config, **trace_kwargs):
    chrom = to_chromatogram(synthesize_trace(read, **trace_kwargs))
    oriented = resolve_orientation(ref_seq, read, 0, config.alignment)
    return classify_read(chrom, oriented, config)


def _secondary_everywhere(read, ratio, k=1, every=1):
    return {
        i: [(b, ratio) for b in other_bases(base, k)]
        for i, base in enumerate(read)
        if i % every == 0
    }


def test_median_and_window_helpers() -> None:
    assert median([]) == 0.0
    assert median([3, 1, 2]) == 2.0
    assert median([1, 2, 3, 4]) == 2.5
    assert max_in_window([], 25) == 0
    assert max_in_window([True, False, True], 25) == 2
    assert max_in_window([1, 1, 0, 0, 1, 1, 1], 3) == 3


def test_clean_read(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config)
    assert not qc.is_dirty
    assert qc.reason == ""
    assert qc.pattern == read_qc.PATTERN_CLEAN
    assert qc.total_aligned == qc.high_quality_aligned == 750
    assert qc.median_quality == 40
    assert qc.median_purity == 1.0
    assert qc.moderate_count == qc.strong_count == 0


def test_single_heterozygous_site_stays_clean(ref_seq, read_seq, config) -> None:
    secondary = {123: [(other_bases(read_seq[123])[0], 0.5)]}
    qc = _classify(ref_seq, read_seq, config, secondary=secondary)
    assert not qc.is_dirty
    assert qc.strong_count == 1
    assert qc.looks_localized
    assert qc.pattern == read_qc.PATTERN_LOCALIZED


def test_strong_secondary_peaks_everywhere(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config, secondary=_secondary_everywhere(read_seq, 0.6))
    assert qc.is_dirty
    assert qc.reason.startswith(read_qc.MIXED_TEMPLATE_ADVICE)
    assert read_qc.REASON_STRONG in qc.reason
    assert qc.reason == "DIRTY / MIXED TEMPLATE - repeat PCR/sequencing (strong secondary peaks across read)"
    assert qc.pattern == read_qc.PATTERN_MIXED
    assert not qc.looks_localized


def test_long_run_of_moderate_peaks(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config, secondary=_secondary_everywhere(read_seq, 0.25))
    assert qc.is_dirty
    assert qc.strong_count == 0
    assert qc.max_moderate_run == 750
    assert read_qc.REASON_LONG_RUN in qc.reason


def test_persistent_secondary_peaks(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config, secondary=_secondary_everywhere(read_seq, 0.3, k=2))
    assert qc.is_dirty
    assert qc.median_purity == pytest.approx(0.625)
    assert read_qc.REASON_PERSISTENT in qc.reason


def test_clustered_strong_peaks(ref_seq, read_seq, config) -> None:
    secondary = {i: [(other_bases(read_seq[i])[0], 0.6)] for i in range(300, 316, 2)}
    qc = _classify(ref_seq, read_seq, config, secondary=secondary)
    assert qc.is_dirty
    assert qc.strong_count == 8
    assert qc.max_moderate_run == 1
    assert qc.max_strong_in_window == 8
    assert read_qc.REASON_CLUSTERED in qc.reason


def test_low_peak_purity(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config, secondary=_secondary_everywhere(read_seq, 0.3, k=3, every=3))
    assert qc.is_dirty
    assert qc.reason == read_qc.REASON_LOW_PURITY
    assert qc.frac_low_purity == pytest.approx(1 / 3)
    assert qc.pattern == read_qc.PATTERN_LOW_QUALITY


def test_insufficient_high_quality_region(ref_seq, config) -> None:
    qc = _classify(ref_seq, ref_seq[0:180], config)
    assert qc.is_dirty
    assert qc.reason == read_qc.REASON_INSUFFICIENT
    assert qc.high_quality_aligned == 180


def test_low_median_quality(ref_seq, read_seq, config) -> None:
    qualities = [40] * 300 + [10] * 450
    qc = _classify(ref_seq, read_seq, config, qualities=qualities)
    assert qc.is_dirty
    assert qc.reason == read_qc.REASON_LOW_QUALITY
    assert qc.high_quality_aligned == 300
    assert qc.total_aligned == 750
    assert qc.median_quality == 10


def test_low_signal_positions_are_not_scored(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config, height=100)
    assert qc.high_quality_aligned == 0
    assert qc.reason == read_qc.REASON_INSUFFICIENT


def _at(read, indices, ratio):
    return {i: [(other_bases(read[i])[0], ratio)] for i in indices}


def test_clustered_moderate_peaks(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config, secondary=_at(read_seq, range(300, 331, 2), 0.25))
    assert qc.is_dirty
    assert qc.strong_count == 0
    assert qc.max_moderate_run == 1
    assert qc.max_strong_in_window == 0
    assert qc.max_moderate_in_window == 13
    assert read_qc.REASON_CLUSTERED in qc.reason


def test_low_quality_position_resets_moderate_run(ref_seq, read_seq, config) -> None:
    secondary = _at(read_seq, range(300, 321), 0.25)
    unbroken = _classify(ref_seq, read_seq, config, secondary=secondary)
    assert unbroken.max_moderate_run == 21

    qualities = [40] * len(read_seq)
    qualities[310] = 10
    broken = _classify(ref_seq, read_seq, config, secondary=secondary, qualities=qualities)
    assert broken.max_moderate_run == 10
    assert broken.high_quality_aligned == 749


def test_low_signal_position_resets_moderate_run(ref_seq, read_seq, config) -> None:
    trace = synthesize_trace(read_seq, secondary=_at(read_seq, range(300, 321), 0.25))
    x = trace["peak_locations"][310]
    for arr in trace["traces"].values():
        arr[x - 3:x + 4] = 0
    chrom = to_chromatogram(trace)
    oriented = resolve_orientation(ref_seq, read_seq, 0, config.alignment)
    qc = classify_read(chrom, oriented, config)
    assert qc.max_moderate_run == 10
    assert qc.total_aligned == 750
    assert qc.high_quality_aligned == 749


@pytest.mark.parametrize("count, localized", [(6, True), (7, False)])
def test_isolated_strong_peak_limit(ref_seq, read_seq, config, count, localized) -> None:
    indices = range(30, 30 + 60 * count, 60)
    qc = _classify(ref_seq, read_seq, config, secondary=_at(read_seq, indices, 0.6))
    assert qc.strong_count == count
    assert qc.max_moderate_run == 1
    assert qc.looks_localized is localized
    # isolated peaks never reach the read-level gates
    assert not qc.is_dirty


@pytest.mark.parametrize("count, localized", [(5, True), (6, False)])
def test_moderate_window_limit(ref_seq, read_seq, config, count, localized) -> None:
    indices = range(300, 300 + 2 * count, 2)
    qc = _classify(ref_seq, read_seq, config, secondary=_at(read_seq, indices, 0.25))
    assert qc.strong_count == 0
    assert qc.max_moderate_in_window == count
    assert qc.looks_localized is localized
    assert not qc.is_dirty


def test_frequent_moderate_peaks_with_good_purity_are_not_persistent(ref_seq, read_seq, config) -> None:
    qc = _classify(ref_seq, read_seq, config, secondary=_at(read_seq, range(0, 750, 4), 0.25))
    assert qc.frac_moderate_secondary > config.read_qc.max_moderate_fraction
    assert qc.median_purity >= config.read_qc.persistent_median_purity
    assert not qc.looks_localized
    assert not qc.is_dirty
    assert qc.pattern == read_qc.PATTERN_CLEAN
