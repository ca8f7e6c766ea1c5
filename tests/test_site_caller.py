from mc1r_pipeline.config.site_config import SiteConfig
from mc1r_pipeline.core.orientation import complement_base, resolve_orientation
from mc1r_pipeline.core.site_caller import call_site, call_sites, format_genotype
from mc1r_pipeline.models.genotype import NO_CALL
from mc1r_pipeline.models.sample import Orientation
from mc1r_pipeline.utils.toy_data import reverse_complement_trace, synthesize_trace, to_chromatogram

from .conftest import other_bases, read_index_of_site

SITE = SiteConfig(name="c.274", cds_position=274)


def _call(ref_seq, trace, site=SITE, config=None, trim_start=0):
    chrom = to_chromatogram(trace)
    oriented = resolve_orientation(ref_seq, trace["bases"], trim_start)
    return call_site(chrom, oriented, site, config), oriented


def test_format_genotype_sorts_alleles() -> None:
    assert format_genotype("T", "C") == "C/T"
    assert format_genotype("G", "G") == "G/G"


def test_homozygous_reference_call(ref_seq, clean_trace) -> None:
    call, _ = _call(ref_seq, clean_trace)
    base = ref_seq[273]
    assert call.genotype == f"{base}/{base}"
    assert call.note is None
    assert not call.is_heterozygous


def test_heterozygous_call(ref_seq, read_seq) -> None:
    idx = read_index_of_site(274)
    alt = other_bases(read_seq[idx])[0]
    trace = synthesize_trace(read_seq, secondary={idx: [(alt, 0.5)]})
    call, _ = _call(ref_seq, trace)
    assert call.genotype == format_genotype(ref_seq[273], alt)
    assert call.is_heterozygous


def test_weak_secondary_peak_is_not_heterozygous(ref_seq, read_seq) -> None:
    idx = read_index_of_site(274)
    # secondary fraction 0.23 passes, secondary/top 0.30 does not
    trace = synthesize_trace(read_seq, secondary={idx: [(other_bases(read_seq[idx])[0], 0.3)]})
    call, _ = _call(ref_seq, trace)
    assert call.genotype == f"{ref_seq[273]}/{ref_seq[273]}"


def test_reverse_read_reported_on_reference_strand(ref_seq, read_seq) -> None:
    idx = read_index_of_site(274)
    alt = other_bases(read_seq[idx])[0]
    trace = reverse_complement_trace(synthesize_trace(read_seq, secondary={idx: [(alt, 0.5)]}))
    call, oriented = _call(ref_seq, trace)
    assert oriented.orientation is Orientation.REVERSE_COMPLEMENT
    assert call.genotype == format_genotype(ref_seq[273], alt)
    assert trace["bases"][oriented.read_index_for_ref(273)] == complement_base(ref_seq[273])


def test_unmapped_site(ref_seq, clean_trace) -> None:
    call, _ = _call(ref_seq, clean_trace, SiteConfig(name="c.50", cds_position=50))
    assert call.genotype == NO_CALL
    assert call.note == "Reference position not mapped."


def test_index_out_of_range(ref_seq, clean_trace) -> None:
    call, _ = _call(ref_seq, clean_trace, trim_start=1000)
    assert call.genotype == NO_CALL
    assert call.note == "Index out of range."


def test_low_quality_at_site(ref_seq, read_seq) -> None:
    qualities = [40] * len(read_seq)
    qualities[read_index_of_site(274)] = 10
    call, _ = _call(ref_seq, synthesize_trace(read_seq, qualities=qualities))
    assert call.genotype == NO_CALL
    assert call.note == "Low Q at site."


def test_low_signal_at_site(ref_seq, read_seq) -> None:
    call, _ = _call(ref_seq, synthesize_trace(read_seq, height=100))
    assert call.genotype == NO_CALL
    assert call.note == "Low signal at site."


def test_call_sites_follows_configured_order(ref_seq, clean_trace, config) -> None:
    chrom = to_chromatogram(clean_trace)
    oriented = resolve_orientation(ref_seq, clean_trace["bases"])
    calls = call_sites(chrom, oriented, config)
    assert [c.site for c in calls] == [s.name for s in config.sites]
    for c in calls:
        base = ref_seq[c.cds_position - 1]
        assert c.genotype == f"{base}/{base}"
