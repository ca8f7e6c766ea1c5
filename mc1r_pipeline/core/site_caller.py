# mc1r_pipeline/core/site_caller.py

from typing import List, Optional

from mc1r_pipeline.config.global_config import GlobalConfig
from mc1r_pipeline.config.site_config import SiteConfig
from mc1r_pipeline.core.orientation import OrientedAlignment, complement_base
from mc1r_pipeline.core.peak_summarizer import PeakSummarizer
from mc1r_pipeline.models.chromatogram import Chromatogram
from mc1r_pipeline.models.genotype import SiteCall, NO_CALL
from mc1r_pipeline.models.peak import PeakSummary
from mc1r_pipeline.models.sample import Orientation


def format_genotype(a1: str, a2: str) -> str:
    first, second = sorted((a1, a2))
    return f"{first}/{second}"


def genotype_from_peak(peak: PeakSummary, orientation: Orientation, config: GlobalConfig) -> str:
    is_het = (
        peak.secondary_fraction >= config.site_call.het_secondary_fraction
        and peak.secondary_over_top >= config.site_call.het_secondary_over_top
    )
    a1 = peak.top_base
    a2 = peak.second_base if is_het else peak.top_base

    if orientation is Orientation.REVERSE_COMPLEMENT:
        a1, a2 = complement_base(a1), complement_base(a2)

    return format_genotype(a1, a2)


def call_site(
    chromatogram: Chromatogram,
    oriented: OrientedAlignment,
    site: SiteConfig,
    config: Optional[GlobalConfig] = None,
    summarizer: Optional[PeakSummarizer] = None,
) -> SiteCall:
    """Genotype at one CDS coordinate, reported on the reference strand."""
    config = config or GlobalConfig()
    summarizer = summarizer or PeakSummarizer(chromatogram, config.peaks)

    def no_call(note: str) -> SiteCall:
        return SiteCall(site=site.name, cds_position=site.cds_position, genotype=NO_CALL, note=note)

    bidx = oriented.read_index_for_ref(site.cds_position - 1)
    if bidx is None:
        return no_call("Reference position not mapped.")
    if not 0 <= bidx < len(chromatogram):
        return no_call("Index out of range.")
    if chromatogram.qualities[bidx] < config.site_call.min_quality:
        return no_call("Low Q at site.")

    peak = summarizer.summarize(bidx)
    if peak.total < config.peaks.min_signal_sum:
        return no_call("Low signal at site.")

    genotype = genotype_from_peak(peak, oriented.orientation, config)
    return SiteCall(site=site.name, cds_position=site.cds_position, genotype=genotype)


def call_sites(
    chromatogram: Chromatogram,
    oriented: OrientedAlignment,
    config: GlobalConfig,
    summarizer: Optional[PeakSummarizer] = None,
) -> List[SiteCall]:
    summarizer = summarizer or PeakSummarizer(chromatogram, config.peaks)
    return [call_site(chromatogram, oriented, site, config, summarizer) for site in config.sites]
