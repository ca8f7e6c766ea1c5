# mc1r_pipeline/pipeline.py

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from mc1r_pipeline.config.global_config import GlobalConfig
from mc1r_pipeline.core.abif_reader import read_abif
from mc1r_pipeline.core.orientation import OrientedAlignment, resolve_orientation
from mc1r_pipeline.core.peak_summarizer import PeakSummarizer
from mc1r_pipeline.core.read_qc import classify_read
from mc1r_pipeline.core.site_caller import call_sites
from mc1r_pipeline.errors import Mc1rPipelineError, ShortReadError
from mc1r_pipeline.models.chromatogram import Chromatogram
from mc1r_pipeline.models.genotype import SiteCall, NO_CALL
from mc1r_pipeline.models.read_qc import ReadQcSummary
from mc1r_pipeline.models.reference import Reference
from mc1r_pipeline.models.sample import SampleCallResult
from mc1r_pipeline.strategies.alleles import interpret_alleles

logger = logging.getLogger(__name__)

ALIGNMENT_FAILED_REASON = "Low alignment score - reference mismatch or very poor sequencing."
ALIGNMENT_FAILED_NOTE = "Alignment failed"
DIRTY_LABEL = "DIRTY"


def find_trim(qualities: np.ndarray, min_quality: int) -> Tuple[int, int]:
    """[start, end) of the read after dropping low-quality ends."""
    start = 0
    while start < len(qualities) and qualities[start] < min_quality:
        start += 1
    end = len(qualities)
    while end > start and qualities[end - 1] < min_quality:
        end -= 1
    return start, end


def _no_call_result(
    chromatogram: Chromatogram,
    oriented: OrientedAlignment,
    config: GlobalConfig,
    reason: str,
    note: str,
    label: str,
    qc: ReadQcSummary,
) -> SampleCallResult:
    return SampleCallResult(
        sample_name=chromatogram.sample_name,
        file_path=chromatogram.file_path,
        orientation=oriented.orientation,
        alignment_score=oriented.score,
        is_dirty=True,
        dirty_reason=reason,
        site_calls=tuple(
            SiteCall(site=s.name, cds_position=s.cds_position, genotype=NO_CALL, note=note)
            for s in config.sites
        ),
        allele_labels={rule.label: label for rule in config.allele_rules},
        qc=qc,
    )


def call_chromatogram(
    chromatogram: Chromatogram,
    reference: Reference,
    config: Optional[GlobalConfig] = None,
) -> SampleCallResult:
    """
    Trim -> align both orientations -> read QC -> per-site calls.

    A poor alignment or a dirty read still yields a complete result with
    every site reported as NoCall. Only a read that is too short after
    trimming raises (ShortReadError).
    """
    config = config or GlobalConfig()

    start, end = find_trim(chromatogram.qualities, config.trim.min_quality)
    if end - start < config.trim.min_length:
        raise ShortReadError(end - start, config.trim.min_length)

    query = chromatogram.bases[start:end]
    oriented = resolve_orientation(reference.cds_sequence, query, start, config.alignment)

    if oriented.score < config.alignment.min_score:
        logger.info(
            "%s: alignment score %d below %d.",
            chromatogram.sample_name, oriented.score, config.alignment.min_score,
        )
        return _no_call_result(
            chromatogram, oriented, config,
            reason=ALIGNMENT_FAILED_REASON,
            note=ALIGNMENT_FAILED_NOTE,
            label=NO_CALL,
            qc=ReadQcSummary.not_evaluated(ALIGNMENT_FAILED_REASON),
        )

    summarizer = PeakSummarizer(chromatogram, config.peaks)
    qc = classify_read(chromatogram, oriented, config, summarizer)
    if qc.is_dirty:
        return _no_call_result(
            chromatogram, oriented, config,
            reason=qc.reason,
            note=DIRTY_LABEL,
            label=DIRTY_LABEL,
            qc=qc,
        )

    site_calls = call_sites(chromatogram, oriented, config, summarizer)
    return SampleCallResult(
        sample_name=chromatogram.sample_name,
        file_path=chromatogram.file_path,
        orientation=oriented.orientation,
        alignment_score=oriented.score,
        is_dirty=False,
        dirty_reason="",
        site_calls=tuple(site_calls),
        allele_labels=interpret_alleles(site_calls, config.allele_rules),
        qc=qc,
    )


def run_pipeline(
    file_path: str,
    reference: Reference,
    config: Optional[GlobalConfig] = None,
) -> SampleCallResult:
    chromatogram = read_abif(file_path)
    return call_chromatogram(chromatogram, reference, config)


@dataclass(frozen=True)
class BatchFailure:
    file_path: str
    error_type: str
    message: str

    def to_dict(self) -> dict:
        return {"file_path": self.file_path, "error_type": self.error_type, "message": self.message}


@dataclass
class BatchResult:
    results: List[SampleCallResult] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)


def _process_file(
    file_path: str,
    reference: Reference,
    config: GlobalConfig,
) -> Union[SampleCallResult, BatchFailure]:
    try:
        return run_pipeline(file_path, reference, config)
    except (Mc1rPipelineError, OSError) as e:
        logger.warning("Skipping %s: %s", file_path, e)
        return BatchFailure(file_path=str(file_path), error_type=type(e).__name__, message=str(e))


def run_batch(
    file_paths: Sequence[str],
    reference: Reference,
    config: Optional[GlobalConfig] = None,
    max_workers: int = 1,
) -> BatchResult:
    """
    Calls every file independently. Files that cannot be decoded or are too
    short become BatchFailures; the rest of the batch carries on. Results
    come back in input order whatever order the workers finish in.
    """
    config = config or GlobalConfig()
    outcomes: Dict[int, Union[SampleCallResult, BatchFailure]] = {}

    if max_workers <= 1:
        for i, path in enumerate(file_paths):
            outcomes[i] = _process_file(path, reference, config)
    else:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(_process_file, path, reference, config): i
                for i, path in enumerate(file_paths)
            }
            for future in as_completed(futures):
                i = futures[future]
                outcomes[i] = future.result()
                logger.info("Completed %s (%d/%d)", file_paths[i], len(outcomes), len(file_paths))

    batch = BatchResult()
    for i in range(len(file_paths)):
        outcome = outcomes[i]
        if isinstance(outcome, BatchFailure):
            batch.failures.append(outcome)
        else:
            batch.results.append(outcome)
    return batch
