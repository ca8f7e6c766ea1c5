# mc1r_pipeline/core/orientation.py

import logging
from dataclasses import dataclass
from typing import Optional

from mc1r_pipeline.config.global_config import AlignmentConfig
from mc1r_pipeline.core.aligner import AlignmentResult, smith_waterman
from mc1r_pipeline.models.sample import Orientation

logger = logging.getLogger(__name__)

_COMPLEMENT = {"A": "T", "T": "A", "C": "G", "G": "C"}


def complement_base(base: str) -> str:
    return _COMPLEMENT.get(base, "N")


def reverse_complement(seq: str) -> str:
    return "".join(complement_base(b) for b in reversed(seq))


@dataclass(frozen=True, eq=False)
class OrientedAlignment:
    """Winning alignment of a trimmed read plus the index math back to the raw read."""
    orientation: Orientation
    alignment: AlignmentResult
    trim_start: int
    trimmed_length: int
    forward_score: int
    reverse_score: int

    @property
    def score(self) -> int:
        return self.alignment.score

    def read_index(self, query_index: int) -> int:
        if self.orientation is Orientation.REVERSE_COMPLEMENT:
            query_index = self.trimmed_length - 1 - query_index
        return self.trim_start + query_index

    def read_index_for_ref(self, ref_index: int) -> Optional[int]:
        query_index = self.alignment.query_index(ref_index)
        if query_index is None:
            return None
        return self.read_index(query_index)


def resolve_orientation(
    reference: str,
    query: str,
    trim_start: int = 0,
    config: Optional[AlignmentConfig] = None,
) -> OrientedAlignment:
    """Aligns the trimmed read and its reverse complement; forward wins ties."""
    forward = smith_waterman(reference, query, config)
    reverse = smith_waterman(reference, reverse_complement(query), config)

    if forward.score >= reverse.score:
        orientation, best = Orientation.FORWARD, forward
    else:
        orientation, best = Orientation.REVERSE_COMPLEMENT, reverse

    logger.debug(
        "Alignment scores forward=%d reverse=%d -> %s", forward.score, reverse.score, orientation.value
    )
    return OrientedAlignment(
        orientation=orientation,
        alignment=best,
        trim_start=trim_start,
        trimmed_length=len(query),
        forward_score=forward.score,
        reverse_score=reverse.score,
    )
