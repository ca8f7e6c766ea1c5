# mc1r_pipeline/core/aligner.py

from dataclasses import dataclass
from typing import Optional

import numpy as np

from mc1r_pipeline.config.global_config import AlignmentConfig

# traceback directions
STOP = 0
DIAG = 1
UP = 2
LEFT = 3

UNMAPPED = -1


@dataclass(frozen=True, eq=False)
class AlignmentResult:
    """
    Best local alignment of a query against the reference.

    Bounds are 0-based, end-exclusive. ref_to_query is indexed by reference
    position and holds the aligned query index, or UNMAPPED where the
    reference base was not paired with a query base (outside the alignment
    or inside a gap).
    """
    score: int
    ref_start: int
    ref_end: int
    query_start: int
    query_end: int
    ref_to_query: np.ndarray

    def query_index(self, ref_index: int) -> Optional[int]:
        if not 0 <= ref_index < len(self.ref_to_query):
            return None
        q = int(self.ref_to_query[ref_index])
        return None if q == UNMAPPED else q

    def mapped_ref_positions(self) -> np.ndarray:
        """Mapped reference positions in increasing order."""
        return np.flatnonzero(self.ref_to_query != UNMAPPED)

    @property
    def mapped_count(self) -> int:
        return int(np.count_nonzero(self.ref_to_query != UNMAPPED))


def _encode(seq: str) -> np.ndarray:
    return np.frombuffer(seq.encode("latin-1"), dtype=np.uint8)


def smith_waterman(reference: str, query: str, config: Optional[AlignmentConfig] = None) -> AlignmentResult:
    """
    Local alignment with linear gap cost.

    Each cell is max(0, diag + s(r, q), up + gap, left + gap); when several
    terms tie the traceback prefers diagonal, then up, then left. The
    highest-scoring cell (first in row-major order) ends the alignment and
    traceback stops at the first zero cell.
    """
    config = config or AlignmentConfig()
    if config.gap > 0:
        raise ValueError("Gap score must not be positive.")

    n, m = len(reference), len(query)
    H = np.zeros((n + 1, m + 1), dtype=np.int32)
    TB = np.zeros((n + 1, m + 1), dtype=np.uint8)

    ref = _encode(reference)
    qry = _encode(query)
    gap_ramp = config.gap * np.arange(1, m + 1, dtype=np.int64)

    for i in range(1, n + 1):
        prev = H[i - 1].astype(np.int64)
        scores = np.where(qry == ref[i - 1], config.match, config.mismatch)

        diag = prev[:-1] + scores
        up = prev[1:] + config.gap
        best_vertical = np.maximum(np.maximum(diag, up), 0)

        # H[i, j] = max(best_vertical[j], H[i, j-1] + gap), unrolled as a running max
        row = np.maximum.accumulate(best_vertical - gap_ramp) + gap_ramp

        TB[i, 1:] = np.select(
            [row == 0, row == diag, row == up],
            [STOP, DIAG, UP],
            default=LEFT,
        )
        H[i, 1:] = row

    flat = int(np.argmax(H))
    best_i, best_j = divmod(flat, m + 1)
    best = int(H[best_i, best_j])

    ref_to_query = np.full(n, UNMAPPED, dtype=np.int64)
    i, j = best_i, best_j
    while TB[i, j] != STOP:
        direction = TB[i, j]
        if direction == DIAG:
            ref_to_query[i - 1] = j - 1
            i -= 1
            j -= 1
        elif direction == UP:
            i -= 1
        else:
            j -= 1

    ref_to_query.setflags(write=False)
    return AlignmentResult(
        score=best,
        ref_start=i,
        ref_end=best_i,
        query_start=j,
        query_end=best_j,
        ref_to_query=ref_to_query,
    )
