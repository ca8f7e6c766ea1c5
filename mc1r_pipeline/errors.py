# mc1r_pipeline/errors.py


class Mc1rPipelineError(Exception):
    """Base class for per-file failures the batch runner reports and skips."""


class FormatError(Mc1rPipelineError, ValueError):
    """Malformed AB1 container or reference sequence file."""


class ShortReadError(Mc1rPipelineError, ValueError):
    """Read is too short after quality trimming to be aligned."""

    def __init__(self, trimmed_length: int, min_length: int):
        self.trimmed_length = trimmed_length
        self.min_length = min_length
        super().__init__(
            f"AB1 read too short after trimming ({trimmed_length} < {min_length} bases)."
        )
