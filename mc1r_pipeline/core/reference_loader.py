# mc1r_pipeline/core/reference_loader.py

import logging
from pathlib import Path
from typing import Optional, Tuple

from Bio import SeqIO

from mc1r_pipeline.config.global_config import ReferenceConfig
from mc1r_pipeline.errors import FormatError
from mc1r_pipeline.models.reference import Reference

logger = logging.getLogger(__name__)

FASTA_SUFFIXES = {".fa", ".fasta", ".fna", ".fas", ".txt"}
START_CODON = "ATG"
STOP_CODONS = ("TAA", "TAG", "TGA")
_ALLOWED = set("ACGTN")


def normalize_sequence(seq: str) -> str:
    """Upper-cases and keeps only A/C/G/T/N."""
    return "".join(c for c in seq.upper() if c in _ALLOWED)


def _read_fasta_record(path: Path) -> Tuple[str, str]:
    try:
        record = SeqIO.read(str(path), "fasta")
    except ValueError as e:
        raise FormatError(f"{path.name}: expected a single FASTA record ({e}).") from e
    return record.description, str(record.seq)


def find_orf(seq: str, orf_length: int) -> Optional[str]:
    """
    First window of orf_length bases that starts with ATG and ends with a stop
    codon, scanning frame 0, 1, then 2.
    """
    for frame in range(3):
        for i in range(frame, len(seq) - 2, 3):
            if seq[i:i + 3] != START_CODON:
                continue
            j = i + orf_length - 3
            if j + 3 > len(seq):
                continue
            if seq[j:j + 3] in STOP_CODONS:
                return seq[i:i + orf_length]
    return None


def load_reference(file_path: str, config: Optional[ReferenceConfig] = None) -> Reference:
    """
    Loads the MC1R coding sequence from a FASTA or plain-text file.

    A sequence that already looks like the CDS (starts with ATG, 900-1100 bp)
    is used as-is; anything else is searched for a 945 bp ORF. The sequence is
    assumed to be on the coding strand.
    """
    config = config or ReferenceConfig()
    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"{path.name}: reference is not a text sequence file ({e.reason}).") from e

    header = ""
    if path.suffix.lower() in FASTA_SUFFIXES and text.lstrip().startswith(">"):
        header, raw_seq = _read_fasta_record(path)
    else:
        raw_seq = text

    seq = normalize_sequence(raw_seq)
    if len(seq) < config.min_length:
        raise FormatError(f"{path.name}: reference sequence too short ({len(seq)} bp).")

    if seq.startswith(START_CODON) and config.cds_min_length <= len(seq) <= config.cds_max_length:
        logger.info("Reference %s accepted as CDS (%d bp).", path.name, len(seq))
        return Reference(header=header, cds_sequence=seq, source_path=str(path))

    cds = find_orf(seq, config.orf_length)
    if cds is None:
        raise FormatError(
            f"{path.name}: could not locate a {config.orf_length} bp MC1R CDS ORF. "
            "Please provide a CDS-only reference starting at ATG."
        )

    logger.info("Extracted %d bp ORF from %s (%d bp input).", len(cds), path.name, len(seq))
    return Reference(header=header, cds_sequence=cds, source_path=str(path))
