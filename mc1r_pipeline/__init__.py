"""MC1R genotyping from Sanger AB1 chromatograms."""

__version__ = "0.1.0"
