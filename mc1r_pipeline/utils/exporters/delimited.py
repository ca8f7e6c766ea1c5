# mc1r_pipeline/utils/exporters/delimited.py

import pandas as pd

from .base import ExporterBase


class ResultsCsvExporter(ExporterBase):
    separator = ","
    extension = "csv"

    def __init__(self, basename: str = "mc1r_results"):
        self.basename = basename

    def export(self, df: pd.DataFrame) -> str:
        if "Sample" not in df.columns and not df.empty:
            raise ValueError("Results table must include a Sample column.")
        return df.to_csv(index=False, sep=self.separator, lineterminator="\n")

    def filename(self) -> str:
        return f"{self.basename}.{self.extension}"


class ResultsTsvExporter(ResultsCsvExporter):
    separator = "\t"
    extension = "tsv"
