# mc1r_pipeline/utils/exporters/base.py

from abc import ABC, abstractmethod
import pandas as pd

class ExporterBase(ABC):
    @abstractmethod
    def export(self, df: pd.DataFrame) -> str:
        """Export to string format (CSV, TSV, etc.)"""
        pass

    @abstractmethod
    def filename(self) -> str:
        """Default output filename"""
        pass
