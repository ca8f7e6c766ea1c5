# mc1r_pipeline/utils/table_builders.py

import pandas as pd
from typing import Iterable

from mc1r_pipeline.models.sample import SampleCallResult


def build_results_df(results: Iterable[SampleCallResult]) -> pd.DataFrame:
    """One row per sample: verdict, one column per site, interpreted labels."""
    rows = []

    for result in results:
        row = {
            "Sample": result.sample_name,
            "DirtyFlag": result.dirty_flag,
            "DirtyReason": result.dirty_reason if result.is_dirty else "",
        }
        for call in result.site_calls:
            row[call.site.replace(".", "")] = call.genotype
        row.update(result.allele_labels)
        row.update({
            "AlignScore": result.alignment_score,
            "Orientation": result.orientation.value,
            "Pattern": result.qc.pattern if result.qc else "",
            "FilePath": result.file_path,
        })
        rows.append(row)

    return pd.DataFrame(rows)
