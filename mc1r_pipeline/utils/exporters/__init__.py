# mc1r_pipeline/utils/exporters/__init__.py

from .delimited import ResultsCsvExporter, ResultsTsvExporter

EXPORTERS = {
    "csv": ResultsCsvExporter,
    "tsv": ResultsTsvExporter,
}

def get_exporter(name: str, **kwargs):
    exporter_cls = EXPORTERS.get(name.lower())
    if not exporter_cls:
        raise ValueError(f"Unknown exporter: {name}")
    return exporter_cls(**kwargs)
