import pytest

from mc1r_pipeline.config.global_config import GlobalConfig
from mc1r_pipeline.models.reference import Reference
from mc1r_pipeline.utils.toy_data import make_toy_reference, synthesize_trace

READ_START = 150
READ_END = 900


@pytest.fixture(scope="session")
def ref_seq() -> str:
    return make_toy_reference()


@pytest.fixture(scope="session")
def reference(ref_seq) -> Reference:
    return Reference(header="toy_MC1R_CDS", cds_sequence=ref_seq, source_path="toy_mc1r.fa")


@pytest.fixture
def config() -> GlobalConfig:
    return GlobalConfig()


@pytest.fixture(scope="session")
def read_seq(ref_seq) -> str:
    """750 bp forward read covering every default site (c.212-c.834)."""
    return ref_seq[READ_START:READ_END]


@pytest.fixture
def clean_trace(read_seq) -> dict:
    return synthesize_trace(read_seq)


def other_bases(base: str, k: int = 1) -> list:
    return [b for b in "ACGT" if b != base][:k]


def read_index_of_site(cds_position: int) -> int:
    return cds_position - 1 - READ_START
