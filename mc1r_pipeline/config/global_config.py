# mc1r_pipeline/config/global_config.py

import json
from pydantic import BaseModel, Field, model_validator
from typing import List

from mc1r_pipeline.config.site_config import (
    AlleleRuleConfig,
    SiteConfig,
    default_allele_rules,
    default_sites,
)


class ReferenceConfig(BaseModel):
    min_length: int = 200
    cds_min_length: int = 900
    cds_max_length: int = 1100
    orf_length: int = 945


class TrimConfig(BaseModel):
    min_quality: int = 15
    min_length: int = 150


class AlignmentConfig(BaseModel):
    match: int = 2
    mismatch: int = -1
    gap: int = -2
    min_score: int = 600


class PeakConfig(BaseModel):
    window: int = 2
    min_signal_sum: int = 200


class ReadQcConfig(BaseModel):
    min_quality: int = 20
    min_high_quality_aligned: int = 200
    min_median_quality: float = 20

    # per-position secondary peak classes
    low_purity: float = 0.55
    moderate_secondary_fraction: float = 0.12
    moderate_secondary_over_top: float = 0.20
    strong_secondary_fraction: float = 0.22
    strong_secondary_over_top: float = 0.33

    # read-level gates
    max_strong_fraction: float = 0.08
    max_moderate_fraction: float = 0.18
    persistent_median_purity: float = 0.70
    max_moderate_run: int = 12
    window_size: int = 25
    max_strong_in_window: int = 6
    max_moderate_in_window: int = 12
    max_low_purity_fraction: float = 0.25
    min_median_purity: float = 0.60
    pattern_median_purity: float = 0.65

    # a single heterozygous site must not condemn an otherwise clean read
    localized_max_strong_count: int = 6
    localized_max_run: int = 3
    localized_max_strong_fraction: float = 0.03
    localized_max_moderate_in_window: int = 5


class SiteCallConfig(BaseModel):
    min_quality: int = 15
    het_secondary_fraction: float = 0.22
    het_secondary_over_top: float = 0.33


class GlobalConfig(BaseModel):
    reference: ReferenceConfig = Field(default_factory=ReferenceConfig)
    trim: TrimConfig = Field(default_factory=TrimConfig)
    alignment: AlignmentConfig = Field(default_factory=AlignmentConfig)
    peaks: PeakConfig = Field(default_factory=PeakConfig)
    read_qc: ReadQcConfig = Field(default_factory=ReadQcConfig)
    site_call: SiteCallConfig = Field(default_factory=SiteCallConfig)
    sites: List[SiteConfig] = Field(default_factory=default_sites)
    allele_rules: List[AlleleRuleConfig] = Field(default_factory=default_allele_rules)

    @model_validator(mode="after")
    def validate_sites(self) -> "GlobalConfig":
        names = [s.name for s in self.sites]
        if len(set(names)) != len(names):
            raise ValueError("Site names must be unique.")
        for rule in self.allele_rules:
            if rule.site not in names:
                raise ValueError(f"Allele rule '{rule.label}': unknown site '{rule.site}'.")
        return self

    def site(self, name: str) -> SiteConfig:
        for s in self.sites:
            if s.name == name:
                return s
        raise KeyError(name)

    @classmethod
    def from_json(cls, json_path: str) -> "GlobalConfig":
        with open(json_path) as f:
            raw = json.load(f)

        if not isinstance(raw, dict):
            raise ValueError("Config JSON must be an object of section overrides.")

        return cls(**raw)
