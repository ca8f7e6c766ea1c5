# mc1r_pipeline/config/site_config.py

from pydantic import BaseModel, field_validator, model_validator
from typing import List, Optional

VALID_BASES = {"A", "C", "G", "T"}


class SiteConfig(BaseModel):
    name: str
    cds_position: int

    @field_validator("cds_position")
    @classmethod
    def validate_position(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"CDS positions are 1-based; got {value}.")
        return value


class AlleleRuleConfig(BaseModel):
    """Which site feeds which allele interpreter, and the labels it reports."""
    label: str
    site: str
    interpreter: str
    variant_base: str
    positive_label: str
    negative_label: str
    homozygous_label: Optional[str] = None

    @field_validator("variant_base")
    @classmethod
    def validate_variant_base(cls, value: str) -> str:
        value = value.upper()
        if value not in VALID_BASES:
            raise ValueError(f"Variant base must be one of A/C/G/T; got '{value}'.")
        return value

    @model_validator(mode="after")
    def default_homozygous_label(self) -> "AlleleRuleConfig":
        if self.homozygous_label is None:
            self.homozygous_label = self.positive_label
        return self


def default_sites() -> List[SiteConfig]:
    return [
        SiteConfig(name=f"c.{pos}", cds_position=pos)
        for pos in (212, 274, 355, 376, 636, 637, 644, 834)
    ]


def default_allele_rules() -> List[AlleleRuleConfig]:
    return [
        AlleleRuleConfig(
            label="E_status",
            site="c.274",
            interpreter="zygosity",
            variant_base="A",
            positive_label="E/other",
            homozygous_label="E/E",
            negative_label="Not-E",
        ),
        AlleleRuleConfig(
            label="Suppression",
            site="c.644",
            interpreter="carrier",
            variant_base="C",
            positive_label="Suppressed",
            negative_label="Not suppressed",
        ),
    ]
