# mc1r_pipeline/strategies/alleles.py

from typing import Dict, Iterable, List

from mc1r_pipeline.config.site_config import AlleleRuleConfig
from mc1r_pipeline.models.genotype import SiteCall, NO_CALL


ALLELE_INTERPRETER_REGISTRY = {}

def register_allele_interpreter(name: str):
    def decorator(cls):
        ALLELE_INTERPRETER_REGISTRY[name] = cls
        return cls
    return decorator

def get_allele_interpreter(rule: AlleleRuleConfig):
    interpreter_cls = ALLELE_INTERPRETER_REGISTRY.get(rule.interpreter)
    if not interpreter_cls:
        raise ValueError(f"Unknown allele interpreter: {rule.interpreter}")
    return interpreter_cls(rule)

class BaseAlleleInterpreter:
    def __init__(self, rule: AlleleRuleConfig):
        self.rule = rule

    def variant_dose(self, genotype: str) -> int:
        return genotype.split("/").count(self.rule.variant_base)

    def interpret(self, genotype: str) -> str:
        raise NotImplementedError


@register_allele_interpreter("zygosity")
class ZygosityInterpreter(BaseAlleleInterpreter):
    """Distinguishes homozygous, heterozygous and absent variant (e.g. E/E, E/other, Not-E)."""

    def interpret(self, genotype: str) -> str:
        if genotype == NO_CALL:
            return NO_CALL
        dose = self.variant_dose(genotype)
        if dose == 0:
            return self.rule.negative_label
        if dose == 2:
            return self.rule.homozygous_label
        return self.rule.positive_label


@register_allele_interpreter("carrier")
class CarrierInterpreter(BaseAlleleInterpreter):
    """Any copy of the variant base gives the positive label."""

    def interpret(self, genotype: str) -> str:
        if genotype == NO_CALL:
            return NO_CALL
        if self.variant_dose(genotype) > 0:
            return self.rule.positive_label
        return self.rule.negative_label


def interpret_alleles(site_calls: Iterable[SiteCall], rules: List[AlleleRuleConfig]) -> Dict[str, str]:
    genotypes = {call.site: call.genotype for call in site_calls}
    return {
        rule.label: get_allele_interpreter(rule).interpret(genotypes.get(rule.site, NO_CALL))
        for rule in rules
    }
