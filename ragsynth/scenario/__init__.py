"""
Scenario construction for synthesis.
"""

from .models import QUERY_LENGTHS, QUERY_STYLES, QUERY_TYPES, QueryShape, Scenario, ScenarioContext, scenario
from .builder import MultiHopScenarioBuilder, ScenarioBuilder, SingleHopScenarioBuilder, generate_scenarios

__all__ = [
    "QUERY_LENGTHS",
    "QUERY_STYLES",
    "QUERY_TYPES",
    "QueryShape",
    "Scenario",
    "ScenarioContext",
    "scenario",
    "ScenarioBuilder",
    "SingleHopScenarioBuilder",
    "MultiHopScenarioBuilder",
    "generate_scenarios",
]
