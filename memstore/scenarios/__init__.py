"""
Scenarios package for memstore.

Re-exports the scenario interfaces and the concrete contention workloads so
downstream code can import from `memstore.scenarios` directly.
"""

from memstore.scenarios.abstract import (
    AbstractScenario,
    Scenario,
    ScenarioResult,
    count_outcomes,
    run_concurrently,
)
from memstore.scenarios.creates import DistinctCreatesScenario, SharedUniqueCreatesScenario
from memstore.scenarios.mixed import MixedWorkloadScenario

__all__ = [
    # Abstracts
    "AbstractScenario",
    "Scenario",
    "ScenarioResult",
    "count_outcomes",
    "run_concurrently",
    # Concrete scenarios
    "DistinctCreatesScenario",
    "MixedWorkloadScenario",
    "SharedUniqueCreatesScenario",
]
