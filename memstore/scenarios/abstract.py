"""
Scenario interfaces and result contracts for the contention harness.

Concrete scenarios implement the Scenario protocol and return a ScenarioResult
TypedDict so the orchestrator and reporter can treat them uniformly.
"""

from __future__ import annotations

import abc
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    TypedDict,
    runtime_checkable,
)

from memstore.domain.exceptions import ConflictError, NotFoundError


class ScenarioResult(TypedDict, total=False):
    """
    Outcome counts and timing returned by scenarios.

    Fields are optional; the orchestrator fills in timing from the profiler
    when a scenario leaves it out.
    """

    operations: int
    successes: int
    conflicts: int
    not_found: int
    errors: int
    records: int
    distinct_ids: int
    invariant_ok: bool
    duration_seconds: float
    throughput_ops_per_sec: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    error: Optional[str]
    notes: Optional[str]
    extra: Dict[str, Any]


@runtime_checkable
class Scenario(Protocol):
    """
    Common interface all contention scenarios implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the workload.
    """

    name: str
    description: str

    def execute(self, workers: int, operations: int) -> ScenarioResult:
        """
        Run the workload against a fresh repository.

        Parameters
        ----------
        workers : int
            Size of the thread pool issuing operations.
        operations : int
            Number of repository calls to issue.
        """
        ...


class AbstractScenario(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses should set `name` and `description` and implement `execute`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def execute(self, workers: int, operations: int) -> ScenarioResult:  # pragma: no cover
        """Run the scenario and return outcome counts."""
        raise NotImplementedError


Outcome = Tuple[str, Any]


def run_concurrently(workers: int, tasks: Sequence[Callable[[], Any]]) -> List[Outcome]:
    """
    Run `tasks` on a thread pool, released together through a start gate.

    Returns one `(kind, value)` pair per task in submission order, where kind
    is "ok", "conflict", "not_found" or "error". Anything other than the two
    expected repository errors lands in "error" with the exception as value.
    """
    gate = threading.Event()

    def _guarded(task: Callable[[], Any]) -> Outcome:
        gate.wait()
        try:
            return ("ok", task())
        except ConflictError as exc:
            return ("conflict", exc)
        except NotFoundError as exc:
            return ("not_found", exc)
        except Exception as exc:  # noqa: BLE001 - recorded as an unexpected outcome
            return ("error", exc)

    with ThreadPoolExecutor(max_workers=max(workers, 1)) as pool:
        futures = [pool.submit(_guarded, task) for task in tasks]
        gate.set()
        return [future.result() for future in futures]


def count_outcomes(outcomes: Sequence[Outcome]) -> Dict[str, int]:
    counts = {"ok": 0, "conflict": 0, "not_found": 0, "error": 0}
    for kind, _ in outcomes:
        counts[kind] += 1
    return counts


__all__ = [
    "ScenarioResult",
    "Scenario",
    "AbstractScenario",
    "Outcome",
    "run_concurrently",
    "count_outcomes",
]
