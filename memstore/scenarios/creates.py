"""
Create-contention scenarios.

- distinct_creates: every call carries its own username/email, so every call
  must succeed with a distinct id.
- shared_unique_creates: every call carries the same username, so exactly one
  call may succeed and all others must fail with ConflictError.
"""

from __future__ import annotations

import time
from functools import partial
from typing import Callable, List

from memstore.domain.models import User
from memstore.repository.memory import InMemoryRepository
from memstore.scenarios.abstract import (
    AbstractScenario,
    ScenarioResult,
    count_outcomes,
    run_concurrently,
)


def _user_repository() -> InMemoryRepository[User]:
    return InMemoryRepository(User, unique_fields=("username", "email"))


def _summarize(
    repo: InMemoryRepository[User],
    outcomes: list,
    duration: float,
    expected_successes: int,
) -> ScenarioResult:
    counts = count_outcomes(outcomes)
    created = [value for kind, value in outcomes if kind == "ok"]
    ids = {user.id for user in created}
    usernames = {user.username for user in created}
    operations = len(outcomes)
    return ScenarioResult(
        operations=operations,
        successes=counts["ok"],
        conflicts=counts["conflict"],
        not_found=counts["not_found"],
        errors=counts["error"],
        records=repo.count(),
        distinct_ids=len(ids),
        invariant_ok=(
            counts["ok"] == expected_successes
            and counts["ok"] + counts["conflict"] == operations
            and len(ids) == len(created) == len(usernames) == repo.count()
            and counts["error"] == 0
        ),
        duration_seconds=duration,
        throughput_ops_per_sec=operations / duration if duration > 0 else 0.0,
    )


class DistinctCreatesScenario(AbstractScenario):
    name: str = "distinct_creates"
    description: str = "Parallel creates with all-distinct unique values."

    def execute(self, workers: int, operations: int) -> ScenarioResult:
        repo = _user_repository()
        tasks: List[Callable[[], User]] = [
            partial(repo.create, {"username": f"user{i:05d}", "email": f"user{i:05d}@example.com"})
            for i in range(operations)
        ]
        start = time.perf_counter()
        outcomes = run_concurrently(workers, tasks)
        duration = time.perf_counter() - start

        result = _summarize(repo, outcomes, duration, expected_successes=operations)
        result["notes"] = f"{operations} creates over {workers} workers."
        return result


class SharedUniqueCreatesScenario(AbstractScenario):
    name: str = "shared_unique_creates"
    description: str = "Parallel creates that all claim the same username."

    def execute(self, workers: int, operations: int) -> ScenarioResult:
        repo = _user_repository()
        tasks: List[Callable[[], User]] = [
            partial(repo.create, {"username": "contended", "email": f"user{i:05d}@example.com"})
            for i in range(operations)
        ]
        start = time.perf_counter()
        outcomes = run_concurrently(workers, tasks)
        duration = time.perf_counter() - start

        result = _summarize(repo, outcomes, duration, expected_successes=min(operations, 1))
        result["notes"] = "Exactly one create may win; the rest must conflict."
        return result


__all__ = ["DistinctCreatesScenario", "SharedUniqueCreatesScenario"]
