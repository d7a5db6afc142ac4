"""
Mixed workload scenario: creates, reads, listings, updates and deletes issued
in parallel against one repository.

Updates draw emails from a small shared pool so some of them collide, and
deletes target ids that may already be gone. After the run the live records
are checked for duplicate unique values and listing order.
"""

from __future__ import annotations

import random
import time
from functools import partial
from typing import Any, Callable, List

from memstore.domain.models import User
from memstore.repository.memory import InMemoryRepository
from memstore.scenarios.abstract import (
    AbstractScenario,
    ScenarioResult,
    count_outcomes,
    run_concurrently,
)

OPERATION_KINDS = ("create", "get", "list", "update", "delete")
EMAIL_POOL_SIZE = 5


class MixedWorkloadScenario(AbstractScenario):
    name: str = "mixed_workload"
    description: str = "Interleaved create/get/list/update/delete with colliding updates."

    def __init__(self, seed: int = 42) -> None:
        self.seed = seed

    def _plan(self, repo: InMemoryRepository[User], operations: int) -> List[Callable[[], Any]]:
        rng = random.Random(self.seed)
        tasks: List[Callable[[], Any]] = []
        for i in range(operations):
            kind = rng.choice(OPERATION_KINDS)
            # Ids are guesses: the target may not exist yet or may be deleted.
            target = rng.randint(1, max(operations // 2, 1))
            if kind == "create":
                tasks.append(
                    partial(
                        repo.create,
                        {"username": f"mix{i:05d}", "email": f"mix{i:05d}@example.com"},
                    )
                )
            elif kind == "get":
                tasks.append(partial(repo.get_by_id, target))
            elif kind == "list":
                tasks.append(partial(repo.list, rng.randint(1, 3), 5))
            elif kind == "update":
                email = f"shared{rng.randrange(EMAIL_POOL_SIZE)}@example.com"
                tasks.append(partial(repo.update, target, {"email": email}))
            else:
                tasks.append(partial(repo.delete, target))
        return tasks

    def execute(self, workers: int, operations: int) -> ScenarioResult:
        repo: InMemoryRepository[User] = InMemoryRepository(
            User, unique_fields=("username", "email")
        )
        # Seed part of the id range so reads, updates and deletes have targets.
        for i in range(max(operations // 4, 1)):
            repo.create({"username": f"seed{i:05d}", "email": f"seed{i:05d}@example.com"})

        tasks = self._plan(repo, operations)
        start = time.perf_counter()
        outcomes = run_concurrently(workers, tasks)
        duration = time.perf_counter() - start

        counts = count_outcomes(outcomes)
        snapshot = repo.list(page=1, page_size=repo.max_page_size)
        live: List[User] = list(snapshot.items)
        page_num = 2
        while len(live) < snapshot.total:
            page = repo.list(page=page_num, page_size=repo.max_page_size)
            if not page.items:
                break
            live.extend(page.items)
            page_num += 1

        emails = [user.email for user in live]
        usernames = [user.username for user in live]
        ordered = all(
            (a.created_at, a.id) > (b.created_at, b.id) for a, b in zip(live, live[1:])
        )
        invariant_ok = (
            len(set(emails)) == len(emails)
            and len(set(usernames)) == len(usernames)
            and len({user.id for user in live}) == len(live) == repo.count()
            and ordered
            and counts["error"] == 0
        )

        return ScenarioResult(
            operations=len(outcomes),
            successes=counts["ok"],
            conflicts=counts["conflict"],
            not_found=counts["not_found"],
            errors=counts["error"],
            records=repo.count(),
            distinct_ids=len({user.id for user in live}),
            invariant_ok=invariant_ok,
            duration_seconds=duration,
            throughput_ops_per_sec=len(outcomes) / duration if duration > 0 else 0.0,
            notes=f"seed={self.seed}, email pool={EMAIL_POOL_SIZE}.",
        )


__all__ = ["MixedWorkloadScenario", "OPERATION_KINDS"]
