"""
Orchestrator for running contention scenarios, profiling execution, and persisting results.

Usage (example from CLI):
    from memstore.orchestrator import RunConfig, run_scenarios

    results = run_scenarios(RunConfig(scenario_names=["distinct_creates"], operations=200))
    print(results)

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
import statistics
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from memstore.config import get_settings
from memstore.scenarios.abstract import Scenario, ScenarioResult
from memstore.scenarios.creates import DistinctCreatesScenario, SharedUniqueCreatesScenario
from memstore.scenarios.mixed import MixedWorkloadScenario
from memstore.utils.logging import get_logger
from memstore.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


@dataclass
class RunConfig:
    """
    Parameters for one orchestrator run. None falls back to settings.
    """

    scenario_names: Optional[Iterable[str]] = None
    workers: Optional[int] = None
    operations: Optional[int] = None
    results_dir: Optional[Path | str] = None
    persist: bool = True
    runs: int = 1


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _summary(values: List[float]) -> dict:
    return {
        "median": _round_float(statistics.median(values)),
        "mean": _round_float(statistics.mean(values)),
        "stddev": _round_float(statistics.stdev(values)) if len(values) > 1 else 0.0,
        "min": _round_float(min(values)),
        "max": _round_float(max(values)),
    }


def _aggregate_runs(run_results: List[dict]) -> dict:
    """
    Aggregate multiple runs into a statistical summary of duration and throughput.
    The run only counts as invariant-clean if every individual run was.
    """
    return {
        "duration_seconds": _summary([r["duration_seconds"] for r in run_results]),
        "throughput_ops_per_sec": _summary([r["throughput_ops_per_sec"] for r in run_results]),
        "operations": run_results[0].get("operations", 0),
        "invariant_ok": all(r.get("invariant_ok", False) for r in run_results),
    }


def _scenario_factories() -> Dict[str, Callable[[], Scenario]]:
    """Registry of available scenarios."""
    return {
        "distinct_creates": lambda: DistinctCreatesScenario(),
        "shared_unique_creates": lambda: SharedUniqueCreatesScenario(),
        "mixed_workload": lambda: MixedWorkloadScenario(),
    }


def available_scenarios() -> List[str]:
    """List available scenario names."""
    return sorted(_scenario_factories().keys())


def _resolve_scenario(name: str) -> Scenario:
    factories = _scenario_factories()
    if name not in factories:
        raise ValueError(f"Unknown scenario '{name}'. Available: {', '.join(factories)}")
    return factories[name]()


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def _profiled_execute(scenario: Scenario, workers: int, operations: int) -> dict:
    log.info(f"[SCENARIO START] {scenario.name}", extra={"scenario": scenario.name})
    with profile_block(scenario.name) as stats:
        try:
            result = scenario.execute(workers, operations)
            log.info(
                f"[SCENARIO SUCCESS] {scenario.name}",
                extra={
                    "scenario": scenario.name,
                    "successes": result.get("successes"),
                    "conflicts": result.get("conflicts"),
                },
            )
        except Exception as exc:  # noqa: BLE001 - record the failure in the result
            log.exception(f"[SCENARIO FAILED] {scenario.name}", extra={"scenario": scenario.name})
            result = ScenarioResult(error=str(exc), operations=0, invariant_ok=False)

    return _merge_result(result, stats)


def _merge_result(result: ScenarioResult, stats: ProfileStats) -> dict:
    """Merge a scenario result with profiler stats, rounding floats for readability."""
    merged = dict(result)
    merged.setdefault("operations", 0)
    merged.setdefault("invariant_ok", False)
    if not merged.get("duration_seconds"):
        merged["duration_seconds"] = stats.duration_seconds
    if not merged.get("throughput_ops_per_sec"):
        duration = merged["duration_seconds"]
        merged["throughput_ops_per_sec"] = merged["operations"] / duration if duration else 0.0
    merged["duration_seconds"] = _round_float(merged["duration_seconds"], 4)
    merged["throughput_ops_per_sec"] = _round_float(merged["throughput_ops_per_sec"])
    if merged.get("peak_rss_bytes") is None:
        merged["peak_rss_bytes"] = stats.peak_rss_bytes
    if merged.get("cpu_percent") is None:
        merged["cpu_percent"] = _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None
    merged["profile"] = {
        "label": stats.label,
        "duration_seconds": _round_float(stats.duration_seconds, 4),
        "peak_rss_bytes": stats.peak_rss_bytes,
        "peak_traced_bytes": stats.peak_traced_bytes,
        "cpu_percent": _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None,
    }
    return merged


def run_scenarios(config: Optional[RunConfig] = None) -> List[dict]:
    """
    Run one or more scenarios and optionally persist the results.

    Parameters
    ----------
    config : RunConfig | None
        Scenario names (None or ["all"] runs every scenario), pool size,
        operations per run, repetitions and persistence options.

    Returns
    -------
    List[dict]
        Per-scenario result dictionaries including profiler stats. When
        runs > 1, each entry holds aggregated statistics and the individual runs.
    """
    config = config or RunConfig()
    settings = get_settings()
    workers = config.workers or settings.scenario_workers
    operations = config.operations or settings.scenario_operations
    runs = max(config.runs, 1)

    names = list(config.scenario_names) if config.scenario_names is not None else ["all"]
    if len(names) == 1 and names[0] == "all":
        names = available_scenarios()

    results: List[dict] = []
    for name in names:
        run_results: List[dict] = []
        for run_num in range(1, runs + 1):
            log.info(
                f"[RUN {run_num}/{runs}] {name}",
                extra={"scenario": name, "workers": workers, "operations": operations},
            )
            scenario = _resolve_scenario(name)
            result = _profiled_execute(scenario, workers, operations)
            result["scenario"] = name
            result["workers"] = workers
            result["run"] = run_num
            run_results.append(result)

        if runs > 1:
            aggregated = _aggregate_runs(run_results)
            aggregated["scenario"] = name
            aggregated["workers"] = workers
            aggregated["runs"] = runs
            aggregated["individual_runs"] = run_results
            results.append(aggregated)
        else:
            results.extend(run_results)

        if not all(r.get("invariant_ok") for r in run_results):
            log.warning(f"[INVARIANT VIOLATED] {name}", extra={"scenario": name})

    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "workers": workers,
        "operations": operations,
        "scenarios": names,
        "results": results,
    }

    if config.persist:
        _persist_results(payload, Path(config.results_dir or settings.results_dir))

    log.info(
        f"[ORCHESTRATOR COMPLETE] {len(names)} scenario(s) executed",
        extra={"scenarios": names},
    )
    return results


__all__ = [
    "RunConfig",
    "available_scenarios",
    "run_scenarios",
]
