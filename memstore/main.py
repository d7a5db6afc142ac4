from __future__ import annotations

import json
import sys
from typing import Callable, List, Optional

import typer

from memstore.config import get_settings
from memstore.domain.exceptions import RepositoryError, http_status_for
from memstore.domain.models import LoginRequest, UserCreate, UserUpdate
from memstore.orchestrator import RunConfig, available_scenarios, run_scenarios
from memstore.reporter import print_page, print_records, print_results
from memstore.services.users import UserService
from memstore.utils.logging import configure_logging

app = typer.Typer(help="memstore: in-memory CRUD repository toolkit.")


def _step(label: str, action: Callable[[], object]) -> Optional[object]:
    """Run one demo step and echo either its result or the mapped error."""
    try:
        value = action()
    except RepositoryError as exc:
        typer.echo(f"{label} -> {http_status_for(exc)} {type(exc).__name__}: {exc.message}")
        return None
    typer.echo(f"{label} -> ok")
    return value


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} log_level={settings.log_level} | "
        f"page_size default={settings.page_size_default} max={settings.page_size_max} | "
        f"scenario workers={settings.scenario_workers} operations={settings.scenario_operations}"
    )


@app.command()
def demo() -> None:
    """
    Walk through create, conflict, update, login, list and delete on a user store.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    service = UserService()

    alice = _step(
        "create alice",
        lambda: service.create_user(
            UserCreate(username="alice", email="a@x.com", password="wonderland")
        ),
    )
    _step(
        "create alice again",
        lambda: service.create_user(
            UserCreate(username="alice", email="b@x.com", password="wonderland")
        ),
    )
    _step(
        "create bob",
        lambda: service.create_user(
            UserCreate(username="bob", email="b@x.com", password="builder")
        ),
    )
    if alice is None:
        raise typer.Exit(code=1)

    updated = _step(
        "update alice email",
        lambda: service.update_user(alice.id, UserUpdate(email="c@x.com")),
    )
    if updated is not None:
        print_records([updated], title="alice after update")
    _step(
        "login alice",
        lambda: service.login(LoginRequest(username="alice", password="wonderland")),
    )
    _step(
        "login with wrong password",
        lambda: service.login(LoginRequest(username="alice", password="nope")),
    )

    print_page(service.list_users(page=1, page_size=10), title="users")
    _step("delete alice", lambda: service.delete_user(alice.id))
    _step("get alice", lambda: service.get_user(alice.id))
    _step("delete alice again", lambda: service.delete_user(alice.id))


@app.command()
def scenarios(
    scenario: str = typer.Option(
        "all",
        "--scenario",
        "--scenarios",
        "-s",
        help="Scenario to run (e.g., distinct_creates, mixed_workload, all, list).",
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Thread pool size (default from settings)."
    ),
    operations: Optional[int] = typer.Option(
        None, "--operations", "-n", help="Operations per run (default from settings)."
    ),
    runs: int = typer.Option(1, "--runs", "-r", min=1, help="Measurement runs per scenario."),
    persist: bool = typer.Option(True, "--persist/--no-persist", help="Write JSON results."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table."),
) -> None:
    """
    Run contention scenarios against fresh repositories and report the outcome.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    if scenario == "list":
        typer.echo("Available scenarios: " + ", ".join(available_scenarios()))
        return

    names: List[str] = ["all"] if scenario == "all" else [scenario]
    try:
        results = run_scenarios(
            RunConfig(
                scenario_names=names,
                workers=workers,
                operations=operations,
                persist=persist,
                runs=runs,
            )
        )
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)

    if as_json:
        typer.echo(json.dumps(results, indent=2))
    else:
        print_results(results)

    if not all(r.get("invariant_ok") for r in results):
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
