r"""Command line entry point running the student lifecycle scenario."""

from __future__ import annotations

__all__ = ["main"]

import sys

import click

from crudprobe.client import StudentServiceClient
from crudprobe.config import (
    BASE_URL_ENV_VAR,
    DEFAULT_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT,
    resolve_base_url,
)
from crudprobe.exceptions import RetryInterruptedError
from crudprobe.retry import RetryPolicy, RetryRunner
from crudprobe.scenario import ScenarioContext, ScenarioDriver, student_crud_steps
from crudprobe.utils.structured_logging import configure_logging


@click.command()
@click.option(
    "--service-url",
    type=str,
    default=None,
    help=f"Base URL of the student service (default: ${BASE_URL_ENV_VAR}, then localhost:8082)",
)
@click.option(
    "--max-attempts",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_ATTEMPTS,
    show_default=True,
    help="Attempts per request, including the first one",
)
@click.option(
    "--delay",
    type=click.FloatRange(min=0.0),
    default=DEFAULT_DELAY,
    show_default=True,
    help="Seconds to wait between two attempts",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0.0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-request timeout in seconds",
)
@click.option("--stop-on-failure", is_flag=True, help="Skip remaining steps after a failure")
@click.option("--json-logs", is_flag=True, help="Write logs to stderr as JSON")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity")
def main(
    service_url: str | None,
    max_attempts: int,
    delay: float,
    timeout: float,
    stop_on_failure: bool,
    json_logs: bool,
    verbose: int,
) -> None:
    """Run the student CRUD lifecycle against a live service."""
    configure_logging(verbose=verbose, json_output=json_logs)
    base_url = resolve_base_url(service_url)
    runner = RetryRunner(RetryPolicy(max_attempts=max_attempts, delay=delay))
    driver = ScenarioDriver(student_crud_steps(), reporter=click.echo)

    click.echo(f"Running student CRUD scenario against {base_url}")
    try:
        with StudentServiceClient(base_url, timeout=timeout) as client:
            report = driver.run(
                client, runner, ScenarioContext(), stop_on_failure=stop_on_failure
            )
    except RetryInterruptedError as exc:
        click.echo(f"❌ Interrupted: {exc}", err=True)
        sys.exit(130)

    click.echo(report.summary())
    sys.exit(0 if report.ok else 1)


if __name__ == "__main__":  # pragma: no cover
    main()
