"""CLI interface for mailqueue."""

import click
import json
import sys
from pathlib import Path
from typing import List, Optional
from .config import get_settings
from .delivery import BrevoDeliverer, NullDeliverer
from .log import setup_logging
from .models import EmailType, QueueConfig, QueueStatus
from .queue import EmailQueue


def build_queue(dry_run: bool) -> EmailQueue:
    """Create a queue wired to Brevo, or to a no-op deliverer for dry runs."""
    settings = get_settings()
    deliverer = NullDeliverer() if dry_run else BrevoDeliverer(settings)
    return EmailQueue(deliverer, QueueConfig.from_settings(settings))


def _drain(queue: EmailQueue, timeout: Optional[float]) -> None:
    if not queue.wait_idle(timeout):
        click.echo(f"✗ Queue still busy after {timeout}s", err=True)
        print_status(queue.get_status())
        sys.exit(1)


def print_status(status: QueueStatus) -> None:
    click.echo("\n" + "=" * 50)
    click.echo("Email Queue Status")
    click.echo("=" * 50)
    click.echo(f"Total Jobs:     {status.total}")
    click.echo(f"  Pending:      {status.pending}")
    click.echo(f"  Processing:   {status.processing}")
    click.echo(f"  Sent:         {status.sent}")
    click.echo(f"  Failed:       {status.failed}")
    click.echo("=" * 50 + "\n")


def print_failed(status: QueueStatus) -> None:
    failed = [job for job in status.jobs if job.status.value == "failed"]
    if not failed:
        return
    click.echo(f"{'ID':<40} {'Attempts':<10} {'Error':<40}")
    click.echo("-" * 90)
    for job in failed:
        error = (job.error or "")[:40]
        click.echo(f"{job.id:<40} {job.attempts:<10} {error:<40}")
    click.echo()


def load_jobs(path: Path) -> List[dict]:
    """Read jobs from a JSON array or a JSON-lines file."""
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if text.startswith("["):
        jobs = json.loads(text)
    else:
        jobs = [json.loads(line) for line in text.splitlines() if line.strip()]
    for i, job in enumerate(jobs, 1):
        validate_job(i, job)
    return jobs


def validate_job(index: int, job) -> None:
    """Reject a batch entry before anything from the batch is queued."""
    if not isinstance(job, dict) or "type" not in job or "recipient" not in job:
        raise ValueError(f"job #{index} needs 'type' and 'recipient'")
    try:
        EmailType(job["type"])
    except ValueError:
        raise ValueError(f"job #{index} has unknown type {job['type']!r}") from None
    max_attempts = job.get("max_attempts")
    if max_attempts is not None and (
        isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1
    ):
        raise ValueError(f"job #{index} max_attempts must be an integer >= 1, got {max_attempts!r}")
    if not isinstance(job.get("data") or {}, dict):
        raise ValueError(f"job #{index} data must be an object")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: MAILQUEUE_LOG_LEVEL or INFO)",
)
def cli(log_level: Optional[str]):
    """MailQueue - Outbound email queue with retries"""
    setup_logging(log_level or get_settings().log_level)


@cli.command()
@click.argument("email_type", type=click.Choice([t.value for t in EmailType]))
@click.argument("recipient")
@click.option("--data", "data_json", default="{}", help="JSON payload (subject, html, text, name)")
@click.option("--max-attempts", type=int, default=None, help="Attempts before giving up")
@click.option("--dry-run", is_flag=True, help="Don't contact the mail provider")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for delivery")
def send(email_type: str, recipient: str, data_json: str, max_attempts: Optional[int], dry_run: bool, timeout: Optional[float]):
    """Queue one email and wait for it to be delivered.

    Example:
        mailqueue send welcome a@example.com --data '{"html":"<p>Hi</p>"}'
    """
    try:
        data = json.loads(data_json)
        queue = build_queue(dry_run)
        job_id = queue.add(email_type, recipient, data, max_attempts)
        click.echo(f"✓ Email {job_id} queued")
    except json.JSONDecodeError as e:
        click.echo(f"✗ Invalid JSON: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)

    _drain(queue, timeout)
    status = queue.get_status()
    print_status(status)
    print_failed(status)
    if status.failed:
        sys.exit(1)


@cli.command()
@click.argument("jobs_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Don't contact the mail provider")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for delivery")
def batch(jobs_file: Path, dry_run: bool, timeout: Optional[float]):
    """Queue every email listed in a JSON or JSON-lines file.

    Each entry needs "type" and "recipient"; "data" and "max_attempts" are optional.

    Example:
        mailqueue batch invites.jsonl
    """
    try:
        jobs = load_jobs(jobs_file)
        queue = build_queue(dry_run)
        for job in jobs:
            queue.add(job["type"], job["recipient"], job.get("data"), job.get("max_attempts"))
    except json.JSONDecodeError as e:
        click.echo(f"✗ Invalid JSON: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ {len(jobs)} email(s) queued")
    _drain(queue, timeout)
    status = queue.get_status()
    print_status(status)
    print_failed(status)
    if status.failed:
        sys.exit(1)


@cli.group()
def config():
    """Inspect configuration"""
    pass


@config.command()
def show():
    """Show current configuration.

    Example:
        mailqueue config show
    """
    settings = get_settings()

    click.echo("\nCurrent Configuration:")
    click.echo(f"  max-attempts:  {settings.max_attempts}")
    click.echo(f"  retry-delay:   {settings.retry_delay} seconds")
    click.echo(f"  send-delay:    {settings.send_delay} seconds")
    click.echo(f"  from:          {settings.from_name} <{settings.from_email}>")
    click.echo(f"  brevo-api-url: {settings.brevo_api_url}")
    click.echo(f"  brevo-api-key: {settings.masked_api_key()}")
    click.echo()


if __name__ == "__main__":
    cli()
