"""Command-line entrypoint for mperf."""

import asyncio
import logging
import sys

import click

from mperf.core.config import Settings, load_settings
from mperf.core.logging import setup_logging
from mperf.exceptions import BootstrapError, ConfigurationError
from mperf.perf.orchestrator import AttemptState, RunStats, UploadAttempt, UploadOrchestrator
from mperf.perf.session import Session
from mperf.storage import create_store

logger = logging.getLogger(__name__)


def _log_completion(attempt: UploadAttempt) -> None:
    if attempt.state is AttemptState.FAILED:
        logger.error(
            "upload failed",
            extra={"object_path": attempt.object_path, "error": str(attempt.error)},
        )


async def run(settings: Settings, max_ticks: int | None = None) -> RunStats:
    """Bootstrap a session and drive uploads until cancelled.

    Raises:
        BootstrapError: If the session root directory cannot be created
    """
    store = create_store(settings)
    session = Session(settings, store)
    await session.bootstrap()

    orchestrator = UploadOrchestrator(session, on_complete=_log_completion)
    return await orchestrator.run(max_ticks=max_ticks)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-s", "--size", type=int, default=None, help="Size of uploaded files in MiB (1-5120, default 5).")
@click.option("-d", "--parent-dir", default=None, help="Parent directory target for files.")
@click.option("-q", "--max-queue", type=int, default=None, help="Max number of outstanding requests (1-500, default 20).")
@click.option("-i", "--interval", type=int, default=None, help="Milliseconds between requests (100-10000, default 500).")
@click.option("--backend", type=click.Choice(["local", "gcs"]), default=None, help="Object store backend.")
@click.option("--bucket", default=None, help="GCS bucket name for the gcs backend.")
@click.option("--local-root", default=None, help="Base directory for the local backend.")
def cli(size, parent_dir, max_queue, interval, backend, bucket, local_root):
    """Start stress testing an object store by uploading files at a high rate."""
    try:
        settings = load_settings(
            OBJECT_SIZE_MB=size,
            PARENT_DIR=parent_dir,
            MAX_OUTSTANDING=max_queue,
            INTERVAL_MS=interval,
            STORAGE_BACKEND=backend,
            GCS_BUCKET_NAME=bucket,
            LOCAL_ROOT=local_root,
        )
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.SERVICE_NAME)
    asyncio.run(run(settings))


def main(argv: list[str] | None = None) -> None:
    """Run the CLI; usage errors and failed initialization exit with status 1."""
    try:
        cli.main(args=argv, prog_name="mperf", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except BootstrapError as e:
        logger.error("could not initialize", extra={"error": str(e)})
        sys.exit(1)
    except click.exceptions.Abort:
        sys.exit(130)


if __name__ == "__main__":
    main()
