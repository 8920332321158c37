"""Top-level run: logon, then every configured task in order."""

from typing import Callable, List, Optional

from autostore import AutoStore
from autostore.config import Config
from docuware import Credentials, DocuWareGateway
from utils.retry import retry_on_error, DEFAULT_DELAY, DEFAULT_MAX_ATTEMPTS
from .transfer import TaskReport, run_task


def _log_retry(exc: Exception, attempt: int, delay: float) -> None:
    """Log when the run is about to start over."""
    AutoStore.print_right(
        f"[red]  [Retry] {type(exc).__name__}: {exc} on attempt {attempt}, "
        f"retrying in {delay:.1f}s...[/red]"
    )


def credentials_from_config(config: Config) -> Credentials:
    return Credentials(
        username=config.user,
        password=config.password,
        organization=config.organization,
        host_id=config.host_id,
    )


def run_once(gateway: DocuWareGateway, config: Config,
             dry_run: bool = False) -> List[TaskReport]:
    """Log on and run all tasks strictly one after another."""
    credentials = credentials_from_config(config)
    gateway.logon(credentials)
    organization = gateway.get_organization()

    AutoStore.print_right(f"Platform: {gateway.display_name}")
    AutoStore.print_right(f"Username: {credentials.username}")
    AutoStore.print_right(f"Organization: {organization.name}")
    AutoStore.set_organization(organization.name)
    if dry_run:
        AutoStore.print_right("[yellow]Dry run: no documents will be stored[/yellow]")

    reports = []
    total = len(config.tasks)
    AutoStore.set_progress(0, total)
    for index, task in enumerate(config.tasks, 1):
        reports.append(run_task(gateway, task, index, dry_run=dry_run))
        AutoStore.set_progress(index, total)
    return reports


def run_autostore(gateway: DocuWareGateway, config: Config, dry_run: bool = False,
                  max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                  delay: float = DEFAULT_DELAY,
                  sleep: Optional[Callable[[float], None]] = None) -> List[TaskReport]:
    """Run logon and all tasks, starting over from logon on any error.

    Returns:
        One TaskReport per task, from the successful attempt

    Raises:
        The last error once ``max_attempts`` runs have failed
    """
    @retry_on_error(max_attempts=max_attempts, delay=delay,
                    on_retry=_log_retry, sleep=sleep)
    def attempt() -> List[TaskReport]:
        return run_once(gateway, config, dry_run=dry_run)

    return attempt()
