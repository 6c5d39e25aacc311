"""
Sync Manager - Wires the synchronizers together for the command line

This module builds the store, repositories, client factory, locks and
reconcilers from configuration, runs pull, push and bidirectional
synchronization across the resolved accounts and reports the outcome.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from ..parsers.accounts import AccountConfigParser
from ..providers.client_factory import ClientCache, create_client_factory
from ..repositories.memory import (
    InMemoryAccountRepository,
    InMemoryChangeLogRepository,
    InMemoryHostedZoneRepository,
    InMemoryRecordSetRepository,
    InMemoryStore,
)
from ..repositories.state_file import StateFile
from ..utils.validators import normalize_zone_id
from .accounts import AccountResolver
from .locking import (
    BIDIRECTIONAL_LOCK_TTL,
    PULL_LOCK_TTL,
    PUSH_LOCK_TTL,
    LockFactory,
    create_lock_factory,
)
from .models import Account, HostedZone
from .pull import PullReconciler
from .push import PushReconciler
from .synchronizer import Synchronizer

console = Console()
logger = logging.getLogger(__name__)

OPERATIONS = ("pull", "push", "sync")


class SyncManager:
    """Main synchronization class that orchestrates runs over accounts."""

    def __init__(
        self,
        config: Dict,
        client_cache: Optional[ClientCache] = None,
        lock_factory: Optional[LockFactory] = None,
    ):
        """Initialize the sync manager with configuration."""
        self.config = config or {}

        self.store = InMemoryStore()
        self.account_repository = InMemoryAccountRepository(self.store)
        self.zone_repository = InMemoryHostedZoneRepository(self.store)
        self.record_repository = InMemoryRecordSetRepository(self.store)
        self.change_repository = InMemoryChangeLogRepository(self.store)

        self.client_factory = create_client_factory(self.config, cache=client_cache)
        self.lock_factory = lock_factory or create_lock_factory(self.config)

        locks = self.config.get("locks") or {}
        self.pull_reconciler = PullReconciler(
            self.client_factory,
            self.store,
            self.zone_repository,
            self.record_repository,
            self.lock_factory,
            lock_ttl=locks.get("pull_ttl", PULL_LOCK_TTL),
        )
        self.push_reconciler = PushReconciler(
            self.client_factory,
            self.store,
            self.zone_repository,
            self.record_repository,
            self.lock_factory,
            lock_ttl=locks.get("push_ttl", PUSH_LOCK_TTL),
        )
        self.synchronizer = Synchronizer(
            self.pull_reconciler,
            self.push_reconciler,
            self.lock_factory,
            lock_ttl=locks.get("bidirectional_ttl", BIDIRECTIONAL_LOCK_TTL),
        )
        self.account_resolver = AccountResolver(self.account_repository)

        state_path = (self.config.get("storage") or {}).get("state_file")
        self.state_file = StateFile(state_path) if state_path else None

        self._load_accounts()
        if self.state_file:
            self.state_file.load(self.store)

    def _load_accounts(self):
        for account in AccountConfigParser(self.config).parse():
            self.store.persist(account)
        self.store.flush()

    def run(
        self,
        operation: str,
        account_filter: Optional[str] = None,
        zone_id: Optional[str] = None,
        dry_run: bool = False,
        mode: str = "local_wins",
        output_file: Optional[str] = None,
    ) -> bool:
        """
        Run one synchronization operation against the resolved accounts.

        Args:
            operation: pull, push or sync
            account_filter: Comma separated account names, ids or UUIDs
            zone_id: Only synchronize this hosted zone when given
            dry_run: Report what would change without saving anything
            mode: Conflict mode for sync
            output_file: File to save the dry run summary to

        Returns:
            True if every account completed without errors
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")

        accounts = self.account_resolver.resolve_accounts(account_filter)
        if not accounts:
            console.print("[red]No accounts matched[/red]")
            return False

        console.print(f"[green]Running {operation} for {len(accounts)} accounts...[/green]")

        results: List[Tuple[Account, Dict]] = []
        success = True
        for account in accounts:
            try:
                zone = self.resolve_zone(account, zone_id)
                result = self._run_operation(operation, account, zone, dry_run, mode)
            except Exception as e:
                logger.error(f"{operation} failed for account {account.name}: {e}")
                console.print(f"[red]Failed {operation} for {account.name}: {e}[/red]")
                success = False
                continue

            results.append((account, result))
            if self._errors(operation, result):
                success = False

        self._display_results_summary(operation, results)

        if dry_run:
            console.print("[yellow]DRY RUN MODE - No changes were saved[/yellow]")
            if output_file:
                self._save_dry_run_output(operation, results, output_file)
                console.print(f"[green]Dry run output saved to: {output_file}[/green]")
        elif self.state_file:
            self.state_file.save(self.store)

        return success

    def resolve_zone(self, account: Account, zone_id: Optional[str]) -> Optional[HostedZone]:
        """
        Find the local mirror of a hosted zone.

        A zone that has not been pulled yet is returned as an unsaved stub
        carrying only the remote id, so that a scoped pull can discover it.
        """
        if not zone_id:
            return None

        remote_id = normalize_zone_id(zone_id)
        zone = self.zone_repository.find_one_by_account_and_remote_id(account, remote_id)
        if zone is None:
            logger.info(f"Hosted zone {remote_id} not mirrored yet for account {account.name}")
            zone = HostedZone(account=account, remote_id=remote_id, name=remote_id)
        return zone

    def list_accounts(self, account_filter: Optional[str] = None) -> List[Account]:
        """Display the resolved accounts."""
        accounts = self.account_resolver.resolve_accounts(account_filter)

        table = Table(title="Accounts")
        table.add_column("Name", style="cyan")
        table.add_column("Account ID", style="magenta")
        table.add_column("UUID", style="white")
        table.add_column("Region", style="green")
        table.add_column("Credentials", style="yellow")
        table.add_column("Enabled", style="white")

        for account in accounts:
            table.add_row(
                account.name,
                account.account_id or "-",
                str(account.id),
                account.default_region,
                account.credentials_type,
                "yes" if account.enabled else "no",
            )

        console.print(table)
        return accounts

    def _run_operation(
        self, operation: str, account: Account, zone: Optional[HostedZone], dry_run: bool, mode: str
    ) -> Dict:
        if operation == "pull":
            return self.synchronizer.pull_from_remote(account, zone, dry_run)
        if operation == "push":
            return self.synchronizer.push_to_remote(account, zone, dry_run)
        return self.synchronizer.bidirectional_sync(account, zone, mode, dry_run)

    def _changes(self, operation: str, result: Dict) -> Tuple[List[Dict], List[Dict]]:
        """Split a result into pull changes and push changes."""
        if operation == "pull":
            return result.get("changes", []), []
        if operation == "push":
            return [], result.get("changes", [])
        return result["pull"].get("changes", []), result["push"].get("changes", [])

    def _errors(self, operation: str, result: Dict) -> List[Dict]:
        if operation == "pull":
            return []
        if operation == "push":
            return result.get("errors", [])
        return result["push"].get("errors", [])

    def _display_results_summary(self, operation: str, results: List[Tuple[Account, Dict]]):
        """Display a summary of the synchronization results."""
        table = Table(title=f"Route53 {operation.capitalize()} Summary")
        table.add_column("Account", style="cyan")
        table.add_column("Zones", style="magenta")
        table.add_column("Records", style="magenta")
        table.add_column("Pulled", style="green")
        table.add_column("Upserts", style="yellow")
        table.add_column("Errors", style="red")

        for account, result in results:
            pull_result = result if operation == "pull" else result.get("pull", {})
            pulled, upserts = self._changes(operation, result)
            table.add_row(
                account.name,
                str(pull_result.get("zones", "-")),
                str(pull_result.get("records", "-")),
                str(len(pulled)),
                str(len(upserts)),
                str(len(self._errors(operation, result))),
            )

        console.print(table)

        for account, result in results:
            for error in self._errors(operation, result):
                console.print(f"[red]{account.name}: zone {error['zone']}: {error['error']}[/red]")

    def _save_dry_run_output(self, operation: str, results: List[Tuple[Account, Dict]], output_file: str):
        """Save dry run output to a file."""
        try:
            with open(output_file, "w") as f:
                f.write("=" * 60 + "\n")
                f.write(f"ROUTE53 SYNC - DRY RUN SUMMARY ({operation.upper()})\n")
                f.write("=" * 60 + "\n\n")
                f.write(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")

                for account, result in results:
                    pulled, upserts = self._changes(operation, result)
                    f.write(f"ACCOUNT: {account.name}\n")
                    f.write("-" * 20 + "\n")

                    for change in pulled:
                        f.write(f"  < {change['zone']:<30} {change['record']}\n")
                    for change in upserts:
                        f.write(f"  > {change['zone']:<30} {change['record']}\n")
                    for error in self._errors(operation, result):
                        f.write(f"  ! {error['zone']:<30} {error['error']}\n")
                    if operation == "sync" and result.get("conflicts"):
                        f.write(f"  Conflicts: {len(result['conflicts'])}\n")
                    f.write("\n")

                f.write("=" * 60 + "\n")
                f.write("END OF DRY RUN SUMMARY\n")
                f.write("=" * 60 + "\n")

            logger.info(f"Dry run output saved to: {output_file}")
        except OSError as e:
            logger.error(f"Failed to save dry run output to {output_file}: {e}")
            console.print(f"[red]Warning: Failed to save dry run output to {output_file}: {e}[/red]")
