#!/usr/bin/env python3
"""
Route53 Sync - Demo Script

This script demonstrates pull, push and bidirectional synchronization
using the mock provider for safe testing and demonstration.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from route53_sync.core.sync_manager import SyncManager

# Initialize rich console
console = Console()

ACCOUNT = "demo"


def create_demo_config():
    """Create the demo configuration."""
    return {
        "provider": "mock",
        "accounts": [{"name": ACCOUNT, "account_id": "123456789012"}],
        "mock": {
            "zones": [
                {
                    "id": "Z1BIGBANK",
                    "name": "ib.bigbank.com.",
                    "comment": "demo zone",
                    "records": [
                        {"Name": "ib.bigbank.com.", "Type": "SOA", "TTL": 900,
                         "ResourceRecords": [{"Value": "ns-1.awsdns-01.org. hostmaster. 1 7200 900 1209600 86400"}]},
                        {"Name": "ib.bigbank.com.", "Type": "NS", "TTL": 172800,
                         "ResourceRecords": [{"Value": "ns-1.awsdns-01.org."}]},
                        {"Name": "web1.ib.bigbank.com.", "Type": "A", "TTL": 300,
                         "ResourceRecords": [{"Value": "10.33.1.10"}]},
                        {"Name": "db1.ib.bigbank.com.", "Type": "A", "TTL": 300,
                         "ResourceRecords": [{"Value": "10.33.2.10"}]},
                    ],
                }
            ]
        },
    }


def display_demo_header():
    """Display the demo header."""
    console.print(
        Panel.fit(
            "[bold blue]Route53 Sync - Demo[/bold blue]\n"
            "[cyan]Bidirectional synchronization for ib.bigbank.com[/cyan]",
            border_style="blue",
        )
    )
    console.print()


def display_mirror(sync_manager, title):
    """Display the local mirror."""
    console.print(f"[bold]{title}:[/bold]")

    records = sync_manager.record_repository.find_all()
    if not records:
        console.print("[yellow]The local mirror is empty[/yellow]")
        console.print()
        return

    table = Table(title="Local Mirror")
    table.add_column("Record", style="cyan")
    table.add_column("Values", style="magenta")
    table.add_column("TTL", style="yellow")
    table.add_column("Managed", style="green")
    table.add_column("Pending", style="red")

    for record in records:
        table.add_row(
            record.record_key,
            ", ".join(record.values()),
            str(record.ttl),
            "yes" if record.managed_by_system else "",
            "yes" if record.local_fingerprint != record.remote_fingerprint else "",
        )

    console.print(table)
    console.print()


def edit_record(sync_manager, name, ttl):
    """Change a mirrored record locally."""
    for record in sync_manager.record_repository.find_all():
        if record.name == name:
            record.ttl = ttl
            record.mark_local_change()
            sync_manager.record_repository.save(record)
            console.print(f"[green]Changed TTL of {record.record_key} to {ttl}[/green]")
            return


def main():
    """Main demo function."""
    display_demo_header()

    try:
        console.print("[blue]Initializing Sync Manager...[/blue]")
        sync_manager = SyncManager(create_demo_config())
        console.print("[green]✓ Sync Manager initialized successfully[/green]")
        console.print()

        display_mirror(sync_manager, "Initial State")

        console.print("[bold]Running Dry-Run Pull...[/bold]")
        sync_manager.run("pull", account_filter=ACCOUNT, dry_run=True)
        display_mirror(sync_manager, "After Dry-Run Pull")

        console.print("[bold]Running Pull...[/bold]")
        sync_manager.run("pull", account_filter=ACCOUNT)
        display_mirror(sync_manager, "After Pull")

        edit_record(sync_manager, "web1.ib.bigbank.com.", 60)
        edit_record(sync_manager, "ib.bigbank.com.", 60)
        display_mirror(sync_manager, "After Local Edits")

        console.print("[bold]Running Merge Sync...[/bold]")
        sync_manager.run("sync", account_filter=ACCOUNT, mode="merge")

        console.print("[bold]Running Local-Wins Sync...[/bold]")
        sync_manager.run("sync", account_filter=ACCOUNT, mode="local_wins")
        display_mirror(sync_manager, "Final State")

        console.print(
            Panel.fit(
                "[bold green]Demo Summary[/bold green]\n"
                "✓ Remote zones pulled into the local mirror\n"
                "✓ SOA and NS records kept system managed\n"
                "✓ Local edit pushed, apex edit ignored\n"
                "✓ Mock provider used (no real DNS changes)",
                border_style="green",
            )
        )

    except Exception as e:
        console.print(f"[red]Demo failed with error: {e}[/red]")
        console.print("[yellow]Check the logs for more details[/yellow]")

    console.print()
    console.print("[bold blue]Demo completed![/bold blue]")


if __name__ == "__main__":
    main()
