"""
Step definitions for Route53 Sync integration tests.
"""

import yaml
from behave import given, when, then

from route53_sync.cli.main import main
from route53_sync.core.locking import lock_key
from route53_sync.core.models import HostedZone, RecordSet
from route53_sync.core.sync_manager import SyncManager


def _account(context, name):
    account = context.sync_manager.account_resolver.resolve_account(name)
    assert account is not None, f"Account {name} is not configured"
    return account


def _record(context, name, record_type):
    for record in context.sync_manager.record_repository.find_all():
        if record.name == name and record.type == record_type:
            return record
    raise AssertionError(f"Record {name} {record_type} is not mirrored")


def _run(context, operation):
    try:
        context.result = operation()
    except Exception as e:
        context.error = str(e)


@given("route53-sync is configured with the mock provider")
def step_impl(context):
    """Configure route53-sync with the mock provider."""
    context.sync_manager = SyncManager(context.config_data)
    assert context.sync_manager.synchronizer is not None


@given('record listing fails for zone "{zone_id}"')
def step_impl(context, zone_id):
    """Make the remote record listing of a zone fail."""
    account = _account(context, "production")
    context.sync_manager.client_factory.get_or_create_client(account).fail_zone(zone_id)


@given('the mirror of account "{name}" has been pulled')
def step_impl(context, name):
    """Pull the account so that local records exist."""
    context.sync_manager.synchronizer.pull_from_remote(_account(context, name))


@given('I change the TTL of "{name}" "{record_type}" to {ttl:d}')
def step_impl(context, name, record_type, ttl):
    """Edit a mirrored record locally."""
    record = _record(context, name, record_type)
    record.ttl = ttl
    record.mark_local_change()
    context.sync_manager.record_repository.save(record)


@given('the pull lock of account "{name}" is held')
def step_impl(context, name):
    """Hold the pull lock as another caller would."""
    key = lock_key("pull", _account(context, name))
    assert context.sync_manager.lock_factory.create_lock(key, 60).acquire()


@when('I pull account "{name}"')
def step_impl(context, name):
    """Pull an account."""
    account = _account(context, name)
    _run(context, lambda: context.sync_manager.synchronizer.pull_from_remote(account))


@when('I pull account "{name}" in dry run mode')
def step_impl(context, name):
    """Pull an account without saving."""
    account = _account(context, name)
    _run(context, lambda: context.sync_manager.synchronizer.pull_from_remote(account, dry_run=True))


@when('I push account "{name}"')
def step_impl(context, name):
    """Push an account."""
    account = _account(context, name)
    _run(context, lambda: context.sync_manager.synchronizer.push_to_remote(account))


@when('I synchronize account "{name}" in "{mode}" mode')
def step_impl(context, name, mode):
    """Run bidirectional synchronization."""
    account = _account(context, name)
    _run(context, lambda: context.sync_manager.synchronizer.bidirectional_sync(account, mode=mode))


@when('I run route53-sync with "{arguments}"')
def step_impl(context, arguments):
    """Run the command line entry point."""
    with open(context.test_config_file, "w") as f:
        yaml.dump(context.config_data, f)

    try:
        main(["--config", str(context.test_config_file), *arguments.split()])
    except SystemExit as e:
        context.exit_code = e.code


@then("{zones:d} zones and {records:d} records should be reported")
def step_impl(context, zones, records):
    """Verify the pull counts."""
    assert context.error is None, f"Operation failed: {context.error}"
    assert context.result["zones"] == zones, f"Expected {zones} zones, got {context.result['zones']}"
    assert context.result["records"] == records, f"Expected {records} records, got {context.result['records']}"
    assert len(context.result["changes"]) == records


@then("{zones:d} zones and {records:d} records should be mirrored")
def step_impl(context, zones, records):
    """Verify the committed mirror."""
    store = context.sync_manager.store
    store.flush()
    assert store.count(HostedZone) == zones, f"Expected {zones} zones, got {store.count(HostedZone)}"
    assert store.count(RecordSet) == records, f"Expected {records} records, got {store.count(RecordSet)}"


@then("the SOA and NS records should be system managed")
def step_impl(context):
    """Verify that apex infrastructure records are system managed."""
    for record in context.sync_manager.record_repository.find_all():
        assert record.managed_by_system == (record.type in ("SOA", "NS")), str(record)


@then("{count:d} upserts should be reported")
def step_impl(context, count):
    """Verify the push changes."""
    assert context.error is None, f"Operation failed: {context.error}"
    push_result = context.result.get("push", context.result)
    assert len(push_result["changes"]) == count, push_result
    assert push_result["errors"] == []


@then('"{name}" "{record_type}" should be in sync')
def step_impl(context, name, record_type):
    """Verify that a pushed record has no local changes left."""
    record = _record(context, name, record_type)
    context.sync_manager.store.refresh(record)
    assert record.remote_fingerprint == record.local_fingerprint
    assert record.last_seen_remote_at is not None


@then('"{name}" "{record_type}" should have local changes')
def step_impl(context, name, record_type):
    """Verify that a record still waits to be pushed."""
    record = _record(context, name, record_type)
    context.sync_manager.store.refresh(record)
    assert record.remote_fingerprint != record.local_fingerprint


@then("{count:d} applied changes should be logged")
def step_impl(context, count):
    """Verify the change audit trail."""
    changes = context.sync_manager.change_repository.find_all()
    assert len(changes) == count, f"Expected {count} changes, got {len(changes)}"
    assert all(c.status == "applied" for c in changes)


@then("no conflicts should be reported")
def step_impl(context):
    """Verify the conflict placeholders."""
    assert context.result["conflicts"] == []
    assert context.result["resolved"] == []


@then('the operation should fail with "{message}"')
def step_impl(context, message):
    """Verify the error message."""
    assert context.error == message, f"Expected '{message}', got '{context.error}'"


@then("the command should exit with code {code:d}")
def step_impl(context, code):
    """Verify the command exit code."""
    assert context.exit_code == code, f"Expected exit code {code}, got {context.exit_code}"


@then("the state file should contain {count:d} zones")
def step_impl(context, count):
    """Verify the saved state."""
    with open(context.state_file) as f:
        state = yaml.safe_load(f)
    assert len(state["zones"]) == count
