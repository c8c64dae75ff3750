"""Flask CLI command tests (run through app.test_cli_runner)."""

import json

import pytest

from vendordb.models import Availability, ChangeType
from vendordb.services import audit_service, location_service, order_service


@pytest.fixture
def runner(app, db_session):
    return app.test_cli_runner()


def test_seed_then_orders_report(runner):
    result = runner.invoke(args=["system", "seed"])
    assert result.exit_code == 0, result.output
    assert "PASS" in result.output

    result = runner.invoke(args=["reports", "orders", "--json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert [(r["item"], r["quantity"]) for r in rows] == [("Vegan Burger", 2), ("Vegan Burger", 3)]


def test_seed_twice_is_skipped(runner, sample_data):
    result = runner.invoke(args=["system", "seed"])
    assert result.exit_code == 0
    assert "skipped" in result.output


def test_table_output(runner, sample_data):
    result = runner.invoke(args=["reports", "locations"])
    assert result.exit_code == 0
    assert "vendor_name" in result.output
    assert result.output.index("Vendor4") < result.output.index("Vendor1")


def test_empty_report(runner):
    result = runner.invoke(args=["reports", "log"])
    assert result.exit_code == 0
    assert "No rows." in result.output


def test_location_availability_writes_log(runner, sample_data):
    result = runner.invoke(args=["locations", "set-availability", "2", "N"])
    assert result.exit_code == 0, result.output

    assert location_service.get_location(2).availability == Availability.NO
    assert audit_service.list_changes(2)[-1].change_type == ChangeType.LOCATION_AVAILABILITY


def test_menu_availability_writes_log(runner, sample_data):
    result = runner.invoke(args=["menu", "set-availability", "1", "1", "N"])
    assert result.exit_code == 0, result.output

    row = audit_service.list_changes(1)[-1]
    assert row.change_type == ChangeType.MENU_AVAILABILITY
    assert row.item_id == 1


def test_missing_location_fails(runner, db_session):
    result = runner.invoke(args=["locations", "set-availability", "99", "N"])
    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_availability_outside_set_is_rejected(runner, sample_data):
    result = runner.invoke(args=["locations", "set-availability", "1", "maybe"])
    assert result.exit_code != 0
    assert location_service.get_location(1).availability == Availability.YES


def test_order_status(runner, sample_data):
    result = runner.invoke(args=["orders", "set-status", "2", "1", "Fulfilled"])
    assert result.exit_code == 0, result.output
    assert order_service.get_order(2, 1).status.value == "Fulfilled"


def test_users_list(runner, sample_data):
    result = runner.invoke(args=["users", "list"])
    assert result.exit_code == 0
    assert "vendor" in result.output


def test_users_list_hides_password_hashes(runner, sample_data):
    result = runner.invoke(args=["users", "list"])
    assert "first_name" in result.output
    assert "example1@gmail.com" in result.output
    assert "$2" not in result.output
