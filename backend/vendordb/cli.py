# Overview: Flask CLI command groups for bootstrap, sample data, reports and
# availability edits.

# backend/vendordb/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to vendordb (PowerShell: $env:FLASK_APP="vendordb").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (no-op for tables that already exist).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Load the sample vendors, menu and orders (skipped if users exist).
#
# Reports (same data as the ShowLog/ShowLocation/ShowOrder/ShowMenu procedures):
# - python -m flask reports log|locations|orders|menu [--json]
#
# Edits that write change log rows:
# - python -m flask locations set-availability 1 N
# - python -m flask locations set-address 1 "200 Pine St, Seattle WA"
# - python -m flask menu set-availability 1 1 N
#
# Orders:
# - python -m flask orders set-status 1 1 Fulfilled
#
# Users:
# - python -m flask users list

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import VendorDBError
from .extensions import db
from .models import Availability, OrderStatus
from .services import location_service, order_service, reporting_service, seed_service, user_service


def _fail(exc: VendorDBError):
    current_app.logger.warning("CLI command failed: %s", exc)
    click.echo(f"FAIL {exc}")
    raise click.exceptions.Exit(1)


def _echo_table(rows: list[dict]) -> None:
    if not rows:
        click.echo("No rows.")
        return
    columns = list(rows[0].keys())
    widths = {
        col: max(len(col), *(len("" if row[col] is None else str(row[col])) for row in rows))
        for col in columns
    }
    line = "=" * (sum(widths.values()) + 2 * (len(columns) - 1))
    click.echo("\n" + line)
    click.echo("  ".join(f"{col:<{widths[col]}}" for col in columns))
    click.echo(line)
    for row in rows:
        click.echo("  ".join(f"{'' if row[col] is None else str(row[col]):<{widths[col]}}" for col in columns))
    click.echo(line + "\n")


AVAILABILITY_CHOICE = click.Choice([a.value for a in Availability])
STATUS_CHOICE = click.Choice([s.value for s in OrderStatus])


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA, including the change log!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to load sample data.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Load the sample data set."""
    try:
        loaded = seed_service.seed_sample_data()
    except VendorDBError as exc:
        _fail(exc)
    if loaded:
        click.echo("PASS Sample data loaded.")
    else:
        click.echo("WARN  Users already exist, sample data skipped.")


@click.group('reports')
def reports_group():
    """Read-only listings."""


def _report_command(name: str, help_text: str):
    @reports_group.command(name, help=help_text)
    @click.option('--json', 'as_json', is_flag=True, help='Print rows as JSON')
    @with_appcontext
    def _command(as_json):
        rows = reporting_service.REPORTS[name]()
        if as_json:
            click.echo(json.dumps(rows, indent=2))
        else:
            _echo_table(rows)

    return _command


_report_command('log', "Change log, newest first.")
_report_command('locations', "All locations, vendor name descending.")
_report_command('orders', "One row per order line, by order id.")
_report_command('menu', "Every location menu entry.")


@click.group('locations')
def locations_group():
    """Location edits."""


@locations_group.command('set-availability')
@click.argument('location_id', type=int)
@click.argument('availability', type=AVAILABILITY_CHOICE)
@with_appcontext
def location_set_availability(location_id, availability):
    """Open (Y) or close (N) a location."""
    try:
        location = location_service.set_location_availability(location_id, availability)
    except VendorDBError as exc:
        _fail(exc)
    click.echo(f"PASS Location {location.id} availability is {location.availability.value}")


@locations_group.command('set-address')
@click.argument('location_id', type=int)
@click.argument('address')
@with_appcontext
def location_set_address(location_id, address):
    """Move a location to a new address."""
    try:
        location = location_service.change_location_address(location_id, address)
    except VendorDBError as exc:
        _fail(exc)
    click.echo(f"PASS Location {location.id} address is {location.address}")


@click.group('menu')
def menu_group():
    """Location menu edits."""


@menu_group.command('set-availability')
@click.argument('location_id', type=int)
@click.argument('item_id', type=int)
@click.argument('availability', type=AVAILABILITY_CHOICE)
@with_appcontext
def menu_set_availability(location_id, item_id, availability):
    """Mark an item available (Y) or sold out (N) at a location."""
    try:
        menu_item = location_service.set_menu_availability(location_id, item_id, availability)
    except VendorDBError as exc:
        _fail(exc)
    click.echo(
        f"PASS Item {menu_item.item_id} at location {menu_item.location_id} "
        f"availability is {menu_item.availability.value}"
    )


@click.group('orders')
def orders_group():
    """Order management."""


@orders_group.command('set-status')
@click.argument('order_id', type=int)
@click.argument('location_id', type=int)
@click.argument('status', type=STATUS_CHOICE)
@with_appcontext
def order_set_status(order_id, location_id, status):
    """Mark an order Received or Fulfilled."""
    try:
        order = order_service.set_order_status(order_id, location_id, status)
    except VendorDBError as exc:
        _fail(exc)
    click.echo(f"PASS Order {order.id} at location {order.location_id} is {order.status.value}")


@click.group('users')
def users_group():
    """User inspection."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = user_service.list_users()
    if not users:
        click.echo("No users found.")
        return
    _echo_table([u.to_dict() for u in users])


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(reports_group)
    app.cli.add_command(locations_group)
    app.cli.add_command(menu_group)
    app.cli.add_command(orders_group)
    app.cli.add_command(users_group)
