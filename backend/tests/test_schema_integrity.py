"""
Referential-integrity tests: the restrict/cascade matrix, key uniqueness,
and database-level enforcement of closed sets and quantities.
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from vendordb.errors import (
    DuplicateKeyError,
    NotFoundError,
    ReferenceNotFoundError,
    RestrictedDeleteError,
)
from vendordb.extensions import db
from vendordb.models import ChangeLog, Item, Location, LocationItem, Order, OrderItem, User
from vendordb.services import catalog_service, location_service, order_service, reporting_service, user_service


class TestForeignKeysOnInsert:
    def test_location_requires_existing_user(self, db_session):
        with pytest.raises(ReferenceNotFoundError):
            location_service.register_location(user_id=999, address="Nowhere", availability="Y")
        assert db_session.query(Location).count() == 0
        assert db_session.query(ChangeLog).count() == 0

    def test_database_rejects_orphan_location(self, db_session):
        db_session.add(Location(user_id=999, address="Nowhere", availability="Y"))
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()

    def test_menu_item_requires_existing_item(self, location):
        with pytest.raises(ReferenceNotFoundError):
            location_service.add_menu_item(location_id=location.id, item_id=999, availability="Y", quantity=1)

    def test_order_requires_existing_location(self, burger):
        with pytest.raises(ReferenceNotFoundError):
            order_service.place_order(location_id=999, lines=[(burger.id, 1)])
        assert db.session.query(Order).count() == 0

    def test_order_line_requires_existing_item(self, location, burger):
        with pytest.raises(ReferenceNotFoundError):
            order_service.place_order(location_id=location.id, lines=[(burger.id, 1), (999, 2)])
        # the whole order is rolled back, not just the bad line
        assert db.session.query(Order).count() == 0
        assert db.session.query(OrderItem).count() == 0


class TestDeleteRules:
    def test_location_with_orders_cannot_be_deleted(self, sample_data):
        with pytest.raises(RestrictedDeleteError):
            location_service.delete_location(1)
        assert location_service.get_location(1) is not None
        assert db.session.query(Order).filter_by(location_id=1).count() == 2

    def test_location_with_history_cannot_be_deleted(self, location):
        # every registered location has its LOCATION_ADD row
        with pytest.raises(RestrictedDeleteError):
            location_service.delete_location(location.id)
        assert location_service.get_location(location.id) is not None

    def test_location_without_orders_or_history_cascades_menu(self, location, burger, purge_change_log):
        location_id = location.id
        location_service.add_menu_item(location_id=location_id, item_id=burger.id, availability="Y", quantity=5)
        purge_change_log(location_id)

        location_service.delete_location(location_id)

        assert location_service.get_location(location_id) is None
        assert db.session.query(LocationItem).filter_by(location_id=location_id).count() == 0
        assert catalog_service.get_item(burger.id) is not None

    def test_delete_missing_location(self, db_session):
        with pytest.raises(NotFoundError):
            location_service.delete_location(12345)

    def test_deleting_order_cascades_lines_and_keeps_items(self, sample_data):
        order_service.delete_order(1, 1)

        assert order_service.get_order(1, 1) is None
        assert db.session.query(OrderItem).filter_by(order_id=1, location_id=1).count() == 0
        # the other order and the catalog are untouched
        assert db.session.query(OrderItem).filter_by(order_id=2, location_id=1).count() == 1
        assert catalog_service.get_item(1).name == "Vegan Burger"

    def test_item_on_a_menu_cannot_be_deleted(self, location, burger):
        location_service.add_menu_item(location_id=location.id, item_id=burger.id, availability="Y", quantity=1)
        with pytest.raises(RestrictedDeleteError):
            catalog_service.delete_item(burger.id)
        assert catalog_service.get_item(burger.id) is not None

    def test_item_on_an_order_cannot_be_deleted(self, location):
        fries = catalog_service.create_item("Fries")
        order_service.place_order(location_id=location.id, lines=[(fries.id, 1)])
        with pytest.raises(RestrictedDeleteError):
            catalog_service.delete_item(fries.id)

    def test_item_in_change_log_cannot_be_deleted(self, location, burger):
        location_service.add_menu_item(location_id=location.id, item_id=burger.id, availability="Y", quantity=1)
        location_service.set_menu_availability(location.id, burger.id, "N")
        location_service.remove_menu_item(location.id, burger.id)

        with pytest.raises(RestrictedDeleteError):
            catalog_service.delete_item(burger.id)

    def test_unreferenced_item_can_be_deleted(self, burger):
        catalog_service.delete_item(burger.id)
        assert catalog_service.get_item(burger.id) is None

    def test_user_owning_locations_cannot_be_deleted(self, location, vendor):
        with pytest.raises(RestrictedDeleteError):
            user_service.delete_user(vendor.id)
        assert user_service.get_user(vendor.id) is not None

    def test_user_without_locations_can_be_deleted(self, vendor):
        user_service.delete_user(vendor.id)
        assert user_service.get_user(vendor.id) is None


class TestUpdateCascades:
    def test_renumbering_user_moves_locations(self, sample_data):
        user = user_service.renumber_user(1, 50)

        assert user.id == 50
        assert user_service.get_user(1) is None
        assert location_service.get_location(1).user_id == 50

    def test_renumbering_location_moves_all_dependents(self, sample_data):
        location = location_service.renumber_location(1, 100)

        assert location.id == 100
        assert db.session.query(LocationItem).filter_by(location_id=100).count() == 1
        assert db.session.query(Order).filter_by(location_id=100).count() == 2
        assert db.session.query(OrderItem).filter_by(location_id=100).count() == 2
        assert db.session.query(ChangeLog).filter_by(location_id=100).count() == 1
        assert db.session.query(ChangeLog).filter_by(location_id=1).count() == 0

        orders = reporting_service.show_order()
        assert [row["location_name"] for row in orders] == ["Vendor1", "Vendor1"]

    def test_renumbering_item_moves_menu_and_order_lines(self, sample_data):
        catalog_service.renumber_item(1, 7)

        assert db.session.query(LocationItem).filter_by(item_id=7).count() == 3
        assert db.session.query(OrderItem).filter_by(item_id=7).count() == 2

    def test_renumbering_onto_existing_key_is_rejected(self, sample_data):
        with pytest.raises(DuplicateKeyError):
            location_service.renumber_location(1, 2)
        assert location_service.get_location(1).vendor_name == "Vendor1"


class TestKeys:
    def test_duplicate_menu_entry(self, location, burger):
        location_service.add_menu_item(location_id=location.id, item_id=burger.id, availability="Y", quantity=1)
        with pytest.raises(DuplicateKeyError):
            location_service.add_menu_item(location_id=location.id, item_id=burger.id, availability="N", quantity=9)

    def test_duplicate_order_key(self, location, burger):
        order_service.place_order(location_id=location.id, order_id=10, lines=[(burger.id, 1)])
        with pytest.raises(DuplicateKeyError):
            order_service.place_order(location_id=location.id, order_id=10, lines=[(burger.id, 1)])

    def test_same_order_id_at_another_location_is_allowed(self, sample_data):
        order = order_service.place_order(location_id=2, order_id=1, lines=[(1, 4)])
        assert (order.id, order.location_id) == (1, 2)

    def test_repeated_item_in_one_order(self, location, burger):
        with pytest.raises(DuplicateKeyError):
            order_service.place_order(location_id=location.id, lines=[(burger.id, 1), (burger.id, 2)])

    def test_database_rejects_duplicate_composite_key(self, location, burger):
        location_service.add_menu_item(location_id=location.id, item_id=burger.id, availability="Y", quantity=1)
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("INSERT INTO location_items (location_id, item_id, availability, quantity) "
                     "VALUES (:loc, :item, 'Y', 3)"),
                {"loc": location.id, "item": burger.id},
            )
        db.session.rollback()


class TestCheckConstraints:
    def test_availability_outside_set(self, vendor):
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("INSERT INTO locations (availability, address, user_id) VALUES ('X', 'Somewhere', :uid)"),
                {"uid": vendor.id},
            )
        db.session.rollback()

    def test_role_outside_set(self, db_session):
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("INSERT INTO users (first_name, last_name, email, password_hash, role) "
                     "VALUES ('a', 'b', 'c@d.e', 'x', 'superuser')")
            )
        db.session.rollback()

    def test_order_status_outside_set(self, location):
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("INSERT INTO orders (id, location_id, status, time) "
                     "VALUES (1, :loc, 'Shipped', '2020-01-01 00:00:00')"),
                {"loc": location.id},
            )
        db.session.rollback()

    def test_negative_stock(self, location, burger):
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("INSERT INTO location_items (location_id, item_id, availability, quantity) "
                     "VALUES (:loc, :item, 'Y', -1)"),
                {"loc": location.id, "item": burger.id},
            )
        db.session.rollback()

    def test_zero_quantity_order_line(self, sample_data):
        fries = catalog_service.create_item("Fries")
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("INSERT INTO order_items (item_id, order_id, location_id, quantity) VALUES (:item, 1, 1, 0)"),
                {"item": fries.id},
            )
        db.session.rollback()


def test_users_table_keeps_no_plain_passwords(sample_data):
    for user in db.session.query(User).all():
        assert user.password_hash.startswith("$2")
    assert db.session.query(Item).count() == 1
