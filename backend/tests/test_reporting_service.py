"""Reporting listings against the sample data set."""

from vendordb.services import catalog_service, location_service, order_service, reporting_service, seed_service


def test_show_order_sample(sample_data):
    rows = reporting_service.show_order()

    assert rows == [
        {
            "order_status": "Received",
            "time_received": "2020-01-31T23:59:59Z",
            "location_name": "Vendor1",
            "item": "Vegan Burger",
            "quantity": 2,
        },
        {
            "order_status": "Received",
            "time_received": "2020-02-02T23:59:59Z",
            "location_name": "Vendor1",
            "item": "Vegan Burger",
            "quantity": 3,
        },
    ]


def test_show_order_one_row_per_line(sample_data):
    fries = catalog_service.create_item("Fries")
    order_service.add_order_line(order_id=2, location_id=1, item_id=fries.id, quantity=1)
    order_service.place_order(location_id=3, lines=[(fries.id, 5)])

    rows = reporting_service.show_order()

    assert [(r["location_name"], r["item"], r["quantity"]) for r in rows] == [
        ("Vendor1", "Vegan Burger", 2),
        ("Vendor1", "Vegan Burger", 3),
        ("Vendor1", "Fries", 1),
        ("Vendor3", "Fries", 5),
    ]


def test_show_order_scopes_lines_by_location(sample_data):
    # order id 1 also exists at location 2; its line must not join to location 1's order
    order_service.place_order(location_id=2, order_id=1, lines=[(1, 9)])

    rows = reporting_service.show_order()

    assert [(r["location_name"], r["quantity"]) for r in rows] == [
        ("Vendor1", 2),
        ("Vendor2", 9),
        ("Vendor1", 3),
    ]


def test_show_location_sample(sample_data):
    rows = reporting_service.show_location()

    assert [row["vendor_name"] for row in rows] == ["Vendor4", "Vendor3", "Vendor2", "Vendor1"]
    vendor1 = rows[-1]
    assert vendor1["address"] == "95 Aurora Ave N, Seattle WA"
    assert vendor1["available"] == "Y"
    assert vendor1["lat"] == 47.60842
    assert vendor1["long"] == -122.332077
    assert vendor1["hours"] == "10am - 11pm"
    assert vendor1["phone"] == "206-234-5678"


def test_show_menu_sample(sample_data):
    rows = reporting_service.show_menu()

    assert rows == [
        {"vendor_name": "Vendor1", "item": "Vegan Burger", "quantity": 32, "availability": "Y"},
        {"vendor_name": "Vendor2", "item": "Vegan Burger", "quantity": 53, "availability": "Y"},
        {"vendor_name": "Vendor3", "item": "Vegan Burger", "quantity": 12, "availability": "Y"},
    ]


def test_show_menu_reflects_availability(sample_data):
    location_service.set_menu_availability(2, 1, "N")

    rows = reporting_service.show_menu()

    assert rows[1]["vendor_name"] == "Vendor2"
    assert rows[1]["availability"] == "N"


def test_show_log_sample(sample_data):
    rows = reporting_service.show_log()

    assert len(rows) == 4
    assert {row["change_type"] for row in rows} == {"LOCATION_ADD"}
    assert {row["location"] for row in rows} == {"Vendor1", "Vendor2", "Vendor3", "Vendor4"}
    for row in rows:
        assert row["original_availability"] is None
        assert row["new_availability"] == "Y"
        assert row["original_address"] is None
        assert row["item"] is None
        assert row["time"].endswith("Z")


def test_show_log_newest_first(sample_data):
    location_service.set_location_availability(3, "N")
    location_service.set_menu_availability(1, 1, "N")

    rows = reporting_service.show_log()

    assert len(rows) == 6
    assert rows[0]["change_type"] == "MENU_AVAILABILITY"
    assert rows[0]["location"] == "Vendor1"
    assert rows[0]["item"] == 1
    assert rows[1]["change_type"] == "LOCATION_AVAILABILITY"
    assert rows[1]["location"] == "Vendor3"
    assert (rows[1]["original_availability"], rows[1]["new_availability"]) == ("Y", "N")


def test_listings_are_recomputed(sample_data):
    before = reporting_service.show_location()
    location_service.update_location(4, vendor_name="Vendor0")

    after = reporting_service.show_location()

    assert before[0]["vendor_name"] == "Vendor4"
    assert [row["vendor_name"] for row in after] == ["Vendor3", "Vendor2", "Vendor1", "Vendor0"]


def test_seed_is_idempotent(sample_data):
    assert seed_service.seed_sample_data() is False
    assert len(reporting_service.show_location()) == 4


def test_empty_database(db_session):
    assert reporting_service.show_log() == []
    assert reporting_service.show_location() == []
    assert reporting_service.show_order() == []
    assert reporting_service.show_menu() == []
