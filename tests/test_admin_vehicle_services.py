"""Service tests for the vehicles page: listing, owners, pricing and booking a car."""

import asyncio

import pytest

from app.custom_error import ServerError, VehicleNotFoundError
from app.models.vehicle_models import VehiclePricingUpdate, VehicleSort
from app.services.admin.admin_vehicle_services import AdminVehicleService, pricing_for_type, resolve_pricing

CUSTOMERS = [
    {"id": "c1", "fullName": "Noura Hamad", "email": "noura@example.com"},
    {"id": "c2", "customerId": "CUST-2", "fullName": "Sami Fares", "phoneNumber": "0561112222"},
]

VEHICLES = [
    {"id": "v1", "brand": "Toyota", "carType": "Executive", "city": "Dubai", "color": "Black", "customerId": "c1", "createdAt": "2026-10-01T00:00:00Z"},
    {"id": "v2", "brand": "Tesla", "carType": "Electric", "city": "Abu Dhabi", "color": "White", "customerId": "CUST-2", "baseFare": 12, "pricePerKm": "1.5", "createdAt": "2026-10-05T00:00:00Z"},
    {"id": "v3", "brand": "Kia", "city": "Sharjah", "registration": "SHJ-77", "createdAt": "2026-09-01T00:00:00Z"},
]


class TestPricing:
    def test_type_defaults(self):
        assert pricing_for_type("Hala Max") == (18.0, 4.0)
        assert pricing_for_type("Spaceship") == (10.0, 2.5)
        assert pricing_for_type(None) == (10.0, 2.5)

    def test_stored_pricing_wins(self):
        assert resolve_pricing({"carType": "Executive", "baseFare": "20", "pricePerKm": None}) == (20.0, 3.5, True)
        assert resolve_pricing({"carType": "Executive"}) == (18.0, 3.5, False)


class TestAdminVehicleService:
    @pytest.fixture
    def service(self, fake_supabase):
        fake_supabase.tables["customer"] = [dict(row) for row in CUSTOMERS]
        fake_supabase.tables["customer_cars"] = [dict(row) for row in VEHICLES]
        return AdminVehicleService(fake_supabase)

    def test_list_vehicles_with_owners(self, service):
        result = asyncio.run(service.list_vehicles())
        vehicles = {v.id: v for v in result.vehicles}

        assert [v.id for v in result.vehicles] == ["v2", "v1", "v3"]
        assert result.total == 3
        assert result.categories == ["All", "Electric", "Executive", "Unknown"]
        assert vehicles["v1"].owner_name == "Noura Hamad"
        assert vehicles["v1"].owner_contact == "noura@example.com"
        assert vehicles["v2"].owner_name == "Sami Fares"
        assert vehicles["v2"].owner_contact == "0561112222"
        assert (vehicles["v2"].base_fare, vehicles["v2"].price_per_km, vehicles["v2"].custom_pricing) == (12.0, 1.5, True)
        assert (vehicles["v1"].base_fare, vehicles["v1"].price_per_km, vehicles["v1"].custom_pricing) == (18.0, 3.5, False)
        assert vehicles["v3"].car_type == "Unknown"
        assert vehicles["v3"].plate == "SHJ-77"
        assert vehicles["v3"].owner_name is None

    def test_search_category_and_owner_filters(self, service):
        assert [v.id for v in asyncio.run(service.list_vehicles(search="SAMI")).vehicles] == ["v2"]
        assert [v.id for v in asyncio.run(service.list_vehicles(search=" sharjah ")).vehicles] == ["v3"]
        assert [v.id for v in asyncio.run(service.list_vehicles(category="Executive")).vehicles] == ["v1"]
        assert [v.id for v in asyncio.run(service.list_vehicles(customer_id="c1")).vehicles] == ["v1"]

        # categories describe every car, not only the filtered ones
        assert asyncio.run(service.list_vehicles(category="Executive")).categories == ["All", "Electric", "Executive", "Unknown"]

    def test_sort_by_price_per_km(self, service):
        ascending = asyncio.run(service.list_vehicles(sort=VehicleSort.PRICE_ASC))
        descending = asyncio.run(service.list_vehicles(sort=VehicleSort.PRICE_DESC))
        assert [v.id for v in ascending.vehicles] == ["v2", "v3", "v1"]
        assert [v.id for v in descending.vehicles] == ["v1", "v3", "v2"]

    def test_update_pricing(self, service, fake_supabase):
        updated = asyncio.run(service.update_pricing("v3", VehiclePricingUpdate(base_fare=9, price_per_km=2)))

        assert (updated.base_fare, updated.price_per_km, updated.custom_pricing) == (9.0, 2.0, True)
        stored = {row["id"]: row for row in fake_supabase.tables["customer_cars"]}
        assert stored["v3"]["baseFare"] == 9.0
        assert stored["v3"]["pricePerKm"] == 2.0

        with pytest.raises(VehicleNotFoundError):
            asyncio.run(service.update_pricing("nope", VehiclePricingUpdate(base_fare=1, price_per_km=1)))

    def test_fare_estimate(self, service):
        assert asyncio.run(service.get_fare_estimate("v1", 10)).total == 53.0
        assert asyncio.run(service.get_fare_estimate("v3")).total == 22.5
        with pytest.raises(VehicleNotFoundError):
            asyncio.run(service.get_fare_estimate("nope"))

    def test_create_booking_writes_pending_booking(self, service, fake_supabase):
        created = asyncio.run(service.create_booking("v2", 4))

        assert created.fare.total == 18.0
        booking = fake_supabase.tables["BOOKINGS"][0]
        assert created.booking_id == booking["id"]
        assert booking["status"] == "pending"
        assert booking["vehicleId"] == "v2"
        assert booking["customerId"] == "CUST-2"
        assert booking["distanceKm"] == 4
        assert booking["totalFare"] == booking["amount"] == 18.0
        assert booking["createdAt"]

    def test_create_booking_for_unknown_vehicle(self, service, fake_supabase):
        with pytest.raises(VehicleNotFoundError):
            asyncio.run(service.create_booking("nope"))
        assert fake_supabase.tables.get("BOOKINGS", []) == []

    def test_delete_vehicle(self, service, fake_supabase):
        assert asyncio.run(service.delete_vehicle("v1")) is True
        assert [row["id"] for row in fake_supabase.tables["customer_cars"]] == ["v2", "v3"]
        with pytest.raises(VehicleNotFoundError):
            asyncio.run(service.delete_vehicle("v1"))

    def test_list_failure_is_wrapped(self, service, fake_supabase):
        fake_supabase.fail_tables.add("customer_cars")
        with pytest.raises(ServerError):
            asyncio.run(service.list_vehicles())
