from decimal import Decimal

from conftest import API, book, set_status


async def test_calculate_quotes_without_booking(client, vehicle):
    response = await client.post(
        f"{API}/bookings/calculate",
        json={"vehicle_id": vehicle["id"], "start_date": "2024-06-01", "end_date": "2024-06-11"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["available"] is True
    assert data["quote"]["tier"] == "weekly"
    assert Decimal(data["quote"]["total_amount"]) == Decimal("2700")

    booked = await client.get(f"{API}/vehicles/{vehicle['id']}/booked-dates")
    assert booked.json() == []


async def test_calculate_reports_unavailable_dates(client, renter, vehicle):
    _, headers = renter
    await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")

    response = await client.post(
        f"{API}/bookings/calculate",
        json={"vehicle_id": vehicle["id"], "start_date": "2024-06-14", "end_date": "2024-06-20"},
    )

    data = response.json()
    assert data["available"] is False
    assert data["quote"] is None
    assert data["unavailable_reason"] == "Vehicle is not available for the selected dates"


async def test_create_then_fetch_round_trip(client, renter, vehicle):
    _, headers = renter

    created = await book(client, headers, vehicle["id"], "2024-06-01", "2024-07-06")
    assert created.status_code == 201
    booking = created.json()
    assert booking["status"] == "pending"
    assert booking["payment_status"] == "pending"
    assert Decimal(booking["total_amount"]) == Decimal("8500")

    fetched = await client.get(f"{API}/bookings/{booking['id']}", headers=headers)
    listed = await client.get(f"{API}/bookings/", headers=headers)

    assert fetched.status_code == 200
    assert listed.json()["total"] == 1
    for item in (fetched.json(), listed.json()["bookings"][0]):
        assert item["id"] == booking["id"]
        assert (item["start_date"], item["end_date"]) == ("2024-06-01", "2024-07-06")
        assert Decimal(item["total_amount"]) == Decimal("8500")
        assert item["status"] == "pending"
        assert item["vehicle"]["name"] == "Swift Dzire"
        assert item["renter"] is None


async def test_overlapping_booking_conflicts(client, renter, other_renter, vehicle):
    _, first = renter
    _, second = other_renter
    assert (await book(client, first, vehicle["id"], "2024-06-10", "2024-06-15")).status_code == 201

    rejected = await book(client, second, vehicle["id"], "2024-06-14", "2024-06-20")
    accepted = await book(client, second, vehicle["id"], "2024-06-16", "2024-06-20")

    assert rejected.status_code == 409
    assert rejected.json()["detail"] == "Vehicle is not available for the selected dates"
    assert accepted.status_code == 201


async def test_invalid_dates(client, renter, vehicle):
    _, headers = renter

    reversed_range = await book(client, headers, vehicle["id"], "2024-06-15", "2024-06-10")
    missing = await client.post(
        f"{API}/bookings/", json={"vehicle_id": vehicle["id"]}, headers=headers
    )

    assert reversed_range.status_code == 400
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Start date and end date are required"


async def test_owner_cannot_create_booking(client, owner, vehicle):
    _, headers = owner

    response = await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")

    assert response.status_code == 403


async def test_booking_requires_authentication(client, vehicle):
    response = await client.post(
        f"{API}/bookings/",
        json={"vehicle_id": vehicle["id"], "start_date": "2024-06-10", "end_date": "2024-06-15"},
    )

    assert response.status_code == 401


async def test_switched_off_vehicle_cannot_be_booked(client, owner, renter, vehicle):
    _, owner_headers = owner
    _, renter_headers = renter
    await client.patch(
        f"{API}/vehicles/{vehicle['id']}/availability",
        json={"availability": False},
        headers=owner_headers,
    )

    response = await book(client, renter_headers, vehicle["id"], "2024-06-10", "2024-06-15")

    assert response.status_code == 400


async def test_owner_confirms_then_completes(client, owner, renter, vehicle):
    _, owner_headers = owner
    _, renter_headers = renter
    booking = (await book(client, renter_headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()

    confirmed = await set_status(client, owner_headers, booking["id"], "confirmed")
    assert confirmed.status_code == 200
    assert confirmed.json() == {
        "id": booking["id"],
        "status": "confirmed",
        "payment_status": "pending",
        "message": "Booking confirmed",
    }

    completed = await set_status(client, owner_headers, booking["id"], "completed")
    assert completed.json()["status"] == "completed"

    detail = await client.get(f"{API}/bookings/{booking['id']}", headers=owner_headers)
    assert detail.json()["completed_at"] is not None


async def test_renter_cannot_confirm(client, renter, vehicle):
    _, headers = renter
    booking = (await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()

    response = await set_status(client, headers, booking["id"], "confirmed")

    assert response.status_code == 400
    assert response.json()["detail"] == (
        "Cannot change booking status from 'pending' to 'confirmed' as renter"
    )


async def test_renter_cancels_own_booking(client, renter, vehicle):
    _, headers = renter
    booking = (await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()

    response = await set_status(client, headers, booking["id"], "cancelled")

    assert response.status_code == 200
    detail = (await client.get(f"{API}/bookings/{booking['id']}", headers=headers)).json()
    assert detail["status"] == "cancelled"
    assert detail["cancelled_by"] == "renter"


async def test_cancelled_booking_is_final(client, owner, renter, vehicle):
    _, owner_headers = owner
    _, renter_headers = renter
    booking = (await book(client, renter_headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()
    await set_status(client, owner_headers, booking["id"], "cancelled")

    for target in ("pending", "confirmed", "completed", "cancelled"):
        response = await set_status(client, owner_headers, booking["id"], target)
        assert response.status_code == 400


async def test_stranger_cannot_update_status(client, renter, other_renter, vehicle):
    _, headers = renter
    _, stranger = other_renter
    booking = (await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()

    response = await set_status(client, stranger, booking["id"], "cancelled")

    assert response.status_code == 403
    assert response.json()["detail"] == "You are not authorized to update this booking"


async def test_unknown_status_value_rejected(client, renter, vehicle):
    _, headers = renter
    booking = (await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()

    response = await set_status(client, headers, booking["id"], "archived")

    assert response.status_code == 422


async def test_stranger_cannot_view_booking(client, renter, other_renter, vehicle):
    _, headers = renter
    _, stranger = other_renter
    booking = (await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()

    response = await client.get(f"{API}/bookings/{booking['id']}", headers=stranger)

    assert response.status_code == 403


async def test_owner_listing_includes_renter_and_filters(client, owner, renter, vehicle):
    _, owner_headers = owner
    _, renter_headers = renter
    first = (await book(client, renter_headers, vehicle["id"], "2024-06-10", "2024-06-15")).json()
    await book(client, renter_headers, vehicle["id"], "2024-08-01", "2024-08-03")
    await set_status(client, owner_headers, first["id"], "confirmed")

    listed = (await client.get(f"{API}/bookings/", headers=owner_headers)).json()
    assert listed["total"] == 2
    assert {b["renter"]["name"] for b in listed["bookings"]} == {"Priya Nair"}

    confirmed = await client.get(
        f"{API}/bookings/", params={"status": "confirmed"}, headers=owner_headers
    )
    assert [b["id"] for b in confirmed.json()["bookings"]] == [first["id"]]

    later = await client.get(
        f"{API}/bookings/", params={"start_date": "2024-07-01"}, headers=owner_headers
    )
    assert [b["start_date"] for b in later.json()["bookings"]] == ["2024-08-01"]

    earlier = await client.get(
        f"{API}/bookings/", params={"end_date": "2024-07-01"}, headers=owner_headers
    )
    assert [b["end_date"] for b in earlier.json()["bookings"]] == ["2024-06-15"]


async def test_listing_is_scoped_to_caller(client, renter, other_renter, vehicle):
    _, headers = renter
    _, other = other_renter
    await book(client, headers, vehicle["id"], "2024-06-10", "2024-06-15")

    response = await client.get(f"{API}/bookings/", headers=other)

    assert response.json()["total"] == 0
    assert response.json()["bookings"] == []


async def test_listing_pagination(client, renter, vehicle):
    _, headers = renter
    for day in (1, 4, 7):
        await book(client, headers, vehicle["id"], f"2024-06-{day:02d}", f"2024-06-{day + 1:02d}")

    response = await client.get(
        f"{API}/bookings/", params={"page": 2, "page_size": 2}, headers=headers
    )

    data = response.json()
    assert data["total"] == 3
    assert data["page"] == 2
    assert len(data["bookings"]) == 1
