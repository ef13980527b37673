# tests/test_appointments_routes.py

from datetime import date, datetime, timedelta

import pytest
from fastapi import HTTPException
from sqlmodel import select

from barbershop.models import Appointment, User
from barbershop.routers.appointments_routes import _commit_appointment

from conftest import register_and_login, upcoming

BARBER = "barber@shop.com"
MONDAY = 1


@pytest.fixture
def day(client, barber_headers):
    body = {"days": [{
        "weekday": MONDAY,
        "active": True,
        "intervals": [{"start_time": "09:00", "end_time": "18:00"}],
    }]}
    r = client.put("/barbers/me/availability/weekly", json=body, headers=barber_headers)
    assert r.status_code == 200, r.text
    return upcoming(MONDAY)


def at(day: date, hhmm: str) -> str:
    return f"{day.isoformat()}T{hhmm}:00"


def book(client, headers, day, hhmm, service="Barba & Cabelo"):
    return client.post(f"/barbers/{BARBER}/appointments", headers=headers,
                       json={"starts_at": at(day, hhmm), "service": service, "phone": "11999999999"})


def starts(client, day, service="Barba"):
    r = client.get(f"/barbers/{BARBER}/availability", params={"date": day.isoformat(), "service": service})
    return r.json()["available_starts"]


def test_client_books_an_open_slot(client, client_headers, day):
    r = book(client, client_headers, day, "10:00")
    assert r.status_code == 201, r.text

    body = r.json()
    assert body["status"] == "PENDING"
    assert body["client_email"] == "client@mail.com"
    assert body["client_name"] == "Maria"
    assert body["barber_email"] == BARBER

    available = starts(client, day)
    assert "09:30" in available
    assert "10:00" not in available and "10:30" not in available
    assert "11:00" in available


def test_same_slot_cannot_be_booked_twice(client, client_headers, day):
    assert book(client, client_headers, day, "10:00").status_code == 201
    assert book(client, client_headers, day, "10:00").status_code == 409


def test_duplicate_live_start_is_a_conflict_at_commit(session):
    start = datetime(2030, 1, 7, 10, 0)

    def row(status="PENDING"):
        return Appointment(starts_at=start, barber_email=BARBER, client_email="a@mail.com",
                           service="Barba", status=status)

    _commit_appointment(session, row())

    # inserted without going through slot validation
    with pytest.raises(HTTPException) as exc:
        _commit_appointment(session, row())
    assert exc.value.status_code == 409

    # the session was rolled back and is still usable; canceled rows never hold the start
    canceled = _commit_appointment(session, row(status="CANCELED"))
    assert canceled.id is not None
    assert len(session.exec(select(Appointment)).all()) == 2


def test_overlapping_booking_is_rejected(client, client_headers, day):
    assert book(client, client_headers, day, "10:00").status_code == 201
    assert book(client, client_headers, day, "10:30", service="Barba").status_code == 409
    assert book(client, client_headers, day, "09:30").status_code == 409


def test_back_to_back_bookings(client, client_headers, day):
    assert book(client, client_headers, day, "10:00").status_code == 201
    assert book(client, client_headers, day, "09:30", service="Barba").status_code == 201
    assert book(client, client_headers, day, "11:00", service="Barba").status_code == 201


def test_booking_in_the_past(client, client_headers, day):
    past = date.today() - timedelta(days=3)
    assert book(client, client_headers, past, "10:00").status_code == 422


def test_booking_outside_business_hours(client, client_headers, barber_headers, day):
    client.put("/barbers/me/exceptions", headers=barber_headers, json={
        "date": day.isoformat(), "mode": "CUSTOM",
        "intervals": [{"start_time": "21:30", "end_time": "23:00"}],
    })
    assert book(client, client_headers, day, "21:30", service="Barba").status_code == 422


def test_start_must_be_on_the_minute(client, client_headers, day):
    r = client.post(f"/barbers/{BARBER}/appointments", headers=client_headers,
                    json={"starts_at": f"{day.isoformat()}T10:00:45", "service": "Barba"})
    assert r.status_code == 422
    assert "10:00" in starts(client, day)


def test_booking_outside_barber_windows(client, client_headers, day):
    assert book(client, client_headers, day, "18:00", service="Barba").status_code == 409
    assert book(client, client_headers, day, "17:30").status_code == 409
    assert book(client, client_headers, day, "10:15", service="Barba").status_code == 409


def test_booking_on_day_off(client, client_headers, barber_headers, day):
    client.put("/barbers/me/exceptions", headers=barber_headers,
               json={"date": day.isoformat(), "mode": "FULL_DAY"})
    assert book(client, client_headers, day, "10:00").status_code == 409


def test_booking_unknown_barber(client, client_headers, day):
    r = client.post("/barbers/ghost@shop.com/appointments", headers=client_headers,
                    json={"starts_at": at(day, "10:00"), "service": "Barba"})
    assert r.status_code == 404


def test_deactivated_barber_is_not_bookable(client, client_headers, session, day):
    barber = session.exec(select(User).where(User.email == BARBER)).one()
    barber.is_active = False
    session.add(barber)
    session.commit()

    assert book(client, client_headers, day, "10:00").status_code == 404

    r = client.get(f"/barbers/{BARBER}/availability", params={"date": day.isoformat(), "service": "Barba"})
    assert r.status_code == 404
    assert client.get("/barbers/available", params={"date": day.isoformat()}).json() == []


def test_barbers_cannot_use_client_booking(client, barber_headers, day):
    assert book(client, barber_headers, day, "10:00").status_code == 403


def test_barber_books_for_a_client(client, barber_headers, day):
    r = client.post("/appointments", headers=barber_headers, json={
        "starts_at": at(day, "15:00"),
        "client_email": "walkin@mail.com",
        "client_name": "Walk In",
        "service": "Barba",
    })
    assert r.status_code == 201, r.text
    assert r.json()["barber_email"] == BARBER


def test_admin_books_for_a_barber(client, admin_headers, day):
    payload = {"starts_at": at(day, "15:00"), "client_email": "walkin@mail.com", "service": "Barba"}

    r = client.post("/appointments", headers=admin_headers, json=payload)
    assert r.status_code == 422

    r = client.post("/appointments", headers=admin_headers, json={**payload, "barber_email": BARBER})
    assert r.status_code == 201, r.text


def test_catalog_service_is_linked(client, admin_headers, client_headers, day):
    r = client.post("/services", headers=admin_headers,
                    json={"name": "Pigmentação", "price": 120, "duration_minutes": 90})
    assert r.status_code == 201, r.text
    service_id = r.json()["id"]

    r = book(client, client_headers, day, "09:00", service="pigmentação")
    assert r.status_code == 201, r.text
    assert r.json()["service"] == "Pigmentação"
    assert r.json()["service_id"] == service_id

    assert starts(client, day)[0] == "10:30"


def test_inactive_catalog_service_cannot_be_booked(client, admin_headers, client_headers, day):
    r = client.post("/services", headers=admin_headers,
                    json={"name": "Relaxamento", "price": 80, "duration_minutes": 60, "is_active": False})
    assert r.status_code == 201

    assert book(client, client_headers, day, "10:00", service="Relaxamento").status_code == 422


def test_edit_keeps_own_slot_available(client, client_headers, day):
    appt = book(client, client_headers, day, "10:00").json()

    # 10:30 overlaps only the appointment itself
    r = client.patch(f"/appointments/{appt['id']}", headers=client_headers,
                     json={"starts_at": at(day, "10:30")})
    assert r.status_code == 200, r.text
    assert r.json()["starts_at"] == at(day, "10:30")

    available = starts(client, day)
    assert "10:00" in available
    assert "10:30" not in available and "11:00" not in available


def test_edit_into_someone_else_is_rejected(client, client_headers, day):
    first = book(client, client_headers, day, "10:00").json()
    assert book(client, client_headers, day, "14:00").status_code == 201

    r = client.patch(f"/appointments/{first['id']}", headers=client_headers,
                     json={"starts_at": at(day, "13:30")})
    assert r.status_code == 409


def test_edit_by_stranger_is_forbidden(client, client_headers, day):
    appt = book(client, client_headers, day, "10:00").json()
    stranger = register_and_login(client, "stranger@mail.com", "client")

    r = client.patch(f"/appointments/{appt['id']}", headers=stranger, json={"client_name": "X"})
    assert r.status_code == 403


def test_cancel_frees_the_slot(client, client_headers, day):
    appt = book(client, client_headers, day, "10:00").json()

    r = client.patch(f"/appointments/{appt['id']}/cancel", headers=client_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "CANCELED"
    assert "10:00" in starts(client, day)

    r = client.patch(f"/appointments/{appt['id']}/cancel", headers=client_headers)
    assert r.status_code == 409

    assert book(client, client_headers, day, "10:00").status_code == 201


def test_cancel_missing_appointment(client, client_headers):
    assert client.patch("/appointments/999/cancel", headers=client_headers).status_code == 404


def test_mark_done(client, client_headers, barber_headers, day):
    appt = book(client, client_headers, day, "10:00").json()

    assert client.patch(f"/appointments/{appt['id']}/done", headers=client_headers).status_code == 403

    r = client.patch(f"/appointments/{appt['id']}/done", headers=barber_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "DONE"
    # done appointments still hold their time
    assert "10:00" not in starts(client, day)

    r = client.patch(f"/appointments/{appt['id']}", headers=client_headers, json={"starts_at": at(day, "15:00")})
    assert r.status_code == 409


def test_canceled_cannot_be_completed(client, client_headers, barber_headers, day):
    appt = book(client, client_headers, day, "10:00").json()
    client.patch(f"/appointments/{appt['id']}/cancel", headers=barber_headers)

    assert client.patch(f"/appointments/{appt['id']}/done", headers=barber_headers).status_code == 409


def test_listing_appointments(client, client_headers, barber_headers, day):
    first = book(client, client_headers, day, "10:00").json()
    book(client, client_headers, day, "14:00")
    client.patch(f"/appointments/{first['id']}/cancel", headers=client_headers)

    r = client.get("/clients/me/appointments", headers=client_headers)
    assert [a["starts_at"] for a in r.json()] == [at(day, "14:00")]

    r = client.get("/barbers/me/appointments", headers=barber_headers,
                   params={"status": "all", "on_date": day.isoformat()})
    assert [a["status"] for a in r.json()] == ["CANCELED", "PENDING"]

    r = client.get("/barbers/me/appointments", headers=barber_headers, params={"status": "booked"})
    assert r.status_code == 422
