from decimal import Decimal

from tintix.database import SessionLocal
from tintix.models.film import FilmInventory
from tintix.models.installer_time_entry import InstallerTimeEntry
from tintix.models.inventory_transaction import InventoryTransaction
from tintix.models.job_dimension import JobDimension
from tintix.models.job_installer import JobInstaller
from tintix.models.redo_entry import RedoEntry


def _payload(film_id, installer_id="inst@example.com", job_number="J-100", **overrides):
    body = {
        "jobNumber": job_number,
        "date": "2026-03-05T10:00:00",
        "vehicleYear": "2021",
        "vehicleMake": "Honda",
        "vehicleModel": "Civic",
        "startTime": "2026-03-05T10:00:00",
        "endTime": "2026-03-05T12:30:00",
        "installers": [{"installerId": installer_id, "timeVariance": -10}],
        "dimensions": [
            {"lengthInches": 24, "widthInches": 60, "filmId": film_id, "description": "rear"},
            {"lengthInches": 12, "widthInches": 36, "filmId": film_id},
        ],
        "redoEntries": [{"part": "quarter", "lengthInches": 12, "widthInches": 12, "filmId": film_id}],
        "timeEntries": [{"installerId": installer_id, "windowsCompleted": 7, "timeMinutes": 150}],
    }
    body.update(overrides)
    return body


def _setup(make_user, make_film):
    make_user("boss@example.com", role="manager")
    make_user("inst@example.com", role="installer", hourly_rate="20")
    return make_film(cost_per_sqft="2.50", stock="100")


def _count(model, **filters) -> int:
    db = SessionLocal()
    try:
        return db.query(model).filter_by(**filters).count()
    finally:
        db.close()


def test_create_job_entry_derives_sqft_costs_and_duration(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)

    r = client.post("/job-entries", json=_payload(film.id), headers=auth_headers("inst@example.com"))
    assert r.status_code == 201, r.text
    body = r.json()

    # 24x60 = 10 sqft, 12x36 = 3 sqft
    dims = body["dimensions"]
    assert [d["sqft"] for d in dims] == [10.0, 3.0]
    for d in dims:
        assert d["sqft"] == round(d["lengthInches"] * d["widthInches"] / 144, 4)
    assert [d["filmCost"] for d in dims] == [25.0, 7.5]
    assert body["totalSqft"] == 13.0
    assert body["filmCost"] == 32.5
    assert body["durationMinutes"] == 150

    redo = body["redoEntries"][0]
    assert redo["installerId"] == "inst@example.com"
    assert redo["sqft"] == 1.0
    assert redo["materialCost"] == 2.5

    assert body["installers"][0]["installer"]["id"] == "inst@example.com"
    assert body["installers"][0]["timeVariance"] == -10


def test_create_job_entry_deducts_film_stock(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)

    r = client.post("/job-entries", json=_payload(film.id), headers=auth_headers("inst@example.com"))
    assert r.status_code == 201, r.text

    db = SessionLocal()
    try:
        inv = db.query(FilmInventory).filter_by(film_id=film.id).one()
        tx = db.query(InventoryTransaction).filter_by(film_id=film.id).one()
    finally:
        db.close()

    assert inv.current_stock == Decimal("87.00")
    assert tx.type == "deduction"
    assert tx.job_entry_id == r.json()["id"]


def test_film_price_change_keeps_stored_snapshot(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    created = client.post("/job-entries", json=_payload(film.id), headers=auth_headers("inst@example.com")).json()

    r = client.put(f"/films/{film.id}", json={"costPerSqft": 9.99}, headers=auth_headers("boss@example.com"))
    assert r.status_code == 200, r.text

    again = client.get(f"/job-entries/{created['id']}", headers=auth_headers("boss@example.com")).json()
    assert again["filmCost"] == 32.5
    assert [d["filmCost"] for d in again["dimensions"]] == [25.0, 7.5]


def test_job_requires_an_installer(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    r = client.post(
        "/job-entries",
        json=_payload(film.id, installers=[]),
        headers=auth_headers("boss@example.com"),
    )
    assert r.status_code == 422


def test_unknown_installer_is_rejected(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    r = client.post(
        "/job-entries",
        json=_payload(film.id, installer_id="nobody@example.com"),
        headers=auth_headers("boss@example.com"),
    )
    assert r.status_code == 400
    assert "nobody@example.com" in r.text


def test_duplicate_job_number_conflicts(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    headers = auth_headers("boss@example.com")
    assert client.post("/job-entries", json=_payload(film.id), headers=headers).status_code == 201

    r = client.post("/job-entries", json=_payload(film.id), headers=headers)
    assert r.status_code == 409
    assert _count(InventoryTransaction) == 1


def test_delete_cascades_children_and_returns_film(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    job_id = client.post(
        "/job-entries", json=_payload(film.id), headers=auth_headers("boss@example.com")
    ).json()["id"]

    assert client.delete(f"/job-entries/{job_id}", headers=auth_headers("inst@example.com")).status_code == 403

    r = client.delete(f"/job-entries/{job_id}", headers=auth_headers("boss@example.com"))
    assert r.status_code == 204

    for model in (JobDimension, JobInstaller, RedoEntry, InstallerTimeEntry):
        assert _count(model, job_entry_id=job_id) == 0

    db = SessionLocal()
    try:
        inv = db.query(FilmInventory).filter_by(film_id=film.id).one()
        ledger = db.query(InventoryTransaction).order_by(InventoryTransaction.id).all()
    finally:
        db.close()

    assert inv.current_stock == Decimal("100.00")
    assert [t.type for t in ledger] == ["deduction", "addition"]
    assert all(t.job_entry_id is None for t in ledger)

    assert client.get(f"/job-entries/{job_id}", headers=auth_headers("boss@example.com")).status_code == 404


def test_update_replaces_supplied_children_only(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    headers = auth_headers("boss@example.com")
    job_id = client.post("/job-entries", json=_payload(film.id), headers=headers).json()["id"]

    r = client.put(
        f"/job-entries/{job_id}",
        json={
            "notes": "re-measured",
            "dimensions": [{"lengthInches": 36, "widthInches": 48, "filmId": film.id}],
        },
        headers=headers,
    )
    assert r.status_code == 200, r.text
    body = r.json()

    assert body["notes"] == "re-measured"
    assert body["totalSqft"] == 12.0
    assert body["filmCost"] == 30.0
    assert len(body["redoEntries"]) == 1
    assert len(body["timeEntries"]) == 1
    assert len(body["installers"]) == 1

    db = SessionLocal()
    try:
        inv = db.query(FilmInventory).filter_by(film_id=film.id).one()
    finally:
        db.close()
    assert inv.current_stock == Decimal("88.00")


def test_clearing_dimensions_resets_derived_totals(client, auth_headers, make_user, make_film):
    make_user("boss@example.com", role="manager")
    make_user("inst@example.com", role="installer", hourly_rate="20")
    film = make_film(cost_per_sqft="2.00", stock="100")
    headers = auth_headers("boss@example.com")

    created = client.post(
        "/job-entries",
        json=_payload(
            film.id,
            dimensions=[{"lengthInches": 120, "widthInches": 120, "filmId": film.id}],
            redoEntries=[],
        ),
        headers=headers,
    ).json()
    assert created["totalSqft"] == 100.0
    assert created["filmCost"] == 200.0

    r = client.put(f"/job-entries/{created['id']}", json={"dimensions": []}, headers=headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["dimensions"] == []
    assert body["totalSqft"] is None
    assert body["filmCost"] is None

    summary = client.get(f"/job-entries/{created['id']}/cost-summary", headers=headers).json()
    assert summary["filmCost"] == 0.0
    assert summary["totalCost"] == summary["totalLaborCost"]

    db = SessionLocal()
    try:
        inv = db.query(FilmInventory).filter_by(film_id=film.id).one()
    finally:
        db.close()
    assert inv.current_stock == Decimal("100.00")


def test_clearing_dimensions_keeps_explicit_totals(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    headers = auth_headers("boss@example.com")
    job_id = client.post("/job-entries", json=_payload(film.id), headers=headers).json()["id"]

    r = client.put(
        f"/job-entries/{job_id}",
        json={"dimensions": [], "totalSqft": 40, "filmCost": 90},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["totalSqft"] == 40.0
    assert r.json()["filmCost"] == 90.0


def test_redo_with_only_one_measurement_is_rejected(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    r = client.post(
        "/job-entries",
        json=_payload(film.id, redoEntries=[{"part": "rollups", "lengthInches": 20}]),
        headers=auth_headers("boss@example.com"),
    )
    assert r.status_code == 422
    assert _count(RedoEntry) == 0


def test_installer_only_sees_assigned_jobs(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    make_user("other@example.com", role="installer")
    boss = auth_headers("boss@example.com")

    mine = client.post("/job-entries", json=_payload(film.id, job_number="J-1"), headers=boss).json()
    theirs = client.post(
        "/job-entries",
        json=_payload(film.id, installer_id="other@example.com", job_number="J-2"),
        headers=boss,
    ).json()

    inst = auth_headers("inst@example.com")
    listing = client.get("/job-entries", headers=inst)
    assert listing.status_code == 200
    assert [j["id"] for j in listing.json()] == [mine["id"]]

    assert client.get(f"/job-entries/{theirs['id']}", headers=inst).status_code == 403
    assert client.get(f"/job-entries/{mine['id']}", headers=inst).status_code == 200
    assert client.get("/job-entries?installerId=other@example.com", headers=inst).status_code == 403

    assert len(client.get("/job-entries", headers=boss).json()) == 2


def test_list_filters_by_date_and_pages(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    headers = auth_headers("boss@example.com")
    for n, day in enumerate(["2026-03-01", "2026-03-05", "2026-03-09"]):
        body = _payload(film.id, job_number=f"J-{n}", date=f"{day}T09:00:00")
        assert client.post("/job-entries", json=body, headers=headers).status_code == 201

    r = client.get("/job-entries?dateFrom=2026-03-02&dateTo=2026-03-09", headers=headers)
    assert [j["jobNumber"] for j in r.json()] == ["J-2", "J-1"]

    r = client.get("/job-entries?limit=1&offset=1", headers=headers)
    assert [j["jobNumber"] for j in r.json()] == ["J-1"]

    assert client.get("/job-entries?dateFrom=yesterday", headers=headers).status_code == 400


def test_cost_summary_endpoint(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    headers = auth_headers("boss@example.com")
    body = _payload(
        film.id,
        totalSqft=100,
        filmCost=200,
        redoEntries=[{"part": "windshield", "lengthInches": 24, "widthInches": 60}],
        timeEntries=[{"installerId": "inst@example.com", "windowsCompleted": 7, "timeMinutes": 90}],
    )
    job_id = client.post("/job-entries", json=body, headers=headers).json()["id"]

    r = client.get(f"/job-entries/{job_id}/cost-summary", headers=headers)
    assert r.status_code == 200, r.text
    summary = r.json()
    assert summary["jobEntryId"] == job_id
    assert summary["totalLaborCost"] == 30.0
    assert summary["filmCost"] == 200.0
    assert summary["redoMaterialCost"] == 20.0
    assert summary["totalMaterialCost"] == 220.0
    assert summary["totalCost"] == 250.0

    labor = client.get(f"/job-entries/{job_id}/labor-costs", headers=headers).json()
    assert labor[0]["installer"]["id"] == "inst@example.com"
    assert labor[0]["timeMinutes"] == 90
    assert labor[0]["hourlyRate"] == 20.0
    assert labor[0]["laborCost"] == 30.0


def test_data_entry_cannot_view_costs(client, auth_headers, make_user, make_film):
    film = _setup(make_user, make_film)
    make_user("clerk@example.com", role="data_entry")
    job_id = client.post(
        "/job-entries", json=_payload(film.id), headers=auth_headers("clerk@example.com")
    ).json()["id"]

    r = client.get(f"/job-entries/{job_id}/cost-summary", headers=auth_headers("clerk@example.com"))
    assert r.status_code == 403
