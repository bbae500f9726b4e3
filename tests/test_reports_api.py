import pytest


@pytest.fixture
def appointment(make_patient, book):
    patient = make_patient("Ana", "Petrova")
    return book(patient["id"], "09:00", "09:30").json()


def test_create_report(client, auth_headers, appointment, doctor):
    response = client.post(
        "/api/reports",
        json={
            "appointment_id": appointment["id"],
            "patient_name": "Ana Petrova",
            "diagnosis": "Seasonal allergy",
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["created_by"] == doctor.id
    assert body["appointment_date"] == "2025-03-10"
    assert body["appointment_time"] == "09:00:00"
    assert body["last_name"] == "Petrova"


def test_create_requires_appointment_and_name(client, auth_headers):
    response = client.post("/api/reports", json={"diagnosis": "x"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "appointment_id and patient_name are required"}


def test_create_for_missing_appointment(client, auth_headers):
    response = client.post(
        "/api/reports", json={"appointment_id": 42, "patient_name": "X"}, headers=auth_headers
    )

    assert response.status_code == 404


def test_one_report_per_appointment(client, auth_headers, appointment):
    payload = {"appointment_id": appointment["id"], "patient_name": "Ana Petrova"}
    assert client.post("/api/reports", json=payload, headers=auth_headers).status_code == 201

    response = client.post("/api/reports", json=payload, headers=auth_headers)

    assert response.status_code == 409


def test_update_keeps_name_and_replaces_clinical_fields(client, auth_headers, appointment):
    created = client.post(
        "/api/reports",
        json={
            "appointment_id": appointment["id"],
            "patient_name": "Ana Petrova",
            "diagnosis": "Flu",
            "treatment_plan": "Rest",
        },
        headers=auth_headers,
    ).json()

    response = client.put(
        f"/api/reports/{created['id']}", json={"diagnosis": "Cold"}, headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["patient_name"] == "Ana Petrova"
    assert body["diagnosis"] == "Cold"
    assert body["treatment_plan"] is None


def test_upsert_by_appointment(client, auth_headers, appointment):
    url = f"/api/reports/appointment/{appointment['id']}"

    created = client.put(url, json={"patient_name": "Ana Petrova", "diagnosis": "Flu"}, headers=auth_headers)
    updated = client.put(url, json={"diagnosis": "Cold"}, headers=auth_headers)

    assert created.status_code == 200
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]
    assert client.get(url, headers=auth_headers).json()["diagnosis"] == "Cold"


def test_upsert_for_missing_appointment(client, auth_headers):
    response = client.put(
        "/api/reports/appointment/77", json={"patient_name": "X"}, headers=auth_headers
    )

    assert response.status_code == 404


def test_list_filters_by_patient(client, auth_headers, appointment, make_patient, book):
    other = make_patient("Ivo", "Ivanov")
    other_appointment = book(other["id"], "10:00", "10:30").json()
    for appt, name in ((appointment, "Ana Petrova"), (other_appointment, "Ivo Ivanov")):
        client.post(
            "/api/reports",
            json={"appointment_id": appt["id"], "patient_name": name},
            headers=auth_headers,
        )

    everything = client.get("/api/reports", headers=auth_headers).json()
    only_ivo = client.get(
        "/api/reports", params={"patient_id": other["id"]}, headers=auth_headers
    ).json()

    assert len(everything) == 2
    assert [r["patient_name"] for r in only_ivo] == ["Ivo Ivanov"]


def test_delete_report(client, auth_headers, appointment):
    created = client.post(
        "/api/reports",
        json={"appointment_id": appointment["id"], "patient_name": "Ana Petrova"},
        headers=auth_headers,
    ).json()

    response = client.delete(f"/api/reports/{created['id']}", headers=auth_headers)

    assert response.json() == {"message": "Report deleted successfully"}
    assert client.get(f"/api/reports/{created['id']}", headers=auth_headers).status_code == 404
