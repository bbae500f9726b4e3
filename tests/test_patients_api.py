from types import SimpleNamespace

from clinic_api.domain.patients.schemas import PatientResponse


def test_create_requires_both_names(client, auth_headers):
    response = client.post("/api/patients", json={"first_name": "Ana"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "First name and last name are required"}


def test_create_and_fetch(client, auth_headers, make_patient):
    created = make_patient("Ana", "Petrova", phone="+359 888 123", dob="1990-05-01T00:00:00.000Z")

    assert created["dob"] == "1990-05-01"
    fetched = client.get(f"/api/patients/{created['id']}", headers=auth_headers)
    assert fetched.status_code == 200
    assert fetched.json()["phone"] == "+359 888 123"


def test_invalid_dob_is_rejected(client, auth_headers):
    response = client.post(
        "/api/patients",
        json={"first_name": "Ana", "last_name": "Petrova", "dob": "01.05.1990"},
        headers=auth_headers,
    )

    assert response.status_code == 400


def test_search_is_case_insensitive_and_ordered(client, auth_headers, make_patient):
    make_patient("Maria", "Zlatkova")
    make_patient("Ivo", "Ivanov", phone="0888-555")
    make_patient("Anna", "Ivanova")

    names = client.get("/api/patients", headers=auth_headers).json()
    assert [p["last_name"] for p in names] == ["Ivanov", "Ivanova", "Zlatkova"]

    found = client.get("/api/patients", params={"search": "IVAN"}, headers=auth_headers).json()
    assert [p["first_name"] for p in found] == ["Ivo", "Anna"]

    by_phone = client.get("/api/patients", params={"search": "555"}, headers=auth_headers).json()
    assert [p["first_name"] for p in by_phone] == ["Ivo"]


def test_put_replaces_all_fields(client, auth_headers, make_patient):
    created = make_patient("Ana", "Petrova", phone="123", notes="allergic to latex")

    response = client.put(
        f"/api/patients/{created['id']}",
        json={"first_name": "Anna", "last_name": "Petrova"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["first_name"] == "Anna"
    assert body["phone"] is None
    assert body["notes"] is None


def test_put_unknown_patient(client, auth_headers):
    response = client.put(
        "/api/patients/999", json={"first_name": "A", "last_name": "B"}, headers=auth_headers
    )

    assert response.status_code == 404


def test_delete_refused_while_appointments_exist(client, auth_headers, make_patient, book):
    patient = make_patient()
    book(patient["id"], "09:00", "09:30")

    response = client.delete(f"/api/patients/{patient['id']}", headers=auth_headers)

    assert response.status_code == 400
    assert "existing appointments" in response.json()["error"]


def test_delete_patient(client, auth_headers, make_patient):
    patient = make_patient()

    response = client.delete(f"/api/patients/{patient['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Patient deleted successfully"
    assert client.get(f"/api/patients/{patient['id']}", headers=auth_headers).status_code == 404


def test_response_schema_reads_orm_attributes():
    row = SimpleNamespace(
        id=7,
        first_name="Ana",
        last_name="Petrova",
        phone=None,
        dob="1990-05-01",
        notes="allergic to latex",
        created_at=None,
        updated_at=None,
    )

    patient = PatientResponse.model_validate(row)

    assert PatientResponse.model_config["from_attributes"] is True
    assert (patient.id, patient.last_name, patient.dob) == (7, "Petrova", "1990-05-01")
