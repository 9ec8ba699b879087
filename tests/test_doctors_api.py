"""Tests for the doctor directory endpoints."""

from conftest import auth, next_weekday

from medconnect.domain.doctors.availability import default_timings
from medconnect.models import DoctorProfile, User


class TestListDoctors:
    """Tests for GET /api/doctors."""

    def test_empty_directory(self, client):
        response = client.get("/api/doctors")

        assert response.status_code == 200
        assert response.json() == []

    def test_filters_by_specialization_and_name(self, client, create_doctor):
        create_doctor(name="Dr. Asha Rao", email="asha@example.com", specialization="Cardiology")
        create_doctor(name="Dr. Vikram Shah", email="vikram@example.com", specialization="Dermatology")
        create_doctor(name="Dr. Meera Rao", email="meera@example.com", specialization="Dermatology")

        derm = client.get("/api/doctors", params={"specialization": "Dermatology"}).json()
        assert {d["name"] for d in derm} == {"Dr. Vikram Shah", "Dr. Meera Rao"}
        assert all(d["specialization"] == "Dermatology" for d in derm)

        raos = client.get("/api/doctors", params={"search": "rAo"}).json()
        assert {d["name"] for d in raos} == {"Dr. Asha Rao", "Dr. Meera Rao"}

        both = client.get(
            "/api/doctors", params={"specialization": "Dermatology", "search": "rao"}
        ).json()
        assert [d["name"] for d in both] == ["Dr. Meera Rao"]

    def test_specialization_is_exact_match(self, client, create_doctor):
        create_doctor(specialization="Cardiology")
        assert client.get("/api/doctors", params={"specialization": "cardio"}).json() == []

    def test_search_treats_wildcards_literally(self, client, create_doctor):
        create_doctor(name="Dr. Asha Rao")
        assert client.get("/api/doctors", params={"search": "%"}).json() == []

    def test_limit(self, client, create_doctor):
        for i in range(3):
            create_doctor(name=f"Dr. Number {i}", email=f"doc{i}@example.com")

        response = client.get("/api/doctors", params={"limit": 2})
        assert len(response.json()) == 2

        assert client.get("/api/doctors", params={"limit": 0}).status_code == 422

    def test_listing_joins_account_name_and_email(self, client, doctor):
        profile, _ = doctor
        listed = client.get("/api/doctors").json()[0]

        assert listed["id"] == profile["id"]
        assert listed["email"] == "asha@example.com"
        assert listed["user"] == {
            "id": profile["userId"],
            "name": "Dr. Asha Rao",
            "email": "asha@example.com",
        }


class TestGetDoctor:
    """Tests for GET /api/doctors/{id} and /api/doctors/me."""

    def test_get_by_id(self, client, doctor):
        profile, _ = doctor
        response = client.get(f"/api/doctors/{profile['id']}")

        assert response.status_code == 200
        assert response.json()["specialization"] == "Cardiology"

    def test_unknown_id_is_not_found(self, client):
        response = client.get("/api/doctors/9999")

        assert response.status_code == 404
        assert response.json() == {"success": False, "kind": "not_found", "message": "Doctor not found"}

    def test_me_returns_own_profile(self, client, doctor):
        profile, headers = doctor
        response = client.get("/api/doctors/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == profile["id"]

    def test_me_is_doctor_only(self, client, patient):
        _, headers = patient
        assert client.get("/api/doctors/me", headers=headers).status_code == 403


class TestCreateDoctor:
    """Tests for POST /api/doctors."""

    def test_admin_creates_account_and_profile_with_defaults(self, client, admin_headers, login):
        response = client.post(
            "/api/doctors",
            json={
                "name": "Dr. Kiran Iyer",
                "email": "kiran@example.com",
                "password": "doctor123",
                "specialization": "Neurology",
                "experience": 12,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["fees"] == 500
        assert body["experience"] == 12
        assert body["rating"] == 0
        assert body["numReviews"] == 0
        assert body["address"] == "MedConnect Medical Center, New Delhi"
        assert [t["day"] for t in body["timings"]][0] == "Monday"
        assert len(body["timings"]) == 7

        token = login("kiran@example.com", "doctor123")
        account = client.get("/api/users/profile", headers=auth(token)).json()
        assert account["role"] == "doctor"
        assert account["isDoctor"] is True

    def test_missing_specialization_writes_nothing(self, client, admin_headers, db_session):
        response = client.post(
            "/api/doctors",
            json={"name": "Dr. Missing Field", "email": "missing@example.com", "password": "doctor123"},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "invalid_input"
        assert db_session.query(User).filter(User.email == "missing@example.com").first() is None
        assert db_session.query(DoctorProfile).count() == 0

    def test_blank_specialization_writes_nothing(self, client, admin_headers, db_session):
        response = client.post(
            "/api/doctors",
            json={
                "name": "Dr. Blank",
                "email": "blank@example.com",
                "password": "doctor123",
                "specialization": "   ",
            },
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert db_session.query(User).filter(User.email == "blank@example.com").first() is None

    def test_admin_missing_account_fields(self, client, admin_headers):
        response = client.post(
            "/api/doctors", json={"specialization": "Neurology"}, headers=admin_headers
        )

        assert response.status_code == 422
        assert "email" in response.json()["message"]

    def test_duplicate_email_is_conflict_and_leaves_no_profile(
        self, client, admin_headers, register, db_session
    ):
        register(email="taken@example.com")
        response = client.post(
            "/api/doctors",
            json={
                "name": "Dr. Dup",
                "email": "taken@example.com",
                "password": "doctor123",
                "specialization": "Neurology",
            },
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert db_session.query(DoctorProfile).count() == 0

    def test_invalid_timings_rejected(self, client, admin_headers):
        response = client.post(
            "/api/doctors",
            json={
                "name": "Dr. Six Days",
                "email": "six@example.com",
                "password": "doctor123",
                "specialization": "Neurology",
                "timings": default_timings()[:6],
            },
            headers=admin_headers,
        )

        assert response.status_code == 422

    def test_blank_name_writes_nothing(self, client, admin_headers, db_session):
        response = client.post(
            "/api/doctors",
            json={
                "name": "   ",
                "email": "noname@example.com",
                "password": "doctor123",
                "specialization": "Neurology",
            },
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "invalid_input"
        assert db_session.query(User).filter(User.email == "noname@example.com").first() is None

    def test_negative_fees_rejected(self, client, admin_headers):
        response = client.post(
            "/api/doctors",
            json={
                "name": "Dr. Negative",
                "email": "neg@example.com",
                "password": "doctor123",
                "specialization": "Neurology",
                "fees": -1,
            },
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_patient_cannot_create(self, client, patient):
        _, headers = patient
        response = client.post(
            "/api/doctors", json={"specialization": "Neurology"}, headers=headers
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "forbidden"

    def test_unauthenticated_cannot_create(self, client):
        response = client.post("/api/doctors", json={"specialization": "Neurology"})
        assert response.status_code == 401

    def test_doctor_cannot_create_second_profile(self, client, doctor):
        _, headers = doctor
        response = client.post(
            "/api/doctors", json={"specialization": "Neurology"}, headers=headers
        )
        assert response.status_code == 409

    def test_doctor_without_profile_creates_own(self, client, admin_headers, db_session, login):
        # A doctor account whose profile was never created
        from medconnect.models import Role
        from medconnect.security import hash_password

        db_session.add(
            User(
                name="Dr. Solo",
                email="solo@example.com",
                password_hash=hash_password("doctor123"),
                role=Role.DOCTOR,
            )
        )
        db_session.commit()
        headers = auth(login("solo@example.com", "doctor123"))

        rejected = client.post(
            "/api/doctors",
            json={"specialization": "ENT", "email": "x@example.com"},
            headers=headers,
        )
        assert rejected.status_code == 422

        response = client.post(
            "/api/doctors", json={"specialization": "ENT", "fees": 0}, headers=headers
        )
        assert response.status_code == 201
        assert response.json()["name"] == "Dr. Solo"
        assert response.json()["fees"] == 0


class TestUpdateDoctor:
    """Tests for PUT /api/doctors/{id}."""

    def test_owner_updates_only_sent_fields(self, client, doctor):
        profile, headers = doctor
        response = client.put(
            f"/api/doctors/{profile['id']}", json={"bio": "Heart specialist"}, headers=headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["bio"] == "Heart specialist"
        assert body["specialization"] == "Cardiology"
        assert body["fees"] == 500

    def test_zero_and_empty_values_are_applied(self, client, doctor):
        profile, headers = doctor
        response = client.put(
            f"/api/doctors/{profile['id']}",
            json={"fees": 0, "experience": 0, "address": ""},
            headers=headers,
        )

        body = response.json()
        assert body["fees"] == 0
        assert body["experience"] == 0
        assert body["address"] == ""

    def test_null_clears_optional_text(self, client, doctor):
        profile, headers = doctor
        client.put(f"/api/doctors/{profile['id']}", json={"bio": "Hello"}, headers=headers)
        response = client.put(f"/api/doctors/{profile['id']}", json={"bio": None}, headers=headers)

        assert response.json()["bio"] is None

    def test_null_on_required_field_is_invalid_input(self, client, doctor):
        profile, headers = doctor
        response = client.put(
            f"/api/doctors/{profile['id']}", json={"specialization": None}, headers=headers
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "invalid_input"

    def test_update_timings(self, client, doctor):
        profile, headers = doctor
        timings = default_timings()
        timings[5]["isAvailable"] = True
        response = client.put(
            f"/api/doctors/{profile['id']}", json={"timings": timings}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["timings"][5]["isAvailable"] is True

    def test_other_doctor_is_forbidden(self, client, doctor, create_doctor):
        profile, _ = doctor
        _, other_headers = create_doctor(name="Dr. Other", email="other@example.com")

        response = client.put(
            f"/api/doctors/{profile['id']}", json={"bio": "hijack"}, headers=other_headers
        )
        assert response.status_code == 403

    def test_admin_may_update(self, client, doctor, admin_headers):
        profile, _ = doctor
        response = client.put(
            f"/api/doctors/{profile['id']}", json={"fees": 800}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["fees"] == 800

    def test_name_renames_the_doctor_account(self, client, doctor, admin_headers):
        profile, doctor_headers = doctor
        response = client.put(
            f"/api/doctors/{profile['id']}", json={"name": "Dr. Renamed"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Dr. Renamed"
        assert response.json()["user"]["name"] == "Dr. Renamed"
        account = client.get("/api/users/profile", headers=doctor_headers).json()
        assert account["name"] == "Dr. Renamed"

    def test_blank_or_null_name_is_invalid_input(self, client, doctor):
        profile, headers = doctor
        path = f"/api/doctors/{profile['id']}"

        assert client.put(path, json={"name": "   "}, headers=headers).status_code == 422
        assert client.put(path, json={"name": None}, headers=headers).status_code == 422
        assert client.get(path).json()["name"] == "Dr. Asha Rao"

    def test_unknown_doctor_is_not_found(self, client, admin_headers):
        response = client.put("/api/doctors/9999", json={"fees": 800}, headers=admin_headers)
        assert response.status_code == 404


class TestOpenSlots:
    """Tests for GET /api/doctors/{id}/slots."""

    def test_lists_slots_for_working_day(self, client, doctor):
        profile, _ = doctor
        monday = next_weekday(0)
        response = client.get(f"/api/doctors/{profile['id']}/slots", params={"date": monday.isoformat()})

        assert response.status_code == 200
        body = response.json()
        assert body["day"] == "Monday"
        assert body["isAvailable"] is True
        assert body["slots"][0] == "9:00 AM"
        assert body["slots"][-1] == "4:30 PM"
        assert len(body["slots"]) == 16

    def test_day_off_has_no_slots(self, client, doctor):
        profile, _ = doctor
        sunday = next_weekday(6)
        body = client.get(
            f"/api/doctors/{profile['id']}/slots", params={"date": sunday.isoformat()}
        ).json()

        assert body["isAvailable"] is False
        assert body["slots"] == []

    def test_booked_slot_is_removed(self, client, doctor, patient):
        profile, _ = doctor
        _, patient_headers = patient
        monday = next_weekday(0)
        client.post(
            "/api/appointments",
            json={"doctorId": profile["id"], "appointmentDate": monday.isoformat(), "timeSlot": "10:00 AM"},
            headers=patient_headers,
        )

        slots = client.get(
            f"/api/doctors/{profile['id']}/slots", params={"date": monday.isoformat()}
        ).json()["slots"]
        assert "10:00 AM" not in slots
        assert "10:30 AM" in slots

    def test_bad_date_is_invalid_input(self, client, doctor):
        profile, _ = doctor
        response = client.get(f"/api/doctors/{profile['id']}/slots", params={"date": "tomorrow"})
        assert response.status_code == 422
