from eddura.services.packages import compute_package_progress


def test_package_progress_counts_required_documents_only() -> None:
    documents = [
        {"type": "cv", "name": "CV", "status": "uploaded"},
        {"type": "transcript", "name": "Transcript", "status": "pending"},
        {"type": "essay", "name": "Essay", "status": "approved"},
        {"type": "portfolio", "name": "Portfolio", "status": "pending", "required": False},
    ]
    assert compute_package_progress(documents) == 67


def test_package_progress_empty_and_all_optional() -> None:
    assert compute_package_progress([]) == 0
    assert compute_package_progress([{"type": "cv", "name": "CV", "status": "approved", "required": False}]) == 0


def test_package_lifecycle(client, student_headers) -> None:
    interest = client.post("/api/user-interests", headers=student_headers,
                           json={"program_name": "MSc Data Science", "school_name": "ETH Zurich"})
    assert interest.status_code == 201
    interest_id = interest.get_json()["id"]

    body = {
        "interest_id": interest_id,
        "name": "ETH package",
        "type": "program",
        "documents": [{"type": "cv", "name": "CV", "status": "uploaded"},
                      {"type": "sop", "name": "SOP"}],
    }
    created = client.post("/api/application-packages", json=body, headers=student_headers)
    assert created.status_code == 201
    package = created.get_json()
    assert package["progress"] == 50
    assert package["is_ready"] is False

    duplicate = client.post("/api/application-packages", json=body, headers=student_headers)
    assert duplicate.status_code == 409
    assert duplicate.get_json()["package_id"] == package["id"]

    updated = client.put(f"/api/application-packages/{package['id']}", headers=student_headers, json={
        "documents": [{"type": "cv", "name": "CV", "status": "uploaded"},
                      {"type": "sop", "name": "SOP", "status": "reviewed"}],
        "application_status": "submitted",
    }).get_json()
    assert updated["progress"] == 100
    assert updated["is_ready"] is True
    assert updated["applied_at"] is not None


def test_package_requires_fields_and_known_interest(client, student_headers) -> None:
    resp = client.post("/api/application-packages", json={"name": "x"}, headers=student_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Missing required fields"

    resp = client.post("/api/application-packages", headers=student_headers,
                       json={"interest_id": 999, "name": "x", "type": "program"})
    assert resp.status_code == 404


def make_package(client, headers) -> int:
    interest_id = client.post("/api/user-interests", json={"program_name": "MPhil Economics"},
                              headers=headers).get_json()["id"]
    resp = client.post("/api/application-packages", headers=headers,
                       json={"interest_id": interest_id, "name": "Cambridge", "type": "program"})
    return resp.get_json()["id"]


def test_package_body_types_are_validated(client, student_headers) -> None:
    interest_id = client.post("/api/user-interests", json={"program_name": "MA History"},
                              headers=student_headers).get_json()["id"]
    resp = client.post("/api/application-packages", headers=student_headers,
                       json={"interest_id": interest_id, "name": "x", "type": "program", "documents": ["cv"]})
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "documents.0"

    resp = client.post("/api/user-interests", json={"program_id": "abc"}, headers=student_headers)
    assert resp.status_code == 400


def test_package_status_and_decision_values(client, student_headers) -> None:
    package_id = make_package(client, student_headers)
    url = f"/api/application-packages/{package_id}"

    for status in ("interview_scheduled", "decision_made"):
        resp = client.put(url, json={"application_status": status}, headers=student_headers)
        assert resp.get_json()["application_status"] == status
    assert client.put(url, json={"application_status": "decision_received"},
                      headers=student_headers).status_code == 400

    assert client.put(url, json={"decision": "deferred"}, headers=student_headers).status_code == 400
    decided = client.put(url, json={"decision": "waitlisted"}, headers=student_headers).get_json()
    assert decided["decision"] == "waitlisted"
    assert decided["decision_date"] is not None
