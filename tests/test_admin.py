import io

from eddura.services.analytics import growth_rate
from eddura.services.importer import validate_csv_columns

CSV = """title,provider,deadline,value,currency,frequency,tags
Global Leaders Award,Open Society,2030-05-01,15000,USD,annual,leadership;international
Broken Row,,2030-05-01,abc,USD,weekly,
STEM Women Grant,Tech Fund,2030-09-30T00:00:00,5000,EUR,one-time,stem
"""


def test_growth_rate() -> None:
    assert growth_rate(10, 0) == 100.0
    assert growth_rate(0, 0) == 0
    assert growth_rate(15, 10) == 50.0
    assert growth_rate(5, 10) == -50.0


def test_validate_csv_columns() -> None:
    assert validate_csv_columns(["title", "provider", "deadline"]) == (True, [])
    assert validate_csv_columns(["title"]) == (False, ["provider", "deadline"])


def test_admin_routes_require_admin(client, student_headers) -> None:
    assert client.get("/api/admin/analytics", headers=student_headers).status_code == 403
    assert client.post("/api/admin/schools", json={"name": "X"}, headers=student_headers).status_code == 403


def test_csv_import_reports_row_errors(client, admin_headers) -> None:
    resp = client.post("/api/admin/scholarships/import", json={"csv": CSV}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["imported"] == 2
    assert len(body["errors"]) == 1
    row = body["errors"][0]
    assert row["row"] == 3
    assert "provider is required" in row["errors"]
    assert "invalid value: abc" in row["errors"]

    listed = client.get("/api/scholarships", headers=admin_headers).get_json()
    titles = {s["title"] for s in listed["scholarships"]}
    assert titles == {"Global Leaders Award", "STEM Women Grant"}


def test_csv_import_missing_columns(client, admin_headers) -> None:
    resp = client.post("/api/admin/scholarships/import", data="title,value\nA,1\n",
                       content_type="text/csv", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing required columns", "missing": ["provider", "deadline"]}


def test_catalog_crud(client, admin_headers) -> None:
    school = client.post("/api/admin/schools", json={"name": "Lakeside University", "country": "Kenya"},
                         headers=admin_headers)
    assert school.status_code == 201
    school_id = school.get_json()["id"]

    missing = client.post("/api/admin/programs", json={"school_id": 999, "name": "MSc"}, headers=admin_headers)
    assert missing.status_code == 404

    program = client.post("/api/admin/programs", headers=admin_headers,
                          json={"school_id": school_id, "name": "MSc Climate", "tuition_international": 20000})
    assert program.status_code == 201

    renamed = client.put(f"/api/admin/schools/{school_id}", json={"name": "Lakeside Univ."}, headers=admin_headers)
    assert renamed.get_json()["name"] == "Lakeside Univ."

    bad_date = client.post("/api/admin/scholarships", json={"title": "T", "deadline": "someday"},
                           headers=admin_headers)
    assert bad_date.status_code == 400

    stats = client.get("/api/admin/dashboard-stats", headers=admin_headers).get_json()
    assert stats["counts"]["schools"] == 1
    assert stats["top_schools"][0]["program_count"] == 1
    assert stats["top_programs"][0]["name"] == "MSc Climate"

    assert client.delete(f"/api/admin/schools/{school_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/schools/{school_id}", headers=admin_headers).status_code == 404
    assert client.delete("/api/admin/unicorns/1", headers=admin_headers).status_code == 404


def test_analytics_overview(client, admin_headers, student_headers) -> None:
    client.post("/api/analytics/pageview", json={"page": "/scholarships"}, headers=student_headers)
    session = client.post("/api/analytics/session", json={"action": "start", "session_id": "s-1"},
                          headers=student_headers)
    assert session.status_code == 200
    client.post("/api/analytics/event", json={"event_type": "click", "event_name": "apply"},
                headers=student_headers)

    body = client.get("/api/admin/analytics?range=7d", headers=admin_headers).get_json()
    assert body["range"] == "7d"
    overview = body["overview"]
    assert overview["total_users"] == 2
    assert overview["total_sessions"] == 1
    assert overview["total_page_views"] == 1
    assert overview["active_users"] == 1
    assert len(body["trends"]) == 6
    assert body["top_content"][0]["page"] == "/scholarships"


def test_user_role_management(client, admin_headers, student_headers) -> None:
    client.get("/api/profile", headers=student_headers)
    users = client.get("/api/admin/users?role=student", headers=admin_headers).get_json()
    assert [u["email"] for u in users["users"]] == ["student-1@example.com"]
    user_id = users["users"][0]["id"]

    bad = client.put(f"/api/admin/users/{user_id}/role", json={"role": "owner"}, headers=admin_headers)
    assert bad.status_code == 400
    ok = client.put(f"/api/admin/users/{user_id}/role", json={"role": "admin"}, headers=admin_headers)
    assert ok.get_json()["role"] == "admin"


def test_csv_upload_must_be_utf8(client, admin_headers) -> None:
    upload = {"file": (io.BytesIO("title,provider,deadline\nBourse Étoile,Fondation,2030-01-01\n".encode("latin-1")),
                       "scholarships.csv")}
    resp = client.post("/api/admin/scholarships/import", data=upload, content_type="multipart/form-data",
                       headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "CSV must be UTF-8"}


def test_csv_upload(client, admin_headers) -> None:
    upload = {"file": (io.BytesIO(CSV.encode("utf-8")), "scholarships.csv")}
    resp = client.post("/api/admin/scholarships/import", data=upload, content_type="multipart/form-data",
                       headers=admin_headers)
    assert resp.get_json()["imported"] == 2


def test_library_document_update(client, admin_headers) -> None:
    doc = client.post("/api/admin/library/documents", headers=admin_headers,
                      json={"title": "Sample CV", "type": "CV", "content": "one two"}).get_json()
    url = f"/api/admin/library/documents/{doc['id']}"

    assert client.put(url, json={"allow_cloning": "sometimes"}, headers=admin_headers).status_code == 400
    assert client.put(url, json={"status": "deleted"}, headers=admin_headers).status_code == 400

    updated = client.put(url, json={"content": "one two three", "status": "published"},
                         headers=admin_headers).get_json()
    assert updated["word_count"] == 3
    assert updated["status"] == "published"
    assert updated["published_at"] is not None
