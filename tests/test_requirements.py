from types import SimpleNamespace

import pytest

from eddura.errors import Forbidden, NotFound, ValidationFailed
from eddura.models import db, Application, RequirementsTemplate, User
from eddura.services import requirements as reqs


def req(status="pending", required=True, optional=False, order=0, name="Item"):
    return SimpleNamespace(status=status, is_required=required, is_optional=optional, order=order, name=name)


def make_application(name="MSc Application"):
    user = User(uid="req-user", email="req@example.com")
    db.session.add(user)
    db.session.flush()
    application = Application(user_id=user.id, name=name, status="draft", progress=0)
    db.session.add(application)
    db.session.commit()
    return application


def test_validate_requirement_type_specific_fields() -> None:
    errors = reqs.validate_requirement({"name": "Fee", "requirement_type": "fee", "category": "financial"})
    assert errors == [{"field": "application_fee_amount", "message": "Fee amount is required for fee requirements"}]

    errors = reqs.validate_requirement({"name": "", "requirement_type": "document", "category": "academic"})
    fields = {e["field"] for e in errors}
    assert fields == {"name", "document_type"}


def test_validate_requirement_rejects_unknown_values_and_negatives() -> None:
    errors = reqs.validate_requirement({
        "name": "Essay", "requirement_type": "essay", "category": "misc", "word_limit": -1,
    })
    fields = [e["field"] for e in errors]
    assert "requirement_type" in fields
    assert "category" in fields
    assert "word_limit" in fields


def test_calculate_progress_counts_waived_as_complete() -> None:
    items = [
        req("completed"),
        req("waived"),
        req("pending"),
        req("in_progress", required=False, optional=True),
    ]
    progress = reqs.calculate_progress(items)
    assert progress == {
        "total": 4,
        "completed": 2,
        "required": 3,
        "required_completed": 2,
        "optional": 1,
        "optional_completed": 0,
        "percentage": 50,
    }
    assert not reqs.is_ready_to_submit(progress)


def test_progress_rounds_half_up_and_handles_empty() -> None:
    items = [req("completed"), req("pending"), req("pending"), req("pending"),
             req("pending"), req("pending"), req("pending"), req("pending")]
    assert reqs.calculate_progress(items)["percentage"] == 13  # 12.5
    assert reqs.calculate_progress([])["percentage"] == 0


def test_ready_to_submit_requires_at_least_one_required_item() -> None:
    assert not reqs.is_ready_to_submit(reqs.calculate_progress([]))
    only_optional = [req("completed", required=False, optional=True)]
    assert not reqs.is_ready_to_submit(reqs.calculate_progress(only_optional))
    assert reqs.is_ready_to_submit(reqs.calculate_progress([req("completed"), req("not_applicable")]))


def test_needing_attention_sorted_by_order() -> None:
    items = [req("pending", order=3, name="c"), req("completed", order=1, name="a"),
             req("in_progress", order=2, name="b"), req("pending", required=False, order=0, name="x")]
    assert [r.name for r in reqs.needing_attention(items)] == ["b", "c"]


def test_create_requirement_and_progress_updates(ctx) -> None:
    application = make_application()
    first = reqs.create_requirement(application, {
        "name": "Transcript", "requirement_type": "document", "category": "academic",
        "document_type": "transcript", "order": 1,
    })
    reqs.create_requirement(application, {
        "name": "Fee", "requirement_type": "fee", "category": "financial", "application_fee_amount": 50,
    })
    assert application.progress == 0
    assert application.status == "draft"

    reqs.update_requirement(first, {"status": "completed"})
    assert first.submitted_at is not None
    assert first.verified_at is not None
    assert application.progress == 50
    assert application.status == "in_progress"

    with pytest.raises(ValidationFailed):
        reqs.create_requirement(application, {"name": "Bad", "requirement_type": "fee", "category": "financial"})


def test_summary_groups_by_category_and_type(ctx) -> None:
    application = make_application()
    reqs.create_requirement(application, {"name": "CV", "requirement_type": "document", "category": "professional",
                                          "document_type": "cv"})
    reqs.create_requirement(application, {"name": "IELTS", "requirement_type": "test_score",
                                          "category": "academic", "test_type": "ielts"})
    summary = reqs.summarize(application, list(application.requirements))
    assert summary["application_name"] == "MSc Application"
    assert summary["by_category"]["professional"]["total"] == 1
    assert summary["by_type"]["test_score"]["total"] == 1
    assert summary["by_type"]["fee"]["total"] == 0
    assert set(summary["by_category"]) == set(reqs.CATEGORIES)


def test_bulk_update_without_changes_is_not_found(ctx) -> None:
    application = make_application()
    item = reqs.create_requirement(application, {"name": "Interview", "requirement_type": "interview",
                                                 "category": "personal", "interview_type": "virtual"})
    assert reqs.bulk_update(application, {item.id}, {"status": "completed"}) == 1
    with pytest.raises(NotFound):
        reqs.bulk_update(application, {item.id}, {"status": "completed"})
    with pytest.raises(NotFound):
        reqs.bulk_update(application, {9999}, {"status": "waived"})


def test_system_templates_are_seeded_and_protected(ctx) -> None:
    system = RequirementsTemplate.query.filter_by(is_system_template=True).all()
    assert len(system) == len(reqs.SYSTEM_TEMPLATES)
    with pytest.raises(Forbidden):
        reqs.delete_template(system[0])
    with pytest.raises(Forbidden):
        reqs.update_template(system[0], {"name": "Renamed"})


def test_apply_template_copies_requirements_and_counts_usage(ctx) -> None:
    application = make_application()
    template = RequirementsTemplate.query.filter_by(is_system_template=True).first()
    created = reqs.apply_template(template, application)
    assert len(created) == len(template.requirements)
    assert all(r.status == "pending" for r in created)
    assert template.usage_count == 1
    assert reqs.popular_templates()[0].id == template.id


def test_custom_template_lifecycle(ctx) -> None:
    template = reqs.create_template({
        "name": "Art School", "category": "custom", "description": "Portfolio heavy",
        "requirements": [{"name": "Portfolio", "requirement_type": "document", "category": "academic",
                          "document_type": "portfolio"}],
    })
    assert [t.id for t in reqs.search_templates("portfolio")] == [template.id]
    stats = reqs.template_statistics()
    assert stats["custom"] == 1
    assert stats["by_category"]["custom"] == 1

    with pytest.raises(ValidationFailed):
        reqs.create_template({"name": "Broken", "category": "custom",
                              "requirements": [{"name": "x", "requirement_type": "fee", "category": "financial"}]})

    reqs.delete_template(template)
    assert reqs.template_statistics()["custom"] == 0


def test_requirement_routes(client, student_headers) -> None:
    created = client.post("/api/applications", json={"name": "Fulbright"}, headers=student_headers)
    assert created.status_code == 201
    app_id = created.get_json()["id"]

    resp = client.post(f"/api/applications/{app_id}/requirements", headers=student_headers,
                       json={"name": "Fee", "requirement_type": "fee", "category": "financial"})
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "application_fee_amount"

    resp = client.post(f"/api/applications/{app_id}/requirements", headers=student_headers,
                       json={"name": "Essay", "requirement_type": "document", "category": "personal",
                             "document_type": "personal_statement"})
    assert resp.status_code == 201
    rid = resp.get_json()["id"]

    resp = client.put(f"/api/applications/{app_id}/requirements/{rid}", headers=student_headers,
                      json={"status": "completed"})
    assert resp.get_json()["status"] == "completed"

    ready = client.get(f"/api/applications/{app_id}/requirements/ready", headers=student_headers).get_json()
    assert ready["ready"] is True
    assert ready["progress"]["percentage"] == 100

    # another user cannot see it
    other = client.get(f"/api/applications/{app_id}/requirements", headers={"X-Demo-UID": "someone-else"})
    assert other.status_code == 404


def test_bulk_update_validates_each_requirement(ctx) -> None:
    application = make_application()
    item = reqs.create_requirement(application, {"name": "Transcript", "requirement_type": "document",
                                                 "category": "academic", "document_type": "transcript"})
    with pytest.raises(ValidationFailed) as exc:
        reqs.bulk_update(application, {item.id}, {"requirement_type": "bogus", "word_limit": -5, "name": ""})
    fields = {d["field"] for d in exc.value.details}
    assert {"requirement_type", "word_limit", "name"} <= fields
    assert all(d["requirement_id"] == item.id for d in exc.value.details)

    db.session.refresh(item)
    assert (item.requirement_type, item.word_limit, item.name) == ("document", None, "Transcript")


def test_requirement_routes_reject_wrong_types(client, student_headers) -> None:
    app_id = client.post("/api/applications", json={"name": "DAAD"}, headers=student_headers).get_json()["id"]
    url = f"/api/applications/{app_id}/requirements"
    base = {"name": "Essay", "requirement_type": "document", "category": "personal",
            "document_type": "personal_statement"}

    resp = client.post(url, json={**base, "word_limit": "abc"}, headers=student_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_failed"
    assert resp.get_json()["details"][0]["field"] == "word_limit"

    resp = client.post(url, json={**base, "name": 5}, headers=student_headers)
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "name"

    rid = client.post(url, json=base, headers=student_headers).get_json()["id"]
    resp = client.put(f"{url}/{rid}", json={"max_file_size": "big"}, headers=student_headers)
    assert resp.status_code == 400

    resp = client.post(f"{url}/bulk", headers=student_headers,
                       json={"requirement_ids": [rid], "updates": {"word_limit": "abc"}})
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "updates.word_limit"

    resp = client.post(f"{url}/bulk", headers=student_headers,
                       json={"requirement_ids": [rid], "updates": {"requirement_type": "bogus", "word_limit": -5}})
    assert resp.status_code == 400
    saved = client.get(url, headers=student_headers).get_json()["requirements"][0]
    assert saved["requirement_type"] == "document"
    assert saved["word_limit"] is None


def test_template_routes(client, student_headers) -> None:
    listed = client.get("/api/requirements-templates?is_system=true").get_json()["templates"]
    assert len(listed) == len(reqs.SYSTEM_TEMPLATES)
    system_id = listed[0]["id"]

    body = {"name": "Lab Rotation", "category": "custom",
            "requirements": [{"name": "Research Proposal", "requirement_type": "document",
                              "category": "academic", "document_type": "other", "word_limit": 800}]}
    created = client.post("/api/requirements-templates", json=body, headers=student_headers)
    assert created.status_code == 201
    template_id = created.get_json()["id"]

    stranger = {"X-Demo-UID": "student-2"}
    resp = client.put(f"/api/requirements-templates/{template_id}", json={"name": "Mine now"}, headers=stranger)
    assert resp.status_code == 403
    assert client.delete(f"/api/requirements-templates/{template_id}", headers=stranger).status_code == 403

    renamed = client.put(f"/api/requirements-templates/{template_id}", json={"name": "Lab Rotations"},
                         headers=student_headers)
    assert renamed.get_json()["name"] == "Lab Rotations"
    assert client.put(f"/api/requirements-templates/{system_id}", json={"name": "Mine"},
                      headers=student_headers).status_code == 403

    bad = client.post("/api/requirements-templates", headers=student_headers,
                      json={**body, "requirements": [{"name": "Fee", "application_fee_amount": "fifty"}]})
    assert bad.status_code == 400
    assert client.get("/api/requirements-templates/search").status_code == 400

    app_id = client.post("/api/applications", json={"name": "PhD"}, headers=student_headers).get_json()["id"]
    applied = client.post(f"/api/applications/{app_id}/apply-template", json={"template_id": template_id},
                          headers=student_headers)
    assert applied.status_code == 201
    assert [r["name"] for r in applied.get_json()["requirements"]] == ["Research Proposal"]
    assert applied.get_json()["requirements"][0]["word_limit"] == 800
    assert client.get(f"/api/requirements-templates/{template_id}").get_json()["usage_count"] == 1
    missing = client.post(f"/api/applications/{app_id}/apply-template", json={"template_id": 999},
                          headers=student_headers)
    assert missing.status_code == 404

    assert client.delete(f"/api/requirements-templates/{template_id}", headers=student_headers).status_code == 200
