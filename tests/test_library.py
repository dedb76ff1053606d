def publish(client, admin_headers, **fields) -> int:
    body = {"title": "Winning Personal Statement", "type": "Personal Statement",
            "content": "From a small town to a research lab.", "category": "essays", "tags": ["stem"]}
    body.update(fields)
    created = client.post("/api/admin/library/documents", json=body, headers=admin_headers)
    assert created.status_code == 201
    doc_id = created.get_json()["id"]
    reviewed = client.post(f"/api/admin/library/documents/{doc_id}/review", headers=admin_headers,
                           json={"action": "approve", "quality_score": 8.5})
    assert reviewed.get_json()["status"] == "published"
    return doc_id


def test_unpublished_documents_are_hidden(client, admin_headers, student_headers) -> None:
    created = client.post("/api/admin/library/documents", headers=admin_headers,
                          json={"title": "Draft", "type": "CV", "content": "draft"})
    doc_id = created.get_json()["id"]
    assert client.get(f"/api/library/documents/{doc_id}", headers=student_headers).status_code == 404

    client.post(f"/api/admin/library/documents/{doc_id}/review", headers=admin_headers,
                json={"action": "reject", "notes": "Too short"})
    listed = client.get("/api/admin/library/documents?review_status=rejected", headers=admin_headers).get_json()
    assert [d["id"] for d in listed["documents"]] == [doc_id]
    assert listed["documents"][0]["review_notes"] == "Too short"


def test_browse_and_view_count(client, admin_headers, student_headers) -> None:
    doc_id = publish(client, admin_headers)
    publish(client, admin_headers, title="Other", tags=["arts"])

    page = client.get("/api/library/documents?tags=stem", headers=student_headers).get_json()
    assert [d["id"] for d in page["documents"]] == [doc_id]
    assert page["pagination"]["total"] == 1

    client.get(f"/api/library/documents/{doc_id}", headers=student_headers)
    again = client.get(f"/api/library/documents/{doc_id}", headers=student_headers).get_json()
    assert again["view_count"] == 3


def test_clone_creates_user_document(client, admin_headers, student_headers) -> None:
    doc_id = publish(client, admin_headers)
    resp = client.post(f"/api/library/documents/{doc_id}/clone", headers=student_headers)
    assert resp.status_code == 201
    copy = resp.get_json()["user_document"]
    assert copy["title"] == "Winning Personal Statement (Copy)"
    assert copy["type"] == "personal_statement"
    assert copy["description"] == "Cloned from library: Winning Personal Statement"
    assert copy["tags"] == ["stem", "cloned"]

    original = client.get(f"/api/library/documents/{doc_id}", headers=student_headers).get_json()
    assert original["clone_count"] == 1

    clones = client.get("/api/library/cloned", headers=student_headers).get_json()
    assert clones["pagination"]["total"] == 1
    clone_id = clones["documents"][0]["id"]
    detail = client.get(f"/api/library/cloned/{clone_id}", headers=student_headers).get_json()
    assert detail["access_count"] == 1
    assert detail["original_document"]["id"] == doc_id


def test_clone_rejections(client, admin_headers, student_headers) -> None:
    locked = publish(client, admin_headers, allow_cloning=False)
    assert client.post(f"/api/library/documents/{locked}/clone", headers=student_headers).status_code == 403

    odd = publish(client, admin_headers, type="Haiku")
    resp = client.post(f"/api/library/documents/{odd}/clone", headers=student_headers)
    assert resp.status_code == 400
    assert "Personal Statement" in resp.get_json()["supported_types"]


def test_rating_is_upserted_per_user(client, admin_headers) -> None:
    doc_id = publish(client, admin_headers)
    client.post(f"/api/library/documents/{doc_id}/rate", json={"rating": 5}, headers={"X-Demo-UID": "a"})
    client.post(f"/api/library/documents/{doc_id}/rate", json={"rating": 2}, headers={"X-Demo-UID": "b"})
    body = client.post(f"/api/library/documents/{doc_id}/rate", json={"rating": 4},
                       headers={"X-Demo-UID": "b"}).get_json()
    assert body["rating_count"] == 2
    assert body["average_rating"] == 4.5

    bad = client.post(f"/api/library/documents/{doc_id}/rate", json={"rating": 9}, headers={"X-Demo-UID": "a"})
    assert bad.status_code == 400
    assert bad.get_json()["details"][0]["field"] == "rating"


def test_user_document_versioning(client, student_headers) -> None:
    doc = client.post("/api/documents", headers=student_headers,
                      json={"title": "CV", "type": "cv", "content": "one two"}).get_json()
    assert doc["word_count"] == 2
    assert doc["version"] == 1
    updated = client.put(f"/api/documents/{doc['id']}", headers=student_headers,
                         json={"content": "one two three"}).get_json()
    assert updated["version"] == 2
    assert updated["word_count"] == 3

    client.delete(f"/api/documents/{doc['id']}", headers=student_headers)
    assert client.get(f"/api/documents/{doc['id']}", headers=student_headers).status_code == 404


def test_min_rating_filter(client, admin_headers) -> None:
    rated = publish(client, admin_headers)
    publish(client, admin_headers, title="Unrated")
    client.post(f"/api/library/documents/{rated}/rate", json={"rating": 5}, headers={"X-Demo-UID": "a"})

    top = client.get("/api/library/documents?min_rating=4").get_json()
    assert [d["id"] for d in top["documents"]] == [rated]

    unparsed = client.get("/api/library/documents?min_rating=abc")
    assert unparsed.status_code == 200
    assert unparsed.get_json()["pagination"]["total"] == 2
