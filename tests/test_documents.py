def _payload(**overrides):
    payload = {
        "title": "Photosynthesis",
        "content": "Plants convert light into chemical energy.",
        "type": "pdf",
        "fileName": "photosynthesis.pdf",
        "fileSize": 40960,
        "wordCount": 3200,
        "estimatedReadTime": 13,
        "chapters": [
            {"id": "ch-1", "title": "Light reactions", "startIndex": 0},
            {"id": "ch-2", "title": "Calvin cycle", "startIndex": 1800},
        ],
        "metadata": {"originalFileName": "photosynthesis.pdf", "category": "Biology"},
    }
    payload.update(overrides)
    return payload


class TestCreateDocument:
    def test_create_document(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        resp = client.post("/api/documents/", json=_payload(), headers=headers)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["title"] == "Photosynthesis"
        assert body["progress"] == 0
        assert body["chapters"][1] == {"id": "ch-2", "title": "Calvin cycle", "startIndex": 1800}
        assert body["metadata"]["category"] == "Biology"

    def test_invalid_type_rejected(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        resp = client.post("/api/documents/", json=_payload(type="docx"), headers=headers)
        assert resp.status_code == 400

    def test_negative_word_count_rejected(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        resp = client.post("/api/documents/", json=_payload(wordCount=-1), headers=headers)
        assert resp.status_code == 400

    def test_unauthenticated(self, client):
        assert client.post("/api/documents/", json=_payload()).status_code == 401


class TestListDocuments:
    def test_list_is_scoped_to_owner(self, client, make_user, make_document, auth_headers):
        owner, other = make_user(), make_user()
        make_document(owner, title="Mine")
        make_document(other, title="Not mine")

        resp = client.get("/api/documents/", headers=auth_headers(owner))
        assert resp.status_code == 200
        titles = [d["title"] for d in resp.json()["documents"]]
        assert titles == ["Mine"]
        assert resp.json()["pagination"]["total"] == 1

    def test_search_and_pagination(self, client, make_user, make_document, auth_headers):
        user = make_user()
        for i in range(3):
            make_document(user, title=f"Genetics part {i}")
        make_document(user, title="Ecology")

        headers = auth_headers(user)
        resp = client.get("/api/documents/?search=genetics&limit=2", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["documents"]) == 2
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    def test_unknown_sort_column_rejected(self, client, make_user, auth_headers):
        resp = client.get("/api/documents/?sortBy=content", headers=auth_headers(make_user()))
        assert resp.status_code == 400


class TestGetAndDeleteDocument:
    def test_get_document_includes_content(self, client, make_user, make_document, auth_headers):
        user = make_user()
        doc = make_document(user)
        resp = client.get(f"/api/documents/{doc.id}", headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.json()["content"] == doc.content

    def test_other_users_document_is_404(self, client, make_user, make_document, auth_headers):
        doc = make_document(make_user())
        resp = client.get(f"/api/documents/{doc.id}", headers=auth_headers(make_user()))
        assert resp.status_code == 404

    def test_delete_removes_sessions(self, client, make_user, make_document, auth_headers, db_session):
        from app.models.reading_session import ReadingSession

        user = make_user()
        doc = make_document(user)
        doc_id = doc.id
        headers = auth_headers(user)
        start = client.post("/api/reading-sessions", json={"documentId": doc_id, "action": "start"}, headers=headers)
        assert start.status_code == 200

        resp = client.delete(f"/api/documents/{doc_id}", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

        db_session.expire_all()
        assert db_session.query(ReadingSession).filter(ReadingSession.document_id == doc_id).count() == 0
        assert client.get(f"/api/documents/{doc_id}", headers=headers).status_code == 404


class TestUpdateDocument:
    def test_update_title_and_progress(self, client, make_user, make_document, auth_headers, db_session):
        from datetime import datetime, timedelta, timezone

        user = make_user()
        doc = make_document(user, updated_at=datetime.now(timezone.utc) - timedelta(days=3))
        resp = client.put(
            f"/api/documents/{doc.id}", json={"title": "The Cell, revised", "progress": 45},
            headers=auth_headers(user),
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["message"] == "Document updated successfully"
        assert body["document"]["title"] == "The Cell, revised"
        assert body["document"]["progress"] == 45

        db_session.refresh(doc)
        assert doc.progress == 45
        assert doc.content == "Cells are the basic unit of life."
        assert doc.updated_at.replace(tzinfo=timezone.utc) > datetime.now(timezone.utc) - timedelta(minutes=1)

    def test_progress_update_counts_toward_streak(self, client, make_user, make_document, auth_headers):
        user = make_user()
        doc = make_document(user)
        headers = auth_headers(user)
        assert client.put(f"/api/documents/{doc.id}", json={"progress": 10}, headers=headers).status_code == 200

        stats = client.get("/api/user/stats", headers=headers).json()["stats"]
        assert stats["readingStreak"]["currentStreak"] == 1

    def test_invalid_progress_rejected(self, client, make_user, make_document, auth_headers):
        user = make_user()
        doc = make_document(user)
        resp = client.put(f"/api/documents/{doc.id}", json={"progress": 101}, headers=auth_headers(user))
        assert resp.status_code == 400

    def test_other_users_document_is_404(self, client, make_user, make_document, auth_headers):
        doc = make_document(make_user())
        resp = client.put(f"/api/documents/{doc.id}", json={"title": "Mine now"}, headers=auth_headers(make_user()))
        assert resp.status_code == 404
