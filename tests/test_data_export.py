"""Tests for the one-time data export download flow."""

from datetime import datetime, timedelta, timezone

URL = "/api/user/export-data"


def _prepare(client, headers):
    resp = client.post(URL, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_export_downloads_once(client, make_user, make_document, auth_headers):
    user = make_user(full_name="Ada Lovelace")
    make_document(user, title="Notes on the Engine", progress=40)
    headers = auth_headers(user)

    prepared = _prepare(client, headers)
    assert prepared["success"] is True
    assert prepared["downloadUrl"].endswith(f"/api/user/export-data?token={prepared['token']}")

    resp = client.get(URL, params={"token": prepared["token"]}, headers=headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    disposition = resp.headers["content-disposition"]
    assert "ChapterFlux-Data-Export-Ada-Lovelace" in disposition
    assert disposition.endswith('.pdf"')
    assert resp.headers["cache-control"] == "no-store"
    assert resp.content.startswith(b"%PDF")

    again = client.get(URL, params={"token": prepared["token"]}, headers=headers)
    assert again.status_code == 404


def test_new_export_replaces_pending_one(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    first = _prepare(client, headers)["token"]
    second = _prepare(client, headers)["token"]

    assert client.get(URL, params={"token": first}, headers=headers).status_code == 404
    assert client.get(URL, params={"token": second}, headers=headers).status_code == 200


def test_token_belongs_to_its_user(client, make_user, auth_headers):
    token = _prepare(client, auth_headers(make_user()))["token"]
    resp = client.get(URL, params={"token": token}, headers=auth_headers(make_user()))
    assert resp.status_code == 404


def test_expired_token_is_gone_then_unknown(client, make_user, auth_headers, db_session):
    from app.models.data_export import DataExport

    user = make_user()
    headers = auth_headers(user)
    token = _prepare(client, headers)["token"]

    export = db_session.query(DataExport).filter(DataExport.token == token).one()
    export.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    db_session.commit()

    assert client.get(URL, params={"token": token}, headers=headers).status_code == 410
    assert client.get(URL, params={"token": token}, headers=headers).status_code == 404


def test_purge_removes_only_expired_exports(client, make_user, auth_headers, db_session):
    from app.models.data_export import DataExport
    from app.services.data_export import purge_expired_exports

    stale_user, fresh_user = make_user(), make_user()
    stale = _prepare(client, auth_headers(stale_user))["token"]
    fresh = _prepare(client, auth_headers(fresh_user))["token"]

    export = db_session.query(DataExport).filter(DataExport.token == stale).one()
    export.expires_at = datetime.now(timezone.utc) - timedelta(hours=1)
    db_session.commit()

    assert purge_expired_exports() >= 1

    db_session.expire_all()
    remaining = {e.token for e in db_session.query(DataExport).all()}
    assert stale not in remaining
    assert fresh in remaining


def test_download_requires_token(client, make_user, auth_headers):
    assert client.get(URL, headers=auth_headers(make_user())).status_code == 400


def test_collected_data_covers_every_section(
    client, make_user, make_document, auth_headers, db_session
):
    from app.models.quiz_result import QuizResult
    from app.services.data_export import collect_user_data

    user = make_user(full_name="Ada Lovelace")
    doc = make_document(user, title="Notes on the Engine", progress=40)
    headers = auth_headers(user)
    client.post("/api/reading-sessions", json={"documentId": doc.id, "action": "start"}, headers=headers)
    db_session.add(QuizResult(
        user_id=user.id, document_id=doc.id, score=90, total_questions=10,
        correct_answers=9, time_spent=60,
    ))
    db_session.commit()

    data = collect_user_data(db_session, user)
    assert data["user"]["email"] == user.email
    assert [d["title"] for d in data["documents"]] == ["Notes on the Engine"]
    assert len(data["readingSessions"]) == 1
    assert data["quizResults"][0]["score"] == 90
    assert data["achievements"] == []


def test_pdf_renders_special_characters(app):
    from app.services.pdf_export import UserDataPDF

    data = {
        "user": {"id": 1, "email": "a@b.com", "fullName": "Tom & <Jerry>", "createdAt": None},
        "documents": [{
            "id": "d1", "title": "R&D <notes>", "type": "text", "fileName": "n.txt",
            "wordCount": 1200, "progress": 50.0, "createdAt": "2026-03-01T10:00:00+00:00",
            "updatedAt": None,
        }],
        "readingSessions": [{"totalMinutes": 12.5}, {"totalMinutes": None}],
        "quizResults": [{
            "id": "q1", "documentId": "gone", "score": 80.0, "totalQuestions": 5,
            "correctAnswers": 4, "timeSpent": 30, "difficulty": "easy", "createdAt": None,
        }],
        "achievements": [{"type": "speed_reader", "unlockedAt": "2026-03-02T09:00:00+00:00"}],
    }
    pdf = UserDataPDF().render(data)
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000
