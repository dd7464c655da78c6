"""Expert application and directory API tests."""
import pytest

APPLICATION = {
    "qualifications": ["Licensed clinical psychologist", "MA Counseling"],
    "specialization": "Adolescent anxiety",
    "years_of_experience": 8,
    "license_number": "PSY-12345",
    "organization": "City Youth Clinic",
    "bio": "I work with teens on exam stress.",
}


@pytest.fixture
def applicant(make_user):
    return make_user("dr_dana")


def _apply(client, headers, **overrides):
    return client.post("/api/experts/apply", json={**APPLICATION, **overrides}, headers=headers)


def _review(client, headers, user_id, status, reason=None):
    return client.put(
        f"/api/experts/applications/{user_id}/review",
        json={"status": status, "rejection_reason": reason},
        headers=headers,
    )


# ------------------------------------------------------------------
# Apply
# ------------------------------------------------------------------
def test_apply_requires_login(client):
    assert client.post("/api/experts/apply", json=APPLICATION).status_code == 401


def test_apply_creates_pending_application(client, applicant):
    headers, _ = applicant
    resp = _apply(client, headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert "48 hours" in body["message"]
    assert body["data"]["status"] == "pending"
    assert body["data"]["specialization"] == "Adolescent anxiety"

    profile = client.get("/auth/profile", headers=headers).json()["data"]
    assert profile["expert_status"] == "pending"
    assert profile["role"] == "user"
    assert profile["is_verified"] is False


def test_apply_accepts_single_qualification_string(client, applicant):
    headers, _ = applicant
    resp = _apply(client, headers, qualifications="School counselor")
    assert resp.status_code == 201
    assert resp.json()["data"]["qualifications"] == ["School counselor"]


@pytest.mark.parametrize("overrides", [
    {"qualifications": []},
    {"qualifications": None},
    {"specialization": "   "},
    {"years_of_experience": -2},
])
def test_apply_validation(client, applicant, overrides):
    headers, _ = applicant
    resp = _apply(client, headers, **overrides)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_apply_twice_is_rejected(client, applicant):
    headers, _ = applicant
    assert _apply(client, headers).status_code == 201
    resp = _apply(client, headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "You have already submitted an expert application"


# ------------------------------------------------------------------
# Admin review
# ------------------------------------------------------------------
def test_only_admin_sees_applications(client, admin_headers, applicant, make_user):
    headers, user_id = applicant
    mod_headers, _ = make_user("mod_mary", role="moderator")
    _apply(client, headers)

    assert client.get("/api/experts/applications", headers=headers).status_code == 403
    assert client.get("/api/experts/applications", headers=mod_headers).status_code == 403

    resp = client.get("/api/experts/applications", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["data"][0]["id"] == user_id
    assert body["data"][0]["expert_application"]["license_number"] == "PSY-12345"

    assert client.get("/api/experts/applications?status=approved",
                      headers=admin_headers).json()["count"] == 0
    assert client.get("/api/experts/applications?status=bogus",
                      headers=admin_headers).status_code == 400


def test_only_admin_reviews(client, applicant, make_user):
    headers, user_id = applicant
    mod_headers, _ = make_user("mod_mary", role="moderator")
    _apply(client, headers)
    assert _review(client, mod_headers, user_id, "approved").status_code == 403
    assert _review(client, headers, user_id, "approved").status_code == 403


def test_review_validation(client, admin_headers, applicant):
    headers, user_id = applicant
    _apply(client, headers)

    resp = _review(client, admin_headers, user_id, "rejected")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Rejection reason is required when rejecting an application"
    assert _review(client, admin_headers, user_id, "pending").status_code == 400
    assert _review(client, admin_headers, "nobody", "approved").status_code == 404


def test_review_without_application_is_not_found(client, admin_headers, applicant):
    _, user_id = applicant
    assert _review(client, admin_headers, user_id, "approved").status_code == 404


def test_approval_scenario(client, admin_headers, applicant, make_user):
    headers, user_id = applicant
    _apply(client, headers)

    resp = _review(client, admin_headers, user_id, "approved")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Expert application approved successfully"

    # the old token now carries expert permissions
    profile = client.get("/auth/profile", headers=headers).json()["data"]
    assert profile["role"] == "expert"
    assert profile["is_verified"] is True
    assert profile["expert_status"] == "approved"

    resp = _review(client, admin_headers, user_id, "rejected", "Too late")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Application has already been reviewed"

    mod_headers, _ = make_user("mod_mary", role="moderator")
    question = client.post("/api/questions/submit",
                           json={"text": "How do I stop panicking in exams?", "category": "stress"})
    question_id = question.json()["data"]["id"]
    client.put(f"/api/moderation/questions/{question_id}/status",
               json={"status": "approved"}, headers=mod_headers)
    answer = client.post(f"/api/questions/{question_id}/answers",
                         json={"content": "Try box breathing before you start."}, headers=headers)
    assert answer.json()["data"]["is_expert_answer"] is True


def test_rejection_scenario(client, admin_headers, applicant):
    headers, user_id = applicant
    _apply(client, headers)

    resp = _review(client, admin_headers, user_id, "rejected", "License could not be verified")
    assert resp.status_code == 200
    application = resp.json()["data"]["expert_application"]
    assert application["status"] == "rejected"
    assert application["rejection_reason"] == "License could not be verified"

    profile = client.get("/auth/profile", headers=headers).json()["data"]
    assert profile["role"] == "user"
    assert profile["is_verified"] is False
    assert client.get(f"/api/experts/{user_id}").status_code == 404
    # a rejected applicant cannot re-apply
    assert _apply(client, headers).status_code == 400


# ------------------------------------------------------------------
# Public directory
# ------------------------------------------------------------------
def test_directory_lists_verified_experts(client, admin_headers, make_user):
    ann_headers, ann_id = make_user("ann")
    bob_headers, bob_id = make_user("bob")
    _, assigned_id = make_user("assigned", role="expert")
    _apply(client, ann_headers, specialization="Family conflict")
    _apply(client, bob_headers, specialization="Exam stress")
    _review(client, admin_headers, ann_id, "approved")
    _review(client, admin_headers, bob_id, "approved")

    fan_headers, _ = make_user("fan_fred")
    mod_headers, _ = make_user("mod_mary", role="moderator")
    question_id = client.post("/api/questions/submit", json={"text": "Exams are coming, help!"}).json()["data"]["id"]
    client.put(f"/api/moderation/questions/{question_id}/status",
               json={"status": "approved"}, headers=mod_headers)
    answer_id = client.post(f"/api/questions/{question_id}/answers",
                            json={"content": "Plan short sessions."}, headers=bob_headers).json()["data"]["id"]
    client.post(f"/api/answers/{answer_id}/like", headers=fan_headers)

    resp = client.get("/api/experts")
    assert resp.status_code == 200
    body = resp.json()
    assert [e["id"] for e in body["data"]] == [bob_id, ann_id]
    assert body["data"][0]["stats"]["helpful_votes"] == 1
    assert "email" not in body["data"][0]
    assert assigned_id not in [e["id"] for e in body["data"]]

    filtered = client.get("/api/experts?specialization=family").json()["data"]
    assert [e["id"] for e in filtered] == [ann_id]


def test_get_expert(client, admin_headers, applicant, make_user):
    headers, user_id = applicant
    _, plain_id = make_user("plain_paul")
    _apply(client, headers)
    assert client.get(f"/api/experts/{user_id}").status_code == 404

    _review(client, admin_headers, user_id, "approved")
    resp = client.get(f"/api/experts/{user_id}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["specialization"] == "Adolescent anxiety"
    assert data["organization"] == "City Youth Clinic"
    assert "license_number" not in data

    assert client.get(f"/api/experts/{plain_id}").status_code == 404
    assert client.get("/api/experts/missing").status_code == 404
