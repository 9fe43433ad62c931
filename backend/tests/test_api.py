from jobboard.models.match import MatchStatus
from jobboard.services.match_store import MatchStore


def _register(client, username, role="student"):
    response = client.post(
        "/api/auth/register",
        json={"username": username, "password": "secret-123", "full_name": username.title(), "role": role},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_register_login_and_me(client):
    _register(client, "Ana")

    response = client.post("/api/auth/login", json={"username": "ana", "password": "secret-123"})
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    me = client.get("/api/auth/me", headers=headers).json()
    assert me["username"] == "ana"
    assert me["role"] == "student"
    assert client.get("/api/profile", headers=headers).json()["full_name"] == "Ana"


def test_register_rejects_duplicates_and_admin_role(client):
    _register(client, "ana")

    duplicate = client.post("/api/auth/register", json={"username": "ANA", "password": "secret-123"})
    admin = client.post("/api/auth/register", json={"username": "boss", "password": "secret-123", "role": "admin"})
    bad_login = client.post("/api/auth/login", json={"username": "ana", "password": "wrong-pass"})

    assert duplicate.status_code == 409
    assert admin.status_code == 403
    assert bad_login.status_code == 401


def test_routes_enforce_roles(client):
    student = _register(client, "ana")
    employer = _register(client, "acme-hr", role="employer")

    assert client.get("/api/employer/jobs").status_code == 401
    assert client.get("/api/employer/jobs", headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.get("/api/employer/jobs", headers=student).status_code == 403
    assert client.get("/api/cvs", headers=employer).status_code == 403
    assert client.get("/api/admin/users", headers=employer).status_code == 403
    assert client.get("/api/jobs").status_code == 200


def test_cv_upload_matches_open_jobs(client):
    employer = _register(client, "acme-hr", role="employer")
    student = _register(client, "ana")
    job = client.post(
        "/api/employer/jobs",
        headers=employer,
        json={
            "title": "Web Developer",
            "company_name": "Acme",
            "required_skills": ["JavaScript", "React", "Node.js", "Database Design"],
        },
    ).json()

    cv = client.post(
        "/api/cvs",
        headers=student,
        json={"file_url": "https://files.example/ana.pdf", "skills": ["JavaScript", "React", "Node.js", "SQL"]},
    )
    assert cv.status_code == 200
    assert cv.json()["version"] == 1

    listing = client.get("/api/matches", headers=student).json()
    assert listing["total"] == 1
    match = listing["matches"][0]
    assert match["job_id"] == job["id"]
    assert match["match_score"] == 75
    assert match["status"] == "pending"
    assert match["matched_skills"] == ["JavaScript", "React", "Node.js"]
    assert match["missing_skills"] == ["Database Design"]


def test_new_cv_version_replaces_the_active_one(client):
    student = _register(client, "ana")
    client.post("/api/cvs", headers=student, json={"skills": ["Go"]})
    client.post("/api/cvs", headers=student, json={"skills": ["Python"]})

    cvs = client.get("/api/cvs", headers=student).json()

    assert [(cv["version"], cv["is_active"]) for cv in cvs] == [(2, True), (1, False)]


def test_job_posting_matches_existing_students(client, db):
    student = _register(client, "ana")
    employer = _register(client, "acme-hr", role="employer")
    client.post("/api/cvs", headers=student, json={"skills": ["Python", "SQL"]})

    job = client.post(
        "/api/employer/jobs",
        headers=employer,
        json={"title": "Data Analyst", "required_skills": ["Python", "SQL", "Tableau", "Excel"]},
    ).json()

    listing = client.get(f"/api/employer/jobs/{job['id']}/matches", headers=employer).json()
    assert listing["total"] == 1
    assert listing["matches"][0]["match_score"] == 50


def test_employer_review_and_rescore_on_job_change(client, db):
    student = _register(client, "ana")
    employer = _register(client, "acme-hr", role="employer")
    client.post("/api/cvs", headers=student, json={"skills": ["Python", "Docker"]})
    job = client.post(
        "/api/employer/jobs",
        headers=employer,
        json={"title": "Backend Engineer", "required_skills": ["Python", "Kubernetes"]},
    ).json()
    match_id = client.get(f"/api/employer/jobs/{job['id']}/matches", headers=employer).json()["matches"][0]["id"]

    reviewed = client.patch(f"/api/employer/matches/{match_id}", headers=employer, json={"status": "shortlisted"})
    assert reviewed.json()["status"] == "shortlisted"

    client.put(f"/api/employer/jobs/{job['id']}", headers=employer, json={"required_skills": ["Python", "Docker"]})

    record = MatchStore(db).get(match_id)
    assert record.match_score == 100
    assert record.status == MatchStatus.PENDING.value


def test_other_employers_cannot_touch_a_job(client):
    owner = _register(client, "acme-hr", role="employer")
    rival = _register(client, "globex-hr", role="employer")
    job = client.post("/api/employer/jobs", headers=owner, json={"title": "Designer"}).json()

    assert client.get(f"/api/employer/jobs/{job['id']}/matches", headers=rival).status_code == 404
    assert client.delete(f"/api/employer/jobs/{job['id']}", headers=rival).status_code == 404


def test_deleting_a_job_removes_its_matches(client, db):
    student = _register(client, "ana")
    employer = _register(client, "acme-hr", role="employer")
    client.post("/api/cvs", headers=student, json={"skills": ["Python"]})
    job = client.post(
        "/api/employer/jobs", headers=employer, json={"title": "Backend Engineer", "required_skills": ["Python"]}
    ).json()

    response = client.delete(f"/api/employer/jobs/{job['id']}", headers=employer)

    assert response.json()["removed_matches"] == 1
    assert client.get("/api/matches", headers=student).json()["total"] == 0


def test_students_only_see_their_own_matches(client, make_student):
    student = _register(client, "ana")
    _, other = make_student("ben")

    response = client.get("/api/matches", headers=student, params={"student_id": other.id})

    assert response.status_code == 403


def test_apply_and_review_application(client):
    student = _register(client, "ana")
    employer = _register(client, "acme-hr", role="employer")
    job = client.post("/api/employer/jobs", headers=employer, json={"title": "Designer"}).json()

    no_cv = client.post("/api/applications", headers=student, json={"job_id": job["id"]})
    assert no_cv.status_code == 400

    client.post("/api/cvs", headers=student, json={"skills": ["Figma"]})
    first = client.post("/api/applications", headers=student, json={"job_id": job["id"], "cover_letter": "Hi"})
    again = client.post("/api/applications", headers=student, json={"job_id": job["id"]})
    assert first.status_code == 200
    assert again.json()["id"] == first.json()["id"]

    application_id = first.json()["id"]
    reviewed = client.patch(
        f"/api/employer/applications/{application_id}",
        headers=employer,
        json={"status": "shortlisted", "employer_notes": "Strong portfolio"},
    )
    assert reviewed.json()["status"] == "shortlisted"
    assert client.get("/api/applications", headers=student).json()[0]["employer_notes"] == "Strong portfolio"

    assert client.delete(f"/api/applications/{application_id}", headers=student).status_code == 200
    assert client.get("/api/applications", headers=student).json() == []


def test_admin_rescore_and_user_listing(client, make_user, make_student, make_cv, make_job, auth_headers):
    admin = auth_headers(make_user("root", role="admin"))
    user, _ = make_student("ana")
    make_cv(user, ["Python"])
    make_job("Backend Engineer", ["Python"])

    response = client.post("/api/admin/rescore", headers=admin)

    assert response.json() == {"processed_cvs": 1, "created": 1, "updated": 0, "failed": 0}
    students = client.get("/api/admin/users", headers=admin, params={"role": "student"}).json()
    assert [entry["username"] for entry in students] == ["ana"]


def test_matching_errors_map_to_status_codes(client, make_user, make_cv, auth_headers):
    admin = auth_headers(make_user("root", role="admin"))
    orphan_cv = make_cv(make_user("ghost"), ["Python"])

    response = client.post(f"/api/cvs/{orphan_cv.id}/match", headers=admin)

    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == f"CV {orphan_cv.id} has no student profile"
    assert body["context"]["strategy"] == "lexical"


def test_employer_can_clear_optional_job_fields(client):
    employer = _register(client, "acme-hr", role="employer")
    job = client.post(
        "/api/employer/jobs",
        headers=employer,
        json={"title": "Designer", "description": "Figma work", "location": "Berlin"},
    ).json()

    updated = client.put(
        f"/api/employer/jobs/{job['id']}",
        headers=employer,
        json={"description": None, "location": None, "title": None},
    ).json()

    assert updated["description"] is None
    assert updated["location"] is None
    assert updated["title"] == "Designer"


def test_switching_back_to_an_earlier_cv_version(client):
    employer = _register(client, "acme-hr", role="employer")
    student = _register(client, "ana")
    client.post("/api/employer/jobs", headers=employer, json={"title": "Data Analyst", "required_skills": ["Python"]})
    first = client.post("/api/cvs", headers=student, json={"skills": ["Python"]}).json()
    client.post("/api/cvs", headers=student, json={"skills": ["Excel"]})
    assert client.get("/api/matches", headers=student).json()["matches"][0]["match_score"] == 0

    response = client.put(f"/api/cvs/{first['id']}/activate", headers=student)

    assert response.status_code == 200
    assert response.json()["is_active"] is True
    cvs = client.get("/api/cvs", headers=student).json()
    assert [(cv["version"], cv["is_active"]) for cv in cvs] == [(2, False), (1, True)]
    assert client.get("/api/matches", headers=student).json()["matches"][0]["match_score"] == 100


def test_deleting_the_active_cv_promotes_the_newest_remaining(client):
    student = _register(client, "ana")
    rival = _register(client, "ben")
    first = client.post("/api/cvs", headers=student, json={"skills": ["Python"]}).json()
    second = client.post("/api/cvs", headers=student, json={"skills": ["Excel"]}).json()

    assert client.delete(f"/api/cvs/{second['id']}", headers=rival).status_code == 404
    response = client.delete(f"/api/cvs/{second['id']}", headers=student)

    assert response.json() == {"status": "deleted", "cv_id": second["id"], "active_cv_id": first["id"]}
    cvs = client.get("/api/cvs", headers=student).json()
    assert [(cv["id"], cv["is_active"]) for cv in cvs] == [(first["id"], True)]


def test_cv_used_in_an_application_cannot_be_deleted(client):
    employer = _register(client, "acme-hr", role="employer")
    student = _register(client, "ana")
    job = client.post("/api/employer/jobs", headers=employer, json={"title": "Designer"}).json()
    cv = client.post("/api/cvs", headers=student, json={"skills": ["Figma"]}).json()
    client.post("/api/applications", headers=student, json={"job_id": job["id"]})

    assert client.delete(f"/api/cvs/{cv['id']}", headers=student).status_code == 409


def test_admin_creates_accounts_and_changes_roles(client, make_user, auth_headers):
    admin_user = make_user("root", role="admin")
    admin = auth_headers(admin_user)

    created = client.post(
        "/api/admin/users",
        headers=admin,
        json={"username": "Globex-HR", "password": "secret-123", "full_name": "Globex"},
    )
    assert created.status_code == 200
    assert created.json()["role"] == "employer"
    assert created.json()["username"] == "globex-hr"

    login = client.post("/api/auth/login", json={"username": "globex-hr", "password": "secret-123"})
    assert login.json()["role"] == "employer"

    user_id = created.json()["id"]
    promoted = client.patch(f"/api/admin/users/{user_id}", headers=admin, json={"role": "student"})
    assert promoted.json()["role"] == "student"
    student = {"Authorization": f"Bearer {login.json()['access_token']}"}
    assert client.get("/api/profile", headers=student).json()["full_name"] == "Globex"

    assert client.patch(f"/api/admin/users/{admin_user.id}", headers=admin, json={"role": "student"}).status_code == 400
    assert client.patch("/api/admin/users/999", headers=admin, json={"role": "student"}).status_code == 404
    assert client.post("/api/admin/users", headers=student, json={"username": "x-user", "password": "secret-123"}).status_code == 403
