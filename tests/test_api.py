from fastapi.testclient import TestClient

from academy.schemas import SkillAssessmentCreate, StudentCreate
from academy.services.advisor import get_advisor


def _create_batch(client: TestClient, headers, name="Junior Batch"):
    r = client.post("/api/batches", json={"name": name, "age_group": "12-16", "level": "intermediate"}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _create_student(client: TestClient, headers, **fields):
    payload = {"name": "Emma", "age": 10, **fields}
    r = client.post("/api/students", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_root(client: TestClient):
    r = client.get("/")
    assert r.status_code == 200
    assert "message" in r.json()


# -----------------------------
# Auth
# -----------------------------
def test_login_and_current_user(client: TestClient, coach_headers):
    r = client.get("/api/auth/user", headers=coach_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "coach@test.com"
    assert "password" not in body


def test_login_with_wrong_password(client: TestClient, coach):
    r = client.post("/api/auth/login", json={"username": "coach@test.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid credentials"}


def test_routes_need_a_token(client: TestClient):
    assert client.get("/api/students").status_code == 401
    assert client.get("/api/auth/user", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_logout(client: TestClient):
    r = client.post("/api/auth/logout")
    assert r.status_code == 200
    assert r.json()["message"]


def test_register_is_admin_only(client: TestClient, admin_headers, coach_headers):
    payload = {"username": "new@test.com", "password": "secret", "role": "coach", "academy_name": "Test Academy"}

    assert client.post("/api/auth/register", json=payload, headers=coach_headers).status_code == 403

    r = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert r.status_code == 201, r.text
    assert "password" not in r.json()

    duplicate = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert duplicate.status_code == 400

    login = client.post("/api/auth/login", json={"username": "new@test.com", "password": "secret"})
    assert login.status_code == 200


# -----------------------------
# Students
# -----------------------------
def test_student_lifecycle(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)
    assert student["id"] == 1
    assert student["status"] == "active"
    assert student["join_date"]

    r = client.patch("/api/students/1", json={"status": "at_risk"}, headers=coach_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Emma"

    at_risk = client.get("/api/students/at-risk", headers=coach_headers).json()
    assert [s["id"] for s in at_risk] == [1]

    assert client.delete("/api/students/1", headers=coach_headers).status_code == 204
    assert client.get("/api/students/at-risk", headers=coach_headers).json() == []
    r = client.get("/api/students/1", headers=coach_headers)
    assert r.status_code == 404
    assert r.json() == {"message": "Student not found"}


def test_student_validation_error_shape(client: TestClient, coach_headers):
    r = client.post("/api/students", json={"age": -3}, headers=coach_headers)
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Invalid request data"
    assert {tuple(e["loc"])[-1] for e in body["error"]} >= {"name", "age"}


def test_students_filtered_by_batch(client: TestClient, coach_headers):
    batch = _create_batch(client, coach_headers)
    _create_student(client, coach_headers, name="In", batch_id=batch["id"])
    _create_student(client, coach_headers, name="Out")

    r = client.get(f"/api/students?batch_id={batch['id']}", headers=coach_headers)
    assert [s["name"] for s in r.json()] == ["In"]
    assert r.json()[0]["batch"]["name"] == "Junior Batch"


def test_student_with_unknown_batch_is_rejected(client: TestClient, coach_headers):
    r = client.post("/api/students", json={"name": "Emma", "age": 10, "batch_id": 42}, headers=coach_headers)
    assert r.status_code == 400


# -----------------------------
# Batches
# -----------------------------
def test_batches_are_scoped_to_the_coach(client: TestClient, coach_headers, admin_headers):
    mine = _create_batch(client, coach_headers, "Mine")
    _create_batch(client, admin_headers, "Admin's")

    coach_view = client.get("/api/batches", headers=coach_headers).json()
    assert [b["name"] for b in coach_view] == ["Mine"]
    assert mine["coach_id"] is not None

    admin_view = client.get("/api/batches", headers=admin_headers).json()
    assert len(admin_view) == 2


def test_batch_update_and_delete(client: TestClient, coach_headers):
    batch = _create_batch(client, coach_headers)
    student = _create_student(client, coach_headers, batch_id=batch["id"])

    r = client.patch(f"/api/batches/{batch['id']}", json={"level": "advanced"}, headers=coach_headers)
    assert r.status_code == 200
    assert r.json()["level"] == "advanced"
    assert r.json()["name"] == "Junior Batch"

    assert client.delete(f"/api/batches/{batch['id']}", headers=coach_headers).status_code == 204
    assert client.get(f"/api/batches/{batch['id']}", headers=coach_headers).status_code == 404

    orphan = client.get(f"/api/students/{student['id']}", headers=coach_headers).json()
    assert orphan["batch"] is None


# -----------------------------
# Sessions and attendance
# -----------------------------
def test_session_attendance_flow(client: TestClient, coach_headers):
    batch = _create_batch(client, coach_headers)
    emma = _create_student(client, coach_headers, name="Emma", batch_id=batch["id"])
    liam = _create_student(client, coach_headers, name="Liam", batch_id=batch["id"])

    r = client.post(
        "/api/sessions",
        json={"batch_id": batch["id"], "date": "2024-05-01T09:00:00", "duration": 60},
        headers=coach_headers,
    )
    assert r.status_code == 201, r.text
    session = r.json()
    assert session["status"] == "scheduled"

    for student, present in [(emma, True), (liam, False)]:
        r = client.post(
            "/api/attendance",
            json={"session_id": session["id"], "student_id": student["id"], "present": present},
            headers=coach_headers,
        )
        assert r.status_code == 201, r.text

    details = client.get(f"/api/sessions/{session['id']}", headers=coach_headers).json()
    assert len(details["attendance"]) == 2
    assert {a["student"]["name"]: a["present"] for a in details["attendance"]} == {"Emma": True, "Liam": False}
    assert details["coach"]["username"] == "coach@test.com"

    r = client.patch(f"/api/attendance/{session['id']}/{liam['id']}", json={"present": True}, headers=coach_headers)
    assert r.status_code == 200
    sheet = client.get(f"/api/sessions/{session['id']}/attendance", headers=coach_headers).json()
    assert len(sheet) == 2
    assert all(a["present"] for a in sheet)

    by_day = client.get("/api/sessions?date=2024-05-01", headers=coach_headers).json()
    assert [s["id"] for s in by_day] == [session["id"]]
    assert client.get("/api/sessions?date=2024-05-02", headers=coach_headers).json() == []


def test_attendance_for_unknown_session(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)
    r = client.patch(f"/api/attendance/99/{student['id']}", json={"present": True}, headers=coach_headers)
    assert r.status_code == 404


def test_session_status_only_moves_forward(client: TestClient, coach_headers):
    batch = _create_batch(client, coach_headers)
    session = client.post(
        "/api/sessions", json={"batch_id": batch["id"], "date": "2024-05-01T09:00:00"}, headers=coach_headers
    ).json()
    url = f"/api/sessions/{session['id']}"

    assert client.patch(url, json={"status": "active"}, headers=coach_headers).json()["status"] == "active"
    assert client.patch(url, json={"status": "scheduled"}, headers=coach_headers).status_code == 400
    assert client.patch(url, json={"status": "completed"}, headers=coach_headers).json()["status"] == "completed"

    assert client.delete(url, headers=coach_headers).status_code == 204
    assert client.get(url, headers=coach_headers).status_code == 404


# -----------------------------
# Assessments and dashboard
# -----------------------------
def test_skill_assessments(client: TestClient, coach_headers, coach):
    student = _create_student(client, coach_headers)
    scores = {"serve": 6, "footwork": 8, "stamina": 6, "mental_focus": 8}

    r = client.post("/api/skill-assessments", json={"student_id": student["id"], **scores}, headers=coach_headers)
    assert r.status_code == 201, r.text
    assert r.json()["overall"] == 7
    assert r.json()["assessed_by"] == coach.id

    r = client.post(
        "/api/skill-assessments",
        json={"student_id": student["id"], "serve": 8, "footwork": 8, "stamina": 8, "mental_focus": 8},
        headers=coach_headers,
    )
    second = r.json()

    history = client.get(f"/api/students/{student['id']}/skill-assessments", headers=coach_headers).json()
    assert [a["id"] for a in history][0] == second["id"]

    view = client.get(f"/api/students/{student['id']}", headers=coach_headers).json()
    assert view["latest_skill_assessment"]["id"] == second["id"]

    stats = client.get("/api/dashboard/stats", headers=coach_headers).json()
    assert stats["total_students"] == 1
    assert stats["average_improvement"] == 1.0


def test_skill_scores_out_of_range(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)
    r = client.post(
        "/api/skill-assessments",
        json={"student_id": student["id"], "serve": 11, "footwork": 8, "stamina": 6, "mental_focus": 8},
        headers=coach_headers,
    )
    assert r.status_code == 400


# -----------------------------
# AI-backed routes
# -----------------------------
def test_generate_plan_with_broken_advisor_uses_fallback(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)

    r = client.post("/api/training-plans/generate", json={"student_id": student["id"]}, headers=coach_headers)
    assert r.status_code == 200, r.text
    [plan] = r.json()
    assert plan["generated_by"] == "fallback"
    assert plan["drills"]["kind"] == "weekly_plan"

    r = client.patch(f"/api/training-plans/{plan['id']}", json={"status": "approved"}, headers=coach_headers)
    assert r.json()["status"] == "approved"

    listed = client.get(f"/api/training-plans?student_id={student['id']}", headers=coach_headers).json()
    assert listed[0]["student"]["name"] == "Emma"
    assert client.delete(f"/api/training-plans/{plan['id']}", headers=coach_headers).status_code == 204


def test_generate_plan_for_unknown_student(client: TestClient, coach_headers):
    r = client.post("/api/training-plans/generate", json={"student_id": 99}, headers=coach_headers)
    assert r.status_code == 404
    assert r.json() == {"message": "Student not found"}


def test_manual_training_plan(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)
    r = client.post(
        "/api/training-plans",
        json={
            "student_id": student["id"],
            "week": 3,
            "focus_areas": ["Volleys"],
            "drills": {"kind": "coach_drills", "drills": []},
        },
        headers=coach_headers,
    )
    assert r.status_code == 201, r.text
    assert r.json()["generated_by"] == "coach"
    assert r.json()["drills"]["kind"] == "coach_drills"

    missing_target = client.post("/api/training-plans", json={"week": 1}, headers=coach_headers)
    assert missing_target.status_code == 400


def test_progress_summary_errors(client: TestClient, coach_headers, app_storage):
    student = _create_student(client, coach_headers)
    url = "/api/progress-summaries/generate"

    assert client.post(url, json={"student_id": 99}, headers=coach_headers).status_code == 404
    assert client.post(url, json={"student_id": student["id"]}, headers=coach_headers).status_code == 400

    for value in (5, 7):
        app_storage.create_skill_assessment(SkillAssessmentCreate(
            student_id=student["id"], serve=value, footwork=value, stamina=value, mental_focus=value
        ))
    r = client.post(url, json={"student_id": student["id"]}, headers=coach_headers)
    assert r.status_code == 502
    assert r.json()["message"]
    assert client.get(f"/api/students/{student['id']}/progress-summaries", headers=coach_headers).json() == []


def test_progress_summary_with_advisor(client: TestClient, coach_headers, app_storage, make_advisor):
    student = app_storage.create_student(StudentCreate(name="Emma", age=12))
    for value in (5, 7):
        app_storage.create_skill_assessment(SkillAssessmentCreate(
            student_id=student.id, serve=value, footwork=value, stamina=value, mental_focus=value
        ))
    client.app.dependency_overrides[get_advisor] = lambda: make_advisor({
        "summary": "Much better.", "improvements": ["All round"], "next_week_focus": ["Serve"],
    })

    r = client.post("/api/progress-summaries/generate", json={"student_id": student.id}, headers=coach_headers)
    assert r.status_code == 200, r.text
    assert r.json()["summary"] == "Much better."

    listed = client.get(f"/api/students/{student.id}/progress-summaries", headers=coach_headers).json()
    assert [s["id"] for s in listed] == [r.json()["id"]]


def test_drill_recommendations(client: TestClient, coach_headers):
    r = client.post("/api/drill-recommendations", json={"query": "serve accuracy"}, headers=coach_headers)
    assert r.status_code == 200, r.text
    assert r.json()["drills"][0]["name"] == "Target Practice Serves"

    history = client.get("/api/drill-recommendations", headers=coach_headers).json()
    assert [h["query"] for h in history] == ["serve accuracy"]

    assert client.post("/api/drill-recommendations", json={"query": ""}, headers=coach_headers).status_code == 400


def test_dropout_risk_failure_is_502(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)
    r = client.post(f"/api/students/{student['id']}/analyze-dropout-risk", headers=coach_headers)
    assert r.status_code == 502
    assert "error" in r.json()


def test_student_patch_with_unknown_batch_is_rejected(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)
    r = client.patch(f"/api/students/{student['id']}", json={"batch_id": 42}, headers=coach_headers)
    assert r.status_code == 400
    assert client.get(f"/api/students/{student['id']}", headers=coach_headers).json()["batch_id"] is None


def test_patch_with_null_required_field_is_rejected(client: TestClient, coach_headers):
    student = _create_student(client, coach_headers)
    batch = _create_batch(client, coach_headers)

    r = client.patch(f"/api/students/{student['id']}", json={"name": None}, headers=coach_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid request data"
    assert client.patch(f"/api/batches/{batch['id']}", json={"level": None}, headers=coach_headers).status_code == 400

    # Nullable fields can still be cleared
    r = client.patch(f"/api/students/{student['id']}", json={"email": None}, headers=coach_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Emma"
