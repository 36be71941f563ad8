import pytest

from models import db
from models import Course, User


@pytest.fixture
def admin(seeded, auth_headers):
    return auth_headers(seeded.admin)


def test_overview(client, seeded, admin):
    response = client.get("/api/admin/analytics/overview", headers=admin)

    assert response.status_code == 200
    body = response.get_json()
    assert body["totals"] == {
        "schools": 1,
        "departments": 2,
        "courses": 3,
        "sections": 2,
        "students": 3,
        "teachers": 2,
    }
    assert [c["courseTitle"] for c in body["courses"]] == ["Algorithms", "Biology", "Compilers"]
    # alice: 0.6 * 66.67 + 0.4 * 87.5, bob: 0
    assert body["courses"][0]["averageProgress"] == 37.5
    assert body["pagination"]["totalPages"] == 1


def test_overview_pagination(client, seeded, admin):
    body = client.get("/api/admin/analytics/overview?limit=2&page=2", headers=admin).get_json()

    assert [c["courseTitle"] for c in body["courses"]] == ["Compilers"]
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}


def test_course_detail_without_department_check(client, seeded, admin):
    response = client.get(f"/api/admin/analytics/course/{seeded.biology}", headers=admin)

    body = response.get_json()
    assert response.status_code == 200
    assert [s["studentName"] for s in body["students"]] == ["Carol"]
    assert body["students"][0]["progress"] == 0


def test_unknown_course(client, seeded, admin):
    assert client.get("/api/admin/analytics/course/9999", headers=admin).status_code == 404


def test_teachers_are_denied(client, seeded, auth_headers):
    response = client.get("/api/admin/analytics/overview", headers=auth_headers(seeded.teacher))

    assert response.status_code == 403


def test_overview_pages_follow_case_insensitive_title_order(client, seeded, admin):
    db.session.add(Course(title="apple basics", course_code="CS101", school_id=seeded.school,
                          department_id=seeded.cse))
    db.session.commit()

    first = client.get("/api/admin/analytics/overview?limit=2&page=1", headers=admin).get_json()
    second = client.get("/api/admin/analytics/overview?limit=2&page=2", headers=admin).get_json()

    titles = [c["courseTitle"] for c in first["courses"] + second["courses"]]
    assert titles == ["Algorithms", "apple basics", "Biology", "Compilers"]


def test_overview_counts_secondary_roles_and_skips_inactive_users(client, seeded, admin):
    db.session.add_all([
        User(name="Hana", email="hana@test.local", role="hod", roles=["teacher"]),
        User(name="Gone", email="gone@test.local", role="student", is_active=False),
    ])
    db.session.commit()

    totals = client.get("/api/admin/analytics/overview", headers=admin).get_json()["totals"]

    assert totals["teachers"] == 3
    assert totals["students"] == 3
