import pytest

from degreeplan.models.course import Course
from degreeplan.models.prerequisite import Prerequisite
from degreeplan.models.program import DegreeProgram


CS_REQUIREMENTS = [
    {
        "name": "Core",
        "minCredits": 9,
        "courses": [
            {"courseType": "regular", "code": "CS 1301", "credits": 3},
            {
                "courseType": "and_group",
                "groupId": "and-intro",
                "groupCourses": [
                    {"courseType": "regular", "code": "CS 1331", "credits": 3},
                    {"courseType": "regular", "code": "CS 1332", "credits": 3},
                ],
            },
        ],
    },
    {
        "name": "Electives",
        "courses": [
            {
                "courseType": "selection",
                "groupId": "sel-electives",
                "selectionCount": 2,
                "selectionOptions": [
                    {"courseType": "regular", "code": "CS 4400", "credits": 3},
                    {"courseType": "regular", "code": "CS 4641", "credits": 3},
                    {"courseType": "flexible", "text": "Any approved CS elective"},
                ],
            }
        ],
    },
]


@pytest.fixture
def program_id(db_session):
    program = DegreeProgram(
        name="Computer Science",
        degree_type="Bachelor of Science",
        program_type="degree",
        total_credits=120,
        requirements=CS_REQUIREMENTS,
        footnotes=[{"number": 1, "text": "Grade of C or better."}],
        is_active=True,
    )
    db_session.add(program)
    db_session.add_all(
        [
            DegreeProgram(name="Mathematics", program_type="minor", total_credits=18, requirements=[]),
            DegreeProgram(name="Retired", program_type="degree", requirements=[], is_active=False),
            Course(code="CS 1331", title="Intro to OOP", credits=3),
            Prerequisite(course_code="CS 1332", prereq_code="CS 1331", relation="required"),
            Prerequisite(course_code="CS 4641", prereq_code="CS 1331", relation="required", or_group="intro"),
            Prerequisite(course_code="CS 4641", prereq_code="CS 1371", relation="required", or_group="intro"),
        ]
    )
    db_session.commit()
    return program.id


@pytest.fixture
def fallback_program_id(db_session):
    program = DegreeProgram(
        name="Aerospace Engineering",
        degree_type="BS",
        total_credits=128,
        requirements={
            "foundation": ["MATH 1551", "MATH 1552"],
            "core": ["AE 2010", "AE 2011"],
        },
        footnotes="Aerospace Engineering BS program fallback data",
    )
    db_session.add(program)
    db_session.commit()
    return program.id


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestPrograms:
    def test_list_active_programs(self, client, program_id):
        names = [p["name"] for p in client.get("/api/programs").json()]
        assert names == ["Computer Science", "Mathematics"]

    def test_filter_by_type(self, client, program_id):
        data = client.get("/api/programs", params={"program_type": "minor"}).json()
        assert [p["name"] for p in data] == ["Mathematics"]

    def test_get_program(self, client, program_id):
        data = client.get(f"/api/programs/{program_id}").json()
        assert data["total_credits"] == 120
        assert data["requirements"][0]["name"] == "Core"

    def test_missing_program(self, client, program_id):
        assert client.get("/api/programs/9999").status_code == 404

    def test_legacy_row_is_returned_as_stored(self, client, fallback_program_id):
        resp = client.get(f"/api/programs/{fallback_program_id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["footnotes"] == "Aerospace Engineering BS program fallback data"
        assert data["requirements"]["core"] == ["AE 2010", "AE 2011"]

    def test_legacy_row_progress(self, client, fallback_program_id):
        resp = client.post(
            f"/api/programs/{fallback_program_id}/progress",
            json={"completed_courses": ["MATH 1551", "AE 2010", "AE 2011"]},
        )
        data = resp.json()
        foundation, core = data["progress"]["categories"]
        assert (foundation["name"], foundation["completed_units"], foundation["total_units"]) == ("foundation", 1, 2)
        assert core["is_complete"] is True
        assert data["anomalies"] == []


class TestProgress:
    def test_progress_and_credits(self, client, program_id):
        resp = client.post(
            f"/api/programs/{program_id}/progress",
            json={"completed_courses": ["CS 1301", "CS 1331", "CS 4400"], "planned_courses": ["CS 1332"]},
        )
        assert resp.status_code == 200
        data = resp.json()

        core, electives = data["progress"]["categories"]
        assert (core["completed_units"], core["total_units"], core["percentage"]) == (2, 3, 67)
        assert (electives["completed_units"], electives["total_units"]) == (1, 2)
        assert data["progress"]["complete_category_count"] == 0
        assert data["progress"]["overall_percentage"] == 0

        assert data["projected"]["complete_category_count"] == 1
        assert data["projected"]["overall_percentage"] == 50

        assert data["credits"] == {"completed_credits": 9, "total_credits": 120}
        assert data["projected_credits"]["completed_credits"] == 12
        assert data["anomalies"] == []

    def test_flexible_text_identifier(self, client, program_id):
        resp = client.post(
            f"/api/programs/{program_id}/progress",
            json={"completed_courses": ["CS 4641", "Any approved CS elective"]},
        )
        electives = resp.json()["progress"]["categories"][1]
        assert electives["is_complete"] is True

    def test_unknown_program(self, client, program_id):
        resp = client.post("/api/programs/9999/progress", json={})
        assert resp.status_code == 404

    def test_export_csv(self, client, program_id):
        resp = client.post(
            f"/api/programs/{program_id}/progress/export",
            json={"completed_courses": ["CS 1301"]},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        lines = resp.text.strip().splitlines()
        assert lines[0].startswith("category,")
        assert lines[1].startswith("Core,1,3,33")
        assert lines[-1].startswith("TOTAL,0,2,0")


class TestEvaluate:
    def test_node_reports(self, client, program_id):
        resp = client.post(
            f"/api/programs/{program_id}/evaluate",
            json={"completed_courses": ["CS 1331", "CS 1332"], "planned_courses": ["CS 4400"]},
        )
        assert resp.status_code == 200
        core, electives = resp.json()["categories"]
        assert core["satisfied_group_ids"] == ["and-intro"]
        assert core["nodes"][1]["satisfied"] is True
        assert core["nodes"][1]["satisfied_count"] == 2

        selection = electives["nodes"][0]
        assert selection["satisfied"] is False
        assert selection["planned"] is False
        assert selection["required_count"] == 2
        assert selection["children"][0]["planned"] is True
        assert selection["children"][2]["key"] == "Any approved CS elective"


class TestRecommendations:
    def test_recommendations(self, client, program_id):
        resp = client.post(
            f"/api/programs/{program_id}/recommendations",
            json={"completed_courses": ["CS 1301"]},
        )
        assert resp.status_code == 200
        recs = {r["course_code"]: r for r in resp.json()}
        assert recs["CS 1331"]["course_title"] == "Intro to OOP"
        assert "CS 1332" not in recs
        assert "CS 4400" in recs

    def test_or_prerequisite_group(self, client, program_id):
        resp = client.post(
            f"/api/programs/{program_id}/recommendations",
            json={"completed_courses": ["CS 1301"]},
        )
        assert "CS 4641" not in [r["course_code"] for r in resp.json()]

        resp = client.post(
            f"/api/programs/{program_id}/recommendations",
            json={"completed_courses": ["CS 1301", "CS 1371"]},
        )
        assert "CS 4641" in [r["course_code"] for r in resp.json()]

    def test_limit(self, client, program_id):
        resp = client.post(
            f"/api/programs/{program_id}/recommendations",
            params={"limit": 1},
            json={},
        )
        assert [r["course_code"] for r in resp.json()] == ["CS 1301"]


class TestInlineEvaluate:
    def test_inline_program_with_anomaly(self, client):
        resp = client.post(
            "/api/requirements/evaluate",
            json={
                "program": {
                    "name": "Physics Minor",
                    "total_credits": 15,
                    "program_type": "minor",
                    "requirements": [
                        {
                            "name": "Core",
                            "courses": [
                                "PHYS 2211",
                                {"courseType": "selection", "selectionCount": 0, "selectionOptions": ["PHYS 3141"]},
                            ],
                        }
                    ],
                },
                "completed_courses": ["PHYS 2211", "PHYS 3141"],
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["program_type"] == "minor"
        core = data["progress"]["categories"][0]
        assert (core["completed_units"], core["total_units"]) == (1, 2)
        assert [a["kind"] for a in data["anomalies"]] == ["invalid_selection_count"]
        assert data["credits"] == {"completed_credits": 6, "total_credits": 15}

    def test_inline_mapping_program_reports_bad_courses(self, client):
        resp = client.post(
            "/api/requirements/evaluate",
            json={
                "program": {
                    "name": "Aerospace Engineering",
                    "requirements": {"foundation": ["MATH 1551"], "design": "AE 4451"},
                },
                "completed_courses": ["MATH 1551"],
            },
        )
        data = resp.json()
        assert [c["name"] for c in data["progress"]["categories"]] == ["foundation", "design"]
        assert data["progress"]["complete_category_count"] == 1
        assert [a["kind"] for a in data["anomalies"]] == ["invalid_courses"]

    def test_inline_program_requires_name(self, client):
        resp = client.post("/api/requirements/evaluate", json={"program": {"name": ""}})
        assert resp.status_code == 422


class TestGpa:
    def test_gpa(self, client):
        resp = client.post(
            "/api/gpa",
            json={
                "courses": [
                    {"code": "CS 1301", "credits": 3, "grade": "A", "semester": "Fall 2024"},
                    {"code": "CS 1331", "credits": 3, "grade": "B", "semester": "Spring 2025"},
                    {"code": "GT 1000", "credits": 1, "grade": "P", "semester": "Spring 2025"},
                ]
            },
        )
        data = resp.json()
        assert data["gpa"] == 3.5
        assert data["credits"] == 6
        assert [s["semester"] for s in data["semesters"]] == ["Fall 2024", "Spring 2025"]
