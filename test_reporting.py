"""
Status Tracker — report aggregation and rendering tests
=======================================================
Run:  pytest test_reporting.py -v
"""
import io
from datetime import date

import pytest
from openpyxl import load_workbook

from conftest import NOW
from status_tracker.core.exceptions import Forbidden, NotFound
from status_tracker.services.report_renderer import LEAVE_HEADER, render_workbook
from status_tracker.services.report_service import ReportService, build_grid

JUNE_3, JUNE_4 = date(2024, 6, 3), date(2024, 6, 4)


@pytest.fixture
def reports(status_repo, question_repo, directory, access):
    return ReportService(status_repo, question_repo, directory, access, clock=lambda: NOW)


def _submit(status_repo, user, team, day, responses=(), reason=None):
    record, _ = status_repo.upsert(
        team_id=team, user_id=user, record_date=day, is_leave=reason is not None,
        leave_reason=reason, responses=list(responses), submitted_by=user, submitted_at=NOW,
    )
    return record


# ═══════════════════════════════════════════════════════════════════════════
# PURE GRID
# ═══════════════════════════════════════════════════════════════════════════
class TestBuildGrid:
    TEAMS = [{"id": "team-a", "name": "Alpha"}, {"id": "team-b", "name": "Beta"}]
    USERS = {
        "team-a": [{"id": "alice", "name": "Alice"}, {"id": "bob", "name": "Bob"}],
        "team-b": [{"id": "carol", "name": "Carol"}],
    }
    QUESTIONS = {
        "team-a": [{"id": "q1", "text": "Yesterday?"}, {"id": "q2", "text": "Today?"}],
        "team-b": [{"id": "q3", "text": "Blockers?"}],
    }
    RECORDS = [
        {"team_id": "team-a", "user_id": "alice", "date": "2024-06-03", "is_leave": False,
         "leave_reason": None,
         "responses": [{"question_id": "q1", "answer": "x"}, {"question_id": "q2", "answer": "y"}]},
        {"team_id": "team-a", "user_id": "bob", "date": "2024-06-04", "is_leave": True,
         "leave_reason": "holiday", "responses": []},
    ]

    def test_rows_and_separator(self):
        rows, _ = build_grid(self.TEAMS, self.USERS, self.QUESTIONS, self.RECORDS,
                             [JUNE_3, JUNE_4])
        assert rows == [
            ["Alpha", "Alice", "Yesterday?", "x", ""],
            ["", "", "Today?", "y", ""],
            ["", "Bob", "Yesterday?", "", ""],
            ["", "", "Today?", "", ""],
            [],
            ["Beta", "Carol", "Blockers?", "", ""],
        ]

    def test_leave_listed_separately(self):
        _, leave = build_grid(self.TEAMS, self.USERS, self.QUESTIONS, self.RECORDS,
                              [JUNE_3, JUNE_4])
        assert leave == [{"team": "Alpha", "user": "Bob", "date": "2024-06-04",
                          "reason": "holiday"}]

    def test_team_without_questions_emits_nothing(self):
        questions = {"team-a": self.QUESTIONS["team-a"]}
        rows, _ = build_grid(self.TEAMS, self.USERS, questions, self.RECORDS, [JUNE_3])
        assert len(rows) == 4
        assert [] not in rows

    def test_deterministic(self):
        first = build_grid(self.TEAMS, self.USERS, self.QUESTIONS, self.RECORDS, [JUNE_3])
        second = build_grid(self.TEAMS, self.USERS, self.QUESTIONS,
                            list(reversed(self.RECORDS)), [JUNE_3])
        assert first == second


# ═══════════════════════════════════════════════════════════════════════════
# REPORT SERVICE
# ═══════════════════════════════════════════════════════════════════════════
class TestReportService:
    def test_admin_report_for_range(self, reports, status_repo, add_question, actors):
        add_question("Yesterday?", is_common=True)
        add_question("Alpha only", teams=["team-a"], order=1)
        _submit(status_repo, "alice", "team-a", JUNE_3, [("q1", "shipped"), ("q2", "demo")])
        _submit(status_repo, "bob", "team-a", JUNE_4, reason="vacation")

        report = reports.build_report(actors["admin"], team_ids=["team-a", "team-b"],
                                      start_date="2024-06-03", end_date="2024-06-04")
        assert report["leave"] == [
            {"team": "Alpha", "user": "Bob", "date": "2024-06-04", "reason": "vacation"}
        ]
        assert report["header"] == ["Team", "User", "Question", "2024-06-03", "2024-06-04"]
        assert report["rows"] == [
            ["Alpha", "Alice", "Yesterday?", "shipped", ""],
            ["", "", "Alpha only", "demo", ""],
            ["", "Bob", "Yesterday?", "", ""],
            ["", "", "Alpha only", "", ""],
            [],
            ["Beta", "Carol", "Yesterday?", "", ""],
        ]

    def test_defaults_to_current_month(self, reports, add_question, actors):
        add_question("Yesterday?", is_common=True)
        report = reports.build_report(actors["admin"], team_ids=["team-b"])
        assert report["start_date"] == "2024-06-01"
        assert report["end_date"] == "2024-06-30"
        assert len(report["header"]) == 3 + 30

    def test_manager_defaults_to_managed_teams(self, reports, add_question, actors):
        add_question("Yesterday?", is_common=True)
        report = reports.build_report(actors["mgr2"], month="2024-06")
        assert [row[0] for row in report["rows"] if row and row[0]] == ["Gamma"]

    def test_manager_foreign_team_forbidden(self, reports, actors):
        with pytest.raises(Forbidden):
            reports.build_report(actors["mgr1"], team_ids=["team-a", "team-c"])

    def test_employee_forbidden(self, reports, actors):
        with pytest.raises(Forbidden):
            reports.build_report(actors["alice"])

    def test_user_only_report_groups_by_record_teams(self, reports, status_repo,
                                                     add_question, actors):
        add_question("Yesterday?", is_common=True)
        _submit(status_repo, "alice", "team-c", JUNE_3, [("q1", "growth work")])
        report = reports.build_report(actors["admin"], user_ids=["alice"], month="2024-06")
        assert report["rows"][0][:3] == ["Gamma", "Alice", "Yesterday?"]
        assert all(row[0] != "Alpha" for row in report["rows"])

    def test_no_matching_teams(self, reports, add_question, actors):
        add_question("Yesterday?", is_common=True)
        with pytest.raises(NotFound):
            reports.build_report(actors["admin"], user_ids=["alice"], month="2024-06")

    def test_inactive_question_kept_only_where_answered(self, reports, status_repo,
                                                        question_repo, add_question, actors):
        add_question("Yesterday?", is_common=True)
        add_question("Retired", is_common=True)
        _submit(status_repo, "alice", "team-a", JUNE_3, [("q2", "old answer")])
        question_repo.update("q2", {"active": False}, None, NOW)

        report = reports.build_report(actors["admin"], team_ids=["team-a", "team-b"],
                                      start_date="2024-06-03", end_date="2024-06-03")
        separator = report["rows"].index([])
        alpha = [row[2] for row in report["rows"][:2]]
        beta = [row[2] for row in report["rows"][separator + 1:]]
        assert alpha == ["Yesterday?", "Retired"]
        assert beta == ["Yesterday?"]

    def test_leave_summary(self, reports, status_repo, add_question, actors):
        add_question("Yesterday?", is_common=True)
        _submit(status_repo, "bob", "team-a", JUNE_4, reason="dentist")
        report = reports.build_report(actors["mgr1"], team_ids=["team-a"], month="2024-06")
        assert report["leave"] == [
            {"team": "Alpha", "user": "Bob", "date": "2024-06-04", "reason": "dentist"}
        ]
        assert all(cell == "" for row in report["rows"] for cell in row[3:])

    def test_report_options(self, reports, actors):
        options = reports.report_options(actors["mgr1"])
        assert [t["name"] for t in options] == ["Alpha", "Beta"]
        assert [m["id"] for m in options[0]["members"]] == ["alice", "bob"]


# ═══════════════════════════════════════════════════════════════════════════
# WORKBOOK
# ═══════════════════════════════════════════════════════════════════════════
class TestRenderWorkbook:
    REPORT = {
        "start_date": "2024-06-03",
        "end_date": "2024-06-04",
        "header": ["Team", "User", "Question", "2024-06-03", "2024-06-04"],
        "rows": [
            ["Alpha", "Alice", "Yesterday?", "x", ""],
            [],
            ["Beta", "Carol", "Yesterday?", "", "y"],
        ],
        "leave": [{"team": "Alpha", "user": "Bob", "date": "2024-06-04", "reason": "holiday"}],
    }

    def _load(self):
        return load_workbook(io.BytesIO(render_workbook(self.REPORT)))

    def test_sheets(self):
        wb = self._load()
        assert wb.sheetnames == ["Status Report", "Leave"]

    def test_grid_contents(self):
        ws = self._load()["Status Report"]
        assert [c.value for c in ws[1]] == self.REPORT["header"]
        assert ws["A2"].value == "Alpha"
        assert ws["D2"].value == "x"
        assert ws["A3"].value is None
        assert ws["A4"].value == "Beta"
        assert ws.freeze_panes == "D2"

    def test_styles(self):
        ws = self._load()["Status Report"]
        assert ws["A1"].font.bold
        assert ws["A2"].font.bold
        assert ws.column_dimensions["C"].width == 30
        assert ws.column_dimensions["D"].width == 25

    def test_leave_sheet(self):
        ws = self._load()["Leave"]
        assert [c.value for c in ws[1]] == LEAVE_HEADER
        assert [c.value for c in ws[2]] == ["Alpha", "Bob", "2024-06-04", "holiday"]
