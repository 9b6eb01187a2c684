"""
Status Tracker — repository tests
=================================
Run against the seeded in-memory SQLite database from conftest.
Run:  pytest test_repositories.py -v
"""
from datetime import date, timedelta

import pytest

from conftest import NOW


def _upsert(repo, user="alice", team="team-a", day=date(2024, 6, 10), responses=(("q1", "done"),),
            is_leave=False, reason=None, by="alice", at=NOW):
    return repo.upsert(team_id=team, user_id=user, record_date=day, is_leave=is_leave,
                       leave_reason=reason, responses=list(responses),
                       submitted_by=by, submitted_at=at)


# ═══════════════════════════════════════════════════════════════════════════
# STATUS RECORDS
# ═══════════════════════════════════════════════════════════════════════════
class TestStatusUpsert:
    def test_first_write_creates(self, status_repo, add_question):
        add_question("What did you do?", teams=["team-a"])
        record, created = _upsert(status_repo)
        assert created is True
        assert record["date"] == "2024-06-10"
        assert record["team_name"] == "Alpha"
        assert record["user_name"] == "Alice"
        assert record["responses"] == [
            {"question_id": "q1", "question_text": "What did you do?", "answer": "done"}
        ]

    def test_second_write_updates_same_identity(self, status_repo, add_question):
        add_question("What did you do?", teams=["team-a"])
        first, _ = _upsert(status_repo)
        second, created = _upsert(status_repo, responses=[("q1", "more")], by="mgr1",
                                  at=NOW + timedelta(hours=1))
        assert created is False
        assert second["id"] == first["id"]
        assert second["created_at"] == first["created_at"]
        assert second["submitted_by"] == "mgr1"
        assert [r["answer"] for r in second["responses"]] == ["more"]
        assert status_repo.count() == 1

    def test_switch_to_leave_clears_responses(self, status_repo, add_question):
        add_question("What did you do?", teams=["team-a"])
        _upsert(status_repo)
        record, created = _upsert(status_repo, responses=(), is_leave=True, reason="sick")
        assert created is False
        assert record["is_leave"] is True
        assert record["leave_reason"] == "sick"
        assert record["responses"] == []

    def test_same_user_different_team_is_separate(self, status_repo, add_question):
        add_question("Common?", is_common=True)
        _upsert(status_repo, team="team-a")
        _, created = _upsert(status_repo, team="team-c")
        assert created is True
        assert status_repo.count() == 2

    def test_response_order_preserved(self, status_repo, add_question):
        add_question("First", is_common=True)
        add_question("Second", is_common=True)
        record, _ = _upsert(status_repo, responses=[("q2", "b"), ("q1", "a")])
        assert [r["question_id"] for r in record["responses"]] == ["q2", "q1"]

    def test_get_by_key(self, status_repo, add_question):
        add_question("Common?", is_common=True)
        record, _ = _upsert(status_repo)
        assert status_repo.get_by_key("alice", "team-a", date(2024, 6, 10))["id"] == record["id"]
        assert status_repo.get_by_key("alice", "team-a", date(2024, 6, 9)) is None


class TestStatusFind:
    def _seed(self, status_repo, add_question):
        add_question("Common?", is_common=True)
        _upsert(status_repo, user="alice", team="team-a", day=date(2024, 5, 31))
        _upsert(status_repo, user="alice", team="team-a", day=date(2024, 6, 3))
        _upsert(status_repo, user="bob", team="team-a", day=date(2024, 6, 3), by="bob")
        _upsert(status_repo, user="carol", team="team-b", day=date(2024, 6, 4), by="carol")

    def test_date_range(self, status_repo, add_question):
        self._seed(status_repo, add_question)
        found = status_repo.find(start_date=date(2024, 6, 1), end_date=date(2024, 6, 30))
        assert [(r["date"], r["user_id"]) for r in found] == [
            ("2024-06-03", "alice"), ("2024-06-03", "bob"), ("2024-06-04", "carol"),
        ]

    def test_team_filter(self, status_repo, add_question):
        self._seed(status_repo, add_question)
        found = status_repo.find(team_ids=["team-b"])
        assert [r["user_id"] for r in found] == ["carol"]

    def test_user_and_date_filter(self, status_repo, add_question):
        self._seed(status_repo, add_question)
        found = status_repo.find(user_id="alice", on_date=date(2024, 6, 3))
        assert len(found) == 1
        assert found[0]["responses"][0]["answer"] == "done"

    def test_empty_collection_matches_nothing(self, status_repo, add_question):
        self._seed(status_repo, add_question)
        assert status_repo.find(team_ids=[]) == []
        assert status_repo.find(user_ids=[]) == []


# ═══════════════════════════════════════════════════════════════════════════
# QUESTIONS
# ═══════════════════════════════════════════════════════════════════════════
class TestQuestionRegistry:
    def test_ordering_by_order_then_insertion(self, question_repo, add_question):
        add_question("Third", is_common=True, order=2)
        add_question("First", is_common=True, order=1)
        add_question("Second", is_common=True, order=1)
        assert [q["text"] for q in question_repo.list()] == ["First", "Second", "Third"]

    def test_equal_seq_falls_back_to_id(self, question_repo):
        question_repo.create("qz", "Inserted first", True, [], 0, "mgr1", NOW)
        question_repo.create("qa", "Inserted second", True, [], 0, "mgr1", NOW)
        # two creates that raced to the same sequence number
        question_repo.update("qa", {"seq": 1}, None, NOW)
        assert [q["id"] for q in question_repo.list()] == ["qa", "qz"]
        assert question_repo.list() == question_repo.list()

    def test_scope_keeps_common_and_linked(self, question_repo, add_question):
        add_question("Common", is_common=True)
        add_question("Alpha only", teams=["team-a"])
        add_question("Gamma only", teams=["team-c"])
        texts = [q["text"] for q in question_repo.list(scope_team_ids=["team-a"])]
        assert texts == ["Common", "Alpha only"]

    def test_inactive_hidden_by_default(self, question_repo, add_question):
        add_question("Active", is_common=True)
        add_question("Retired", is_common=True, active=False)
        assert [q["text"] for q in question_repo.list()] == ["Active"]
        assert len(question_repo.list(include_inactive=True)) == 2

    def test_update_replaces_teams(self, question_repo, add_question):
        add_question("Linked", teams=["team-a", "team-b"])
        updated = question_repo.update("q1", {"text": "Relinked"}, ["team-c"], NOW)
        assert updated["text"] == "Relinked"
        assert updated["teams"] == ["team-c"]

    def test_existing_ids(self, question_repo, add_question):
        add_question("Common", is_common=True)
        assert question_repo.existing_ids(["q1", "nope"]) == {"q1"}


# ═══════════════════════════════════════════════════════════════════════════
# DIRECTORY
# ═══════════════════════════════════════════════════════════════════════════
class TestDirectory:
    def test_managed_teams(self, directory):
        assert directory.team_ids_managed_by("mgr1") == {"team-a", "team-b"}
        assert directory.team_ids_managed_by("mgr2") == {"team-c"}
        assert directory.team_ids_managed_by("alice") == set()

    def test_user_teams(self, directory):
        assert directory.team_ids_of_user("alice") == {"team-a", "team-c"}
        assert sorted(directory.get_user("alice")["teams"]) == ["team-a", "team-c"]

    def test_teams_ordered_by_name(self, directory):
        assert [t["name"] for t in directory.list_teams()] == ["Alpha", "Beta", "Gamma"]

    def test_members_by_team(self, directory):
        members = directory.members_by_team(["team-a", "team-b"])
        assert [m["id"] for m in members["team-a"]] == ["alice", "bob"]
        assert [m["id"] for m in members["team-b"]] == ["carol"]

    def test_membership(self, directory):
        assert directory.is_member("team-a", "bob")
        assert not directory.is_member("team-b", "bob")

    def test_save_team_replaces_members(self, directory):
        directory.save_team("team-a", "Alpha Renamed", "p1", ["alice"])
        assert directory.get_team("team-a")["name"] == "Alpha Renamed"
        assert [m["id"] for m in directory.team_members("team-a")] == ["alice"]

    def test_unknown_role_rejected(self, directory):
        with pytest.raises(ValueError):
            directory.save_user("eve", "Eve", "superuser")
