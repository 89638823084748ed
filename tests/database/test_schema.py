from __future__ import annotations

import re

from smart_attendance.database.bootstrap import SCHEMA_PATH, _statements


def _table(name: str) -> str:
    for stmt in _statements(SCHEMA_PATH.read_text(encoding="utf-8")):
        if re.search(rf"CREATE TABLE IF NOT EXISTS {name}\b", stmt):
            return stmt
    raise AssertionError(f"no CREATE TABLE for {name}")


def test_one_pending_request_per_pair_is_keyed_on_the_columns():
    ddl = _table("join_requests")

    assert "UNIQUE KEY uq_join_requests_pending (student_id, teacher_id, pending_flag)" in ddl
    # Joining ids into one string lets ("a|b", "c") collide with ("a", "b|c").
    assert "CONCAT" not in ddl
    assert re.search(r"pending_flag\s+TINYINT\s+GENERATED ALWAYS AS \(IF\(status = 'PENDING', 1, NULL\)\)", ddl)


def test_attendance_natural_key_is_unique():
    ddl = _table("attendance_records")
    assert re.search(r"UNIQUE KEY \w+ \(student_id, subject, date\)", ddl)


def test_statements_skip_comment_lines():
    sql = "-- header; with a semicolon\nCREATE TABLE a (x INT);\n  -- note\nCREATE TABLE b (y INT);\n"
    assert list(_statements(sql)) == ["CREATE TABLE a (x INT)", "CREATE TABLE b (y INT)"]
