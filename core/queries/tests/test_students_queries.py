"""Tests for student expiry queries."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from core.queries.students import get_students_expiring_by


def _mock_conn(rows=None):
    conn = MagicMock()
    result = MagicMock()
    result.mappings.return_value = rows or []
    conn.execute = AsyncMock(return_value=result)
    return conn


class TestGetStudentsExpiringBy:
    @pytest.mark.asyncio
    async def test_filters_on_or_before_target_date(self):
        conn = _mock_conn()

        await get_students_expiring_by(conn, date(2024, 1, 11))

        compiled = conn.execute.await_args.args[0].compile(
            dialect=postgresql.dialect()
        )
        sql = str(compiled)
        assert "students.membership_end <= %(membership_end_1)s" in sql
        assert compiled.params["membership_end_1"] == date(2024, 1, 11)

    @pytest.mark.asyncio
    async def test_selects_contact_fields_only(self):
        conn = _mock_conn()

        await get_students_expiring_by(conn, date(2024, 1, 11))

        stmt = conn.execute.await_args.args[0]
        assert [c.name for c in stmt.selected_columns] == [
            "id",
            "name",
            "email",
            "phone",
            "membership_end",
        ]

    @pytest.mark.asyncio
    async def test_returns_rows_as_dicts(self):
        rows = [
            {
                "id": 1,
                "name": "Asha",
                "email": "asha@example.com",
                "phone": "9876543210",
                "membership_end": date(2024, 1, 11),
            }
        ]
        conn = _mock_conn(rows)

        students = await get_students_expiring_by(conn, date(2024, 1, 11))

        assert students == rows
        assert isinstance(students[0], dict)
