"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

import csv
from datetime import date, datetime
from io import StringIO
from typing import Optional


class LeadFactory:
    """
    Factory for creating test lead rows (as stored in the leads table).

    Usage:
        lead = LeadFactory.create()
        lead = LeadFactory.create(name="Maria Silva", status="won")
        leads = LeadFactory.create_batch(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[int] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        city: Optional[str] = "Orlando",
        status: str = "new",
        estimated_price: Optional[float] = 150.0,
        **extra
    ) -> dict:
        n = cls._next_counter()
        return {
            "id": id if id is not None else n,
            "name": name or f"Lead {n}",
            "email": email or f"lead{n}@example.com",
            "phone": phone or f"407-555-{n:04d}",
            "address": f"{n} Palm Ave",
            "city": city,
            "status": status,
            "estimated_price": estimated_price,
            "created_at": "2026-10-01T10:00:00+00:00",
            "updated_at": None,
            **extra,
        }

    @classmethod
    def create_batch(cls, count: int, **kwargs) -> list[dict]:
        return [cls.create(**kwargs) for _ in range(count)]


class JobFactory:
    """Factory for creating test job rows."""

    _counter = 0

    @classmethod
    def create(
        cls,
        lead_id: int = 1,
        job_date: date = date(2026, 10, 5),
        amount: float = 200.0,
        team_pay: Optional[float] = 80.0,
        status: str = "completed",
        team: Optional[str] = "Team A",
    ) -> dict:
        cls._counter += 1
        return {
            "id": cls._counter,
            "lead_id": lead_id,
            "date": job_date.isoformat(),
            "team": team,
            "amount": amount,
            "team_pay": team_pay,
            "status": status,
            "notes": None,
            "created_at": datetime(2026, 10, 1, 9, 0).isoformat(),
        }


def make_csv(
    headers: list[str],
    rows: list[list[str]],
    delimiter: str = ",",
) -> bytes:
    """Build CSV bytes from headers and rows."""
    out = StringIO()
    writer = csv.writer(out, delimiter=delimiter, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return out.getvalue().encode("utf-8")


def make_lead_csv(count: int) -> bytes:
    """CSV with `count` leads and headers the auto-mapper recognizes."""
    headers = ["Nome", "Email Address", "Phone", "Zip", "Bedrooms", "Price", "City"]
    rows = [
        [f"Client {i}", f"client{i}@example.com", f"407555{i:04d}", "32801", "3", "$1,250.50", "Orlando"]
        for i in range(1, count + 1)
    ]
    return make_csv(headers, rows)
