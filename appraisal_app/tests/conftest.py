import pytest
from uuid import uuid4
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from appraisal_app.constants import PeriodType
from appraisal_app.services.appraisal_types import MonthEntry, PerformanceRow, blank_months
from appraisal_app.services.period_months import resolve_active_months


@pytest.fixture
def q1_months():
    return resolve_active_months(PeriodType.QUARTERLY, quarter=1)


@pytest.fixture
def annual_months():
    return resolve_active_months(PeriodType.ANNUAL)


@pytest.fixture
def make_row():
    """make_row(mode, jan=(100, 95), feb=(100, 95), ...) -> un-recalculated row"""
    def _make_row(mode=None, pillar="Growth", key_result_area="Grow membership",
                  target_description="Recruit members", **month_values):
        months = blank_months()
        for key, (target, actual) in month_values.items():
            months[key] = MonthEntry(target=target, actual=actual)
        kwargs = dict(
            pillar=pillar,
            key_result_area=key_result_area,
            target_description=target_description,
            months=months,
        )
        if mode is not None:
            kwargs["mode"] = mode
        return PerformanceRow(**kwargs)
    return _make_row


@pytest.fixture
def create_user(db):
    User = get_user_model()
    def _create_user(**kw):
        data = {
            "username": f"u_{uuid4().hex[:8]}",
            "email": f"{uuid4().hex[:8]}@test.local",
            "password": "pass12345",
        }
        data.update(kw)
        return User.objects.create_user(**data)
    return _create_user


@pytest.fixture
def api_client():
    return APIClient()
