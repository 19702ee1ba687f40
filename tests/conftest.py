import pytest
from fastapi.testclient import TestClient

from traffic_rewards_api.app.core.context import AppContext
from traffic_rewards_api.app.main import create_app
from traffic_rewards_api.app.services.profile_service import ProfileService
from traffic_rewards_api.app.services.report_service import ReportService


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "stable.db")


@pytest.fixture
def context(db_path):
    """Fresh storage per test; every test starts from empty partitions."""
    return AppContext.open(db_path)


@pytest.fixture
def profiles(context):
    return ProfileService(context)


@pytest.fixture
def reports(context, profiles):
    return ReportService(context, profiles, reward_points=10)


@pytest.fixture
def client(context):
    return TestClient(create_app(context))
