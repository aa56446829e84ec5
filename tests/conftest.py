"""Shared fixtures: settings, fake-backed services and an HTTP client."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock
from uuid import UUID

import pytest
from cassandra.cluster import Session
from fastapi.testclient import TestClient
from jose import jwt

from clipfeed.accounts.service import AccountService
from clipfeed.analytics.service import AnalyticsService
from clipfeed.auth.permissions import AccountRole
from clipfeed.comments.service import CommentService
from clipfeed.config import Settings, get_settings
from clipfeed.engagement.service import EngagementService
from clipfeed.feed.service import FeedService
from clipfeed.moderation.service import ModerationService
from clipfeed.videos.service import VideoService

from .fakes import (
    FakeAccountRepository,
    FakeCommentRepository,
    FakeEngagementRepository,
    FakeReportRepository,
    FakeVideoRepository,
)


@pytest.fixture
def settings() -> Settings:
    """Engine settings with small, test-friendly tunables."""
    return Settings(
        _env_file=None,
        environment="testing",
        counter_cas_max_attempts=16,
        moderation_batch_size=3,
        feed_default_page_size=10,
        feed_max_page_size=50,
    )


# ==============================================================================
# Repositories
# ==============================================================================


@pytest.fixture
def accounts_repo() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def videos_repo() -> FakeVideoRepository:
    return FakeVideoRepository()


@pytest.fixture
def engagement_repo() -> FakeEngagementRepository:
    return FakeEngagementRepository()


@pytest.fixture
def comments_repo() -> FakeCommentRepository:
    return FakeCommentRepository()


@pytest.fixture
def reports_repo() -> FakeReportRepository:
    return FakeReportRepository()


@pytest.fixture
def mock_session():
    """Mock Cassandra session with awaitable aexecute (cassandra-asyncio-driver)."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: Mock(name="prepared", cql=cql))
    session.aexecute = AsyncMock()
    return session


# ==============================================================================
# Services
# ==============================================================================


@pytest.fixture
def engagement_service(engagement_repo, videos_repo, accounts_repo, settings):
    return EngagementService(engagement_repo, videos_repo, accounts_repo, settings)


@pytest.fixture
def comment_service(comments_repo, videos_repo, accounts_repo, engagement_service, settings):
    return CommentService(
        comments_repo, videos_repo, accounts_repo, engagement_service, settings
    )


@pytest.fixture
def moderation_service(reports_repo, videos_repo, accounts_repo, settings):
    return ModerationService(reports_repo, videos_repo, accounts_repo, settings)


@pytest.fixture
def feed_service(videos_repo, accounts_repo, engagement_service, settings):
    return FeedService(videos_repo, accounts_repo, engagement_service, settings)


@pytest.fixture
def analytics_service(videos_repo, accounts_repo, engagement_service):
    return AnalyticsService(videos_repo, accounts_repo, engagement_service)


@pytest.fixture
def account_service(accounts_repo, videos_repo, engagement_service):
    return AccountService(accounts_repo, videos_repo, engagement_service)


@pytest.fixture
def video_service(videos_repo, accounts_repo, engagement_service):
    return VideoService(videos_repo, accounts_repo, engagement_service)


# ==============================================================================
# Seed data
# ==============================================================================


@pytest.fixture
def creator(accounts_repo):
    return accounts_repo.add(username="creator")


@pytest.fixture
def viewer(accounts_repo):
    return accounts_repo.add(username="viewer")


@pytest.fixture
def moderator(accounts_repo):
    return accounts_repo.add(username="mod", role=AccountRole.MODERATOR)


@pytest.fixture
def video(videos_repo, engagement_repo, creator):
    item = videos_repo.add(creator.account_id)
    engagement_repo.set_stats(item.video_id)
    return item


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Sign access tokens the way the identity provider does."""
    app_settings = get_settings()

    def _make(account_id: UUID, role: AccountRole = AccountRole.MEMBER) -> str:
        now = datetime.now(UTC)
        return jwt.encode(
            {
                "sub": str(account_id),
                "role": role.value,
                "type": "access",
                "iat": now,
                "exp": now + timedelta(minutes=15),
            },
            app_settings.auth_secret_key,
            algorithm=app_settings.auth_algorithm,
        )

    return _make


@pytest.fixture
def app(
    engagement_service,
    comment_service,
    moderation_service,
    feed_service,
    analytics_service,
    account_service,
    video_service,
):
    """Application wired to fake-backed services (lifespan not run)."""
    from clipfeed.main import create_app  # noqa: PLC0415

    application = create_app()
    application.state.engagement_service = engagement_service
    application.state.comment_service = comment_service
    application.state.moderation_service = moderation_service
    application.state.feed_service = feed_service
    application.state.analytics_service = analytics_service
    application.state.account_service = account_service
    application.state.video_service = video_service
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def bare_client() -> TestClient:
    """Client for an app with no services wired."""
    from clipfeed.main import create_app  # noqa: PLC0415

    return TestClient(create_app())
