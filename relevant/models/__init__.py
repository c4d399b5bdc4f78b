"""API-facing DTOs and content view models.

Models are organized by feature:
- auth: session status, login/register forms and responses
- user: profile, interests, followed channels, preferences
- content: normalized content views, paging and status payloads
"""

from relevant.models.auth import AuthResponse, LoginForm, RegisterForm, SessionStatus
from relevant.models.base import APIModel
from relevant.models.content import (
    ActionResult,
    ContentPage,
    ContentView,
    Pagination,
    ProcessingStatus,
    SourceChannel,
    UserContentView,
    YouTubeConnectionStatus,
)
from relevant.models.user import (
    InterestCategory,
    InterestCategoryForm,
    Interests,
    InterestSubcategory,
    PreferencesForm,
    User,
    UserPreferences,
    UserStats,
    YouTubeChannelForm,
    YouTubeConnection,
    YouTubeSource,
)

__all__ = [
    "APIModel",
    # Auth
    "SessionStatus",
    "LoginForm",
    "RegisterForm",
    "AuthResponse",
    # User
    "User",
    "UserStats",
    "UserPreferences",
    "PreferencesForm",
    "Interests",
    "InterestCategory",
    "InterestSubcategory",
    "InterestCategoryForm",
    "YouTubeSource",
    "YouTubeChannelForm",
    "YouTubeConnection",
    # Content
    "ContentView",
    "UserContentView",
    "SourceChannel",
    "ContentPage",
    "Pagination",
    "ProcessingStatus",
    "YouTubeConnectionStatus",
    "ActionResult",
]
