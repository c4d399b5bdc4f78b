"""Profile, interests, followed channels and preferences."""

from relevant.core.logging import get_logger
from relevant.infrastructure.api_client import RelevantAPI
from relevant.models.content import ActionResult
from relevant.models.user import (
    InterestCategoryForm,
    Interests,
    PreferencesForm,
    User,
    UserStats,
    YouTubeChannelForm,
    YouTubeSource,
)
from relevant.services.interests import InterestCatalog
from relevant.services.query.client import Mutation, QueryClient
from relevant.services.query.keys import PROFILE_INVALIDATES, USER_PROFILE, USER_STATS
from relevant.services.session import SessionStore

logger = get_logger(__name__)


class ProfileService:
    """Reads and edits the signed-in user's profile.

    Edits that return the updated user also refresh the session's copy, so
    the header and the profile page agree without waiting for a refetch.
    """

    def __init__(
        self,
        api: RelevantAPI,
        queries: QueryClient,
        session: SessionStore,
        catalog: InterestCatalog | None = None,
    ) -> None:
        self.api = api
        self.queries = queries
        self.session = session
        self.catalog = catalog

    async def profile(self) -> User:
        return await self.queries.fetch((USER_PROFILE,), self.api.get_user_profile)

    async def stats(self) -> UserStats:
        return await self.queries.fetch((USER_STATS,), self.api.get_user_stats)

    def suggest_interests(self, limit: int | None = None) -> list[InterestCategoryForm]:
        """Catalogue categories the user does not follow yet."""
        if self.catalog is None:
            return []
        current = self.session.user.interests if self.session.user else None
        return self.catalog.suggest(exclude=current, limit=limit)

    def _apply_user(self, user: User) -> User:
        self.session.update_user(user)
        self.queries.set_query_data((USER_PROFILE,), user)
        return user

    async def _mutate(self, mutation: Mutation, *args) -> object:
        result = await self.queries.mutate(mutation, *args)
        if isinstance(result, User):
            self._apply_user(result)
        return result

    async def update_interests(self, interests: Interests) -> User:
        return await self._mutate(
            Mutation(
                self.api.update_interests,
                invalidates=PROFILE_INVALIDATES,
                error_message="Failed to update interests",
                success_message="Interests updated",
            ),
            interests,
        )

    async def add_interest_category(self, form: InterestCategoryForm) -> ActionResult:
        return await self._mutate(
            Mutation(
                self.api.add_interest_category,
                invalidates=PROFILE_INVALIDATES,
                error_message="Failed to add interest",
                success_message="Interest category added",
            ),
            form,
        )

    async def delete_interest_category(self, category: str) -> ActionResult:
        return await self._mutate(
            Mutation(
                self.api.delete_interest_category,
                invalidates=PROFILE_INVALIDATES,
                error_message="Failed to delete interest",
                success_message="Interest category deleted",
            ),
            category,
        )

    async def add_youtube_channel(self, form: YouTubeChannelForm) -> list[YouTubeSource]:
        return await self._mutate(
            Mutation(
                self.api.add_youtube_channel,
                invalidates=PROFILE_INVALIDATES,
                error_message="Failed to add YouTube channel",
                success_message="YouTube channel added",
            ),
            form,
        )

    async def remove_youtube_channel(self, channel_id: str) -> list[YouTubeSource]:
        return await self._mutate(
            Mutation(
                self.api.remove_youtube_channel,
                invalidates=PROFILE_INVALIDATES,
                error_message="Failed to remove YouTube channel",
                success_message="YouTube channel removed",
            ),
            channel_id,
        )

    async def update_preferences(self, form: PreferencesForm) -> User:
        return await self._mutate(
            Mutation(
                self.api.update_preferences,
                invalidates=PROFILE_INVALIDATES,
                error_message="Failed to update preferences",
                success_message="Preferences updated successfully",
            ),
            form,
        )


__all__ = ["ProfileService"]
