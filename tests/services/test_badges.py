"""
Tests for badge assignment.
"""

import pytest

from app.config import settings
from app.services.badges import assign_badges


@pytest.mark.services
class TestAssignBadges:
    async def test_top_three_get_ranks(self, db_session, make_profile):
        fourth = await make_profile(average_rating=6.0, total_ratings_received=5)
        first = await make_profile(average_rating=9.5, total_ratings_received=2)
        third = await make_profile(average_rating=7.0, total_ratings_received=8)
        second = await make_profile(average_rating=9.5, total_ratings_received=1)

        winners = await assign_badges(db_session)

        assert winners == [first.user_id, second.user_id, third.user_id]
        assert (first.badge_rank, second.badge_rank, third.badge_rank) == (1, 2, 3)
        assert fourth.badge_rank is None

    async def test_previous_holders_lose_badges(self, db_session, make_profile):
        former = await make_profile(badge_rank=1)
        current = await make_profile(average_rating=5.0, total_ratings_received=3)

        winners = await assign_badges(db_session)

        assert winners == [current.user_id]
        assert current.badge_rank == 1
        assert former.badge_rank is None

    async def test_badge_count_is_configurable(self, db_session, make_profile, monkeypatch):
        monkeypatch.setattr(settings, "BADGE_COUNT", 1)
        top = await make_profile(average_rating=8.0, total_ratings_received=3)
        runner_up = await make_profile(average_rating=7.0, total_ratings_received=3, badge_rank=1)

        winners = await assign_badges(db_session)

        assert winners == [top.user_id]
        assert runner_up.badge_rank is None

    async def test_no_rated_profiles(self, db_session, make_profile):
        holder = await make_profile(badge_rank=2)

        assert await assign_badges(db_session) == []
        assert holder.badge_rank is None
