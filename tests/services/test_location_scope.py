"""
Tests for location scope resolution.
"""

import pytest

from app.config import GLOBAL_SCOPE
from app.core.exceptions import InvalidGranularityError
from app.services.location_scope import Scope, resolve_scope, validate_granularity


@pytest.mark.unit
class TestScope:
    def test_unconstrained_scope_streaks_globally(self):
        scope = Scope(granularity="city")

        assert scope.is_constrained is False
        assert scope.streak_location == GLOBAL_SCOPE

    def test_constrained_scope_streaks_by_location(self):
        scope = Scope(granularity="city", location_value="Paris", user_ids=frozenset({"a", "b"}))

        assert scope.is_constrained is True
        assert scope.streak_location == "Paris"

    def test_unknown_granularity(self):
        with pytest.raises(InvalidGranularityError) as exc_info:
            validate_granularity("planet")
        assert exc_info.value.status_code == 422


@pytest.mark.services
class TestResolveScope:
    async def test_anonymous_viewer_is_unconstrained(self, db_session):
        scope = await resolve_scope(db_session, None, "country")

        assert scope == Scope(granularity="country")

    async def test_viewer_without_value_is_unconstrained(self, db_session, make_profile):
        viewer = await make_profile(country="France")
        await make_profile(country="France")

        scope = await resolve_scope(db_session, viewer, "city")

        assert scope.is_constrained is False

    async def test_matches_single_field_only(self, db_session, make_profile):
        """Hierarchy is not enforced: a Paris in another country is still in scope."""
        viewer = await make_profile(country="France", city="Paris")
        neighbour = await make_profile(country="France", city="Paris")
        texan = await make_profile(country="United States", city="Paris")
        await make_profile(country="France", city="Lyon")

        scope = await resolve_scope(db_session, viewer, "city")

        assert scope.location_value == "Paris"
        assert scope.user_ids == frozenset({viewer.user_id, neighbour.user_id, texan.user_id})

    async def test_comparison_is_case_sensitive(self, db_session, make_profile):
        viewer = await make_profile(city="Paris")
        same = await make_profile(city="Paris")
        await make_profile(city="paris")
        await make_profile(city="PARIS")

        scope = await resolve_scope(db_session, viewer, "city")

        assert scope.user_ids == frozenset({viewer.user_id, same.user_id})

    async def test_viewer_alone_in_region_falls_back(self, db_session, make_profile):
        viewer = await make_profile(district="Montmartre")
        await make_profile(district="Marais")

        scope = await resolve_scope(db_session, viewer, "district")

        assert scope.is_constrained is False
        assert scope.streak_location == GLOBAL_SCOPE

    async def test_invalid_granularity(self, db_session, make_profile):
        viewer = await make_profile(city="Paris")

        with pytest.raises(InvalidGranularityError):
            await resolve_scope(db_session, viewer, "galaxy")
