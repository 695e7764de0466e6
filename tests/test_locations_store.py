"""Unit tests for locations/store.py -- the State -> Area directory.

Covers:
- state names are case-normalized: create "Lagos", get "lagos"
- strict create: a duplicate state or area (any casing) is a Conflict
- area names are unique per state, not globally
- area lookups are scoped to the given state
- pagination: totalPages/page metadata, newest first, empty page is success
- NotFound only when the parent state itself does not resolve
"""

import pytest

from core.errors import BadRequest, Conflict, NotFound
from locations.store import normalize_name


class TestNormalizeName:
    def test_trims_collapses_and_casefolds(self):
        assert normalize_name("  Port   Harcourt ") == "port harcourt"

    def test_blank_name_is_bad_request(self):
        with pytest.raises(BadRequest):
            normalize_name("   ")


class TestStates:
    def test_round_trip_is_case_insensitive(self, locations):
        created = locations.create_state("Lagos")
        fetched = locations.get_state("lagos")
        assert fetched.id == created.id
        assert fetched.name == "lagos"

    def test_duplicate_state_conflicts(self, locations):
        locations.create_state("Lagos")
        with pytest.raises(Conflict):
            locations.create_state("Lagos")

    def test_duplicate_state_with_other_casing_conflicts(self, locations):
        locations.create_state("Lagos")
        with pytest.raises(Conflict):
            locations.create_state(" LAGOS ")

    def test_unknown_state_is_not_found(self, locations):
        with pytest.raises(NotFound):
            locations.get_state("Kano")

    def test_get_state_by_id(self, locations):
        created = locations.create_state("Oyo")
        assert locations.get_state_by_id(created.id).name == "oyo"
        assert locations.get_state_by_id(9999) is None


class TestAreas:
    def test_same_area_name_in_two_states(self, locations):
        locations.create_state("Lagos")
        locations.create_state("Oyo")
        ikeja_lagos = locations.create_area("Lagos", "Ikeja")
        ikeja_oyo = locations.create_area("Oyo", "Ikeja")
        assert ikeja_lagos.id != ikeja_oyo.id
        assert ikeja_lagos.state_id != ikeja_oyo.state_id

    def test_duplicate_area_in_same_state_conflicts(self, locations):
        locations.create_state("Lagos")
        locations.create_area("Lagos", "Ikeja")
        with pytest.raises(Conflict):
            locations.create_area("lagos", "IKEJA")

    def test_area_in_unknown_state_is_not_found(self, locations):
        with pytest.raises(NotFound, match="State"):
            locations.create_area("Atlantis", "Ikeja")

    def test_get_area_is_scoped_to_state(self, locations):
        locations.create_state("Lagos")
        locations.create_state("Oyo")
        created = locations.create_area("Lagos", "Ikeja")
        assert locations.get_area("ikeja", "LAGOS").id == created.id
        with pytest.raises(NotFound, match="Area"):
            locations.get_area("Ikeja", "Oyo")

    def test_resolve_returns_matching_pair(self, locations):
        locations.create_state("Lagos")
        area = locations.create_area("Lagos", "Lekki")
        state, resolved = locations.resolve("Lagos", "Lekki")
        assert resolved.id == area.id
        assert resolved.state_id == state.id

    def test_get_area_by_id(self, locations):
        locations.create_state("Lagos")
        area = locations.create_area("Lagos", "Yaba")
        assert locations.get_area_by_id(area.id).name == "yaba"
        assert locations.get_area_by_id(9999) is None


class TestPagination:
    def test_third_page_of_25_states(self, locations):
        for i in range(25):
            locations.create_state(f"State {i:02d}")
        page = locations.list_states(page=3, limit=10)
        assert page.total_pages == 3
        assert page.page == 3
        assert len(page.items) == 5

    def test_newest_first(self, locations):
        for name in ("Abia", "Benue", "Cross River"):
            locations.create_state(name)
        names = [s.name for s in locations.list_states().items]
        assert names == ["cross river", "benue", "abia"]

    def test_defaults_when_unset_or_zero(self, locations):
        for i in range(12):
            locations.create_state(f"S{i}")
        page = locations.list_states(page=0, limit=0)
        assert page.page == 1
        assert len(page.items) == 10
        assert page.total_pages == 2

    def test_page_past_the_end_is_empty_not_an_error(self, locations):
        locations.create_state("Lagos")
        page = locations.list_states(page=5, limit=10)
        assert page.items == []
        assert page.total_pages == 1
        assert page.page == 5

    def test_no_states_is_an_empty_page(self, locations):
        page = locations.list_states()
        assert page.items == []
        assert page.total_pages == 0

    def test_negative_page_is_bad_request(self, locations):
        with pytest.raises(BadRequest):
            locations.list_states(page=-1)

    def test_areas_in_state_with_no_areas_is_empty(self, locations):
        locations.create_state("Kogi")
        page = locations.list_areas_in_state("kogi")
        assert page.items == []
        assert page.total_pages == 0

    def test_areas_are_listed_only_for_their_state(self, locations):
        locations.create_state("Lagos")
        locations.create_state("Oyo")
        for area in ("Ikeja", "Lekki", "Yaba"):
            locations.create_area("Lagos", area)
        locations.create_area("Oyo", "Ibadan North")
        page = locations.list_areas_in_state("Lagos", page=1, limit=2)
        assert page.total_pages == 2
        assert [a.name for a in page.items] == ["yaba", "lekki"]

    def test_areas_of_unknown_state_is_not_found(self, locations):
        with pytest.raises(NotFound):
            locations.list_areas_in_state("Atlantis")
