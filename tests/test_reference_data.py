from flashnews.news.services.reference_data import DEFAULT_CATEGORIES, DEFAULT_LOCATIONS, seed_reference_data


class TestSeedReferenceData:
    def test_seeds_defaults_once(self, category_repo, location_repo):
        first = seed_reference_data(category_repo, location_repo)
        second = seed_reference_data(category_repo, location_repo)

        assert first == (len(DEFAULT_CATEGORIES), len(DEFAULT_LOCATIONS))
        assert second == (0, 0)
        assert category_repo.find_by_name("Technology") is not None
        assert location_repo.find_by_country_code("gbr").name == "United Kingdom"

    def test_existing_entries_are_kept(self, category_repo, location_repo, technology, usa):
        added_categories, added_locations = seed_reference_data(category_repo, location_repo)

        assert added_categories == len(DEFAULT_CATEGORIES) - 1
        assert added_locations == len(DEFAULT_LOCATIONS) - 1
        assert category_repo.find_by_name("technology").id == technology.id

    def test_soft_deleted_defaults_stay_deleted_on_reseed(self, category_repo, location_repo):
        seed_reference_data(category_repo, location_repo)
        technology = category_repo.find_by_name("technology")
        usa = location_repo.find_by_country_code("USA")
        category_repo.soft_delete(technology.id)
        location_repo.soft_delete(usa.id)

        assert seed_reference_data(category_repo, location_repo) == (0, 0)

        assert category_repo.find_by_name("technology") is None
        assert category_repo.find_by_name("technology", include_inactive=True).id == technology.id
        assert location_repo.find_by_country_code("usa") is None
        assert category_repo.count() == len(DEFAULT_CATEGORIES) - 1
        assert location_repo.count() == len(DEFAULT_LOCATIONS) - 1
