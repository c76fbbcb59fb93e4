from datetime import date, datetime, timezone as dt_timezone

import pytest
from django.urls import reverse

from studies.catalog import available_years, published_studies, related_studies
from studies.models import Category, Study

pytestmark = pytest.mark.django_db


def _at(day):
    return datetime(2025, 1, day, 12, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def catalog_set(make_study, category):
    biology = Category.objects.create(name="Biology")
    approved = Study.Status.APPROVED
    return {
        "cs_2024_old": make_study(
            title="Graph Neural Networks", status=approved, is_published=True,
            published_at=_at(1), category=category, date_completed=date(2024, 3, 1),
        ),
        "cs_2023_new": make_study(
            title="Compiler Testing", status=approved, is_published=True,
            published_at=_at(5), category=category, date_completed=date(2023, 6, 1),
            adviser="Dr. Santos",
        ),
        "cs_2022": make_study(
            title="Legacy Databases", status=approved, is_published=True,
            published_at=_at(3), category=category, date_completed=date(2022, 6, 1),
        ),
        "bio_2024": make_study(
            title="Coral Reef Survey", status=approved, is_published=True,
            published_at=_at(4), category=biology, date_completed=date(2024, 2, 1),
        ),
        "cs_unpublished": make_study(
            title="Unpublished Compiler Work", status=approved, is_published=False,
            category=category, date_completed=date(2024, 2, 1),
        ),
        "cs_pending": make_study(title="Pending Compiler Draft", category=category, date_completed=date(2024, 2, 1)),
    }


class TestPublishedStudies:
    def test_category_and_year_filter(self, catalog_set):
        result = list(published_studies(category="computer-science", year_from=2023))
        assert result == [catalog_set["cs_2023_new"], catalog_set["cs_2024_old"]]

    def test_only_published_are_listed(self, catalog_set):
        result = set(published_studies())
        assert catalog_set["cs_unpublished"] not in result
        assert catalog_set["cs_pending"] not in result
        assert len(result) == 4

    def test_query_matches_title_abstract_or_adviser(self, catalog_set):
        assert list(published_studies(query="compiler")) == [catalog_set["cs_2023_new"]]
        assert list(published_studies(query="SANTOS")) == [catalog_set["cs_2023_new"]]

    def test_unknown_category_slug_is_ignored(self, catalog_set):
        assert published_studies(category="no-such-category").count() == 4

    def test_year_to_is_inclusive(self, catalog_set):
        result = set(published_studies(year_to=2023))
        assert result == {catalog_set["cs_2023_new"], catalog_set["cs_2022"]}

    def test_sort_ascending(self, catalog_set):
        titles = [s.title for s in published_studies(sort="date_asc")]
        assert titles == ["Graph Neural Networks", "Legacy Databases", "Coral Reef Survey", "Compiler Testing"]

    def test_available_years_newest_first(self, catalog_set):
        assert available_years() == [2024, 2023, 2022]

    def test_related_studies_share_category(self, catalog_set):
        related = list(related_studies(catalog_set["cs_2022"]))
        assert catalog_set["bio_2024"] not in related
        assert catalog_set["cs_2022"] not in related
        assert related == [catalog_set["cs_2023_new"], catalog_set["cs_2024_old"]]


class TestCatalogEndpoints:
    def test_json_catalog(self, client, catalog_set):
        resp = client.get(reverse("api_catalog"), {"category": "computer-science", "year_from": "2023"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 2
        assert data["page"] == 1
        assert data["per_page"] == 12
        assert data["total_pages"] == 1
        assert [r["title"] for r in data["results"]] == ["Compiler Testing", "Graph Neural Networks"]
        assert data["results"][0]["category"]["slug"] == "computer-science"

    def test_invalid_year_is_ignored(self, client, catalog_set):
        resp = client.get(reverse("api_catalog"), {"year_from": "1800"})
        assert resp.json()["count"] == 4

    def test_html_catalog_paginates(self, client, make_study):
        for _ in range(13):
            make_study(status=Study.Status.APPROVED, is_published=True)
        resp = client.get(reverse("catalog"), {"page": 2})
        assert resp.status_code == 200
        assert resp.context["meta"] == {"count": 13, "page": 2, "per_page": 12, "total_pages": 2}
        assert len(resp.context["studies"]) == 1

    def test_home_page_stats(self, client, catalog_set):
        resp = client.get(reverse("home"))
        assert resp.status_code == 200
        assert resp.context["stats"] == {"studies": 4, "authors": 1}
        assert len(resp.context["latest"]) == 4
