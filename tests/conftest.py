"""Shared fixtures. Django is configured with a local memory cache only."""

import django
import pytest
from django.conf import settings as django_settings


def pytest_configure():
    if not django_settings.configured:
        django_settings.configure(
            CACHES={"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}},
            INSTALLED_APPS=["omnicontent"],
            OMNICONTENT={"linkFootnoteMode": "all"},
            TEMPLATES=[{"BACKEND": "django.template.backends.django.DjangoTemplates", "APP_DIRS": True}],
            USE_TZ=True,
        )
        django.setup()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def settings():
    from omnicontent.settings import Settings

    return Settings()


@pytest.fixture
def pipeline(settings):
    from omnicontent.pipeline import ContentPipeline

    return ContentPipeline(settings)
