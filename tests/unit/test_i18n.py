"""
Unit tests for translation bundles.
"""

from __future__ import annotations

import pytest

from car_rental.i18n import is_supported, load_bundle, section, translate


@pytest.mark.unit
def test_supported_locales() -> None:
    """Test that only English and Russian are served."""
    assert is_supported("en")
    assert is_supported("ru")
    assert not is_supported("de")


@pytest.mark.unit
def test_load_bundle_rejects_unsupported_locale() -> None:
    """Test that loading an unknown locale raises KeyError."""
    with pytest.raises(KeyError):
        load_bundle("de")


@pytest.mark.unit
def test_bundles_share_top_level_sections() -> None:
    """Test that both bundles cover the same pages."""
    assert set(load_bundle("en")) == set(load_bundle("ru"))


@pytest.mark.unit
def test_translate_resolves_dotted_keys() -> None:
    """Test that nested keys are resolved per locale."""
    assert translate("en", "blog.notFound") == "Article not found"
    assert translate("ru", "blog.notFound") == "Статья не найдена"


@pytest.mark.unit
def test_translate_falls_back_to_english() -> None:
    """Test that a key missing from the Russian bundle uses the English text."""
    assert translate("ru", "errors.notFound") == translate("en", "errors.notFound")


@pytest.mark.unit
def test_translate_returns_key_when_missing_everywhere() -> None:
    """Test that an unknown key is returned unchanged."""
    assert translate("en", "nope.missing") == "nope.missing"


@pytest.mark.unit
def test_section_returns_copy() -> None:
    """Test that callers cannot mutate the cached bundle through a section."""
    nav = section("en", "nav")
    nav["home"] = "changed"

    assert section("en", "nav")["home"] == "Home"
    assert section("en", "missing") == {}
