from __future__ import annotations

import pytest
from pydantic import ValidationError

from followredirects.exceptions import ConfigurationError
from followredirects.policies import CookiePolicy, RedirectConfig


def test_defaults() -> None:
    config = RedirectConfig()
    assert config.limit == 3
    assert config.standards_compliant is False
    assert config.cookies is CookiePolicy.NONE
    assert config.cookies_enabled is False


def test_cookie_policy_accepts_strings_and_name_lists() -> None:
    assert RedirectConfig(cookies="all").cookies is CookiePolicy.ALL
    assert RedirectConfig(cookies="none").cookies is CookiePolicy.NONE
    config = RedirectConfig(cookies=["session", "csrf"])
    assert config.cookies == ("session", "csrf")
    assert config.cookies_enabled is True


def test_bare_cookie_name_string_is_rejected() -> None:
    with pytest.raises(ValidationError):
        RedirectConfig(cookies="session")


def test_build_reports_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        RedirectConfig.build(limit=-1)
    with pytest.raises(ConfigurationError):
        RedirectConfig.build(cookies=[""])


def test_config_is_frozen() -> None:
    config = RedirectConfig()
    with pytest.raises(ValidationError):
        config.limit = 10  # type: ignore[misc]


def test_convert_to_get_statuses_depend_on_compliance() -> None:
    assert RedirectConfig().convert_to_get_statuses() == {301, 302, 303}
    assert RedirectConfig(standards_compliant=True).convert_to_get_statuses() == {303}
