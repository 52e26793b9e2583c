import pytest
from pydantic import ValidationError

from cv_checker.settings import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("CV_CHECKER_VERIFICATION_POLICY", raising=False)
    settings = Settings(_env_file=None)
    assert settings.crossref_base_url == "https://api.crossref.org"
    assert settings.auto_select_margin == 0.1
    assert settings.verification_policy == "alignment"
    assert settings.user_agent == "cv-checker/0.1"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CV_CHECKER_VERIFICATION_POLICY", "owner_position")
    monkeypatch.setenv("CV_CHECKER_LOOKUP_MAX_WORKERS", "4")
    monkeypatch.setenv("CV_CHECKER_CROSSREF_MAILTO", "me@example.org")
    settings = Settings(_env_file=None)
    assert settings.verification_policy == "owner_position"
    assert settings.lookup_max_workers == 4
    assert settings.user_agent == "cv-checker/0.1 (mailto:me@example.org)"


def test_invalid_policy_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, verification_policy="fuzzy")
