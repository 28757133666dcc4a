"""Tests for the CVData schema validator."""

import yaml

from resume_builder.domain import validate_cv_data


def test_sample_resume_is_valid(sample_resume):
    assert validate_cv_data(yaml.safe_load(sample_resume)) == []


def test_non_mapping():
    assert validate_cv_data(["a"]) == ["document: must be a mapping"]
    assert validate_cv_data(None) == ["document: must be a mapping"]


def test_missing_sections_reported_by_location():
    problems = validate_cv_data({"header": {"name": "Jane"}})
    locations = {problem.split(":")[0] for problem in problems}
    assert {"workExperience", "profile", "technical"} <= locations


def test_link_scheme_rejected(sample_resume):
    data = yaml.safe_load(sample_resume)
    data["profile"]["links"][0]["link"] = "https://github.com/jane"

    problems = validate_cv_data(data)
    assert len(problems) == 1
    assert problems[0].startswith("profile.links.0.link:")
    assert "URL must not include http:// or https://" in problems[0]


def test_extra_fields_allowed(sample_resume):
    data = yaml.safe_load(sample_resume)
    data["customSection"] = {"anything": True}
    assert validate_cv_data(data) == []
