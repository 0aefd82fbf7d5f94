# tests/test_jd_extractor.py
import pytest

from resume_optimizer.ats.jd_extractor import JDExtractor, extract_profile
from resume_optimizer.ats.models import Importance, KeywordCategory, Seniority

from conftest import DEVOPS_JD


def _keyword(profile, term):
    return next((k for k in profile.keywords if k.term == term), None)


def test_extracts_devops_profile(devops_profile):
    terms = {k.term for k in devops_profile.keywords}
    assert {'aws', 'kubernetes', 'terraform', 'docker', 'python', 'bash', 'jenkins', 'ci/cd'} <= terms
    assert devops_profile.role_title == 'Senior DevOps Engineer'
    assert devops_profile.seniority == Seniority.SENIOR
    assert devops_profile.years_required == 5
    assert devops_profile.is_technical


def test_soft_skills_are_separated(devops_profile):
    soft = {k.term for k in devops_profile.soft_skills}
    assert soft == {'collaboration', 'communication'}
    assert all(k.category == KeywordCategory.SOFT_SKILL for k in devops_profile.soft_skills)
    assert not soft & {k.term for k in devops_profile.hard_skills}


def test_required_cue_escalates_to_critical(config):
    profile = JDExtractor(config).extract("Python is required for this role.")
    assert _keyword(profile, 'python').importance == Importance.CRITICAL


def test_strong_cue_gives_high(config):
    profile = JDExtractor(config).extract("Strong Terraform knowledge.")
    assert _keyword(profile, 'terraform').importance == Importance.HIGH


def test_frequency_fallback(config):
    extractor = JDExtractor(config)
    three = extractor.extract("We use Docker. Docker runs everything. Docker everywhere.")
    five = extractor.extract("Docker. " * 5)
    two = extractor.extract("Redis caches. Redis queues.")
    one = extractor.extract("We use Nginx.")
    assert _keyword(three, 'docker').importance == Importance.HIGH
    assert _keyword(five, 'docker').importance == Importance.CRITICAL
    assert _keyword(two, 'redis').importance == Importance.MEDIUM
    assert _keyword(one, 'nginx').importance == Importance.LOW


def test_preferred_cue_never_above_medium(config):
    extractor = JDExtractor(config)
    frequent = extractor.extract("Redis is preferred. Redis Redis Redis Redis")
    rare = extractor.extract("Terraform experience is preferred.")
    assert _keyword(frequent, 'redis').frequency == 5
    assert _keyword(frequent, 'redis').importance == Importance.MEDIUM
    assert _keyword(rare, 'terraform').importance == Importance.LOW


def test_cue_outside_context_window_is_ignored(config):
    filler = "x " * 120
    profile = JDExtractor(config).extract(f"Required: a great attitude. {filler} We use Docker.")
    assert _keyword(profile, 'docker').importance == Importance.LOW


def test_keywords_ordered_by_importance(devops_profile):
    ranks = [k.importance.rank for k in devops_profile.keywords]
    assert ranks == sorted(ranks)


@pytest.mark.parametrize('text,expected', [
    ("Staff Engineer, platform team", Seniority.PRINCIPAL),
    ("Lead Developer for payments", Seniority.LEAD),
    ("Senior Backend Engineer", Seniority.SENIOR),
    ("Junior Frontend Developer", Seniority.ENTRY),
    ("Graduate program for new engineers", Seniority.ENTRY),
    ("Backend Engineer building APIs", Seniority.MID),
])
def test_seniority_priority(config, text, expected):
    assert JDExtractor(config).extract(text).seniority == expected


def test_seniority_scan_prefers_higher_level(config):
    profile = JDExtractor(config).extract("Principal engineer mentoring senior and junior staff")
    assert profile.seniority == Seniority.PRINCIPAL


@pytest.mark.parametrize('text', ["", "   \n\t", None])
def test_empty_jd_does_not_throw(config, text):
    profile = JDExtractor(config).extract(text)
    assert profile.keywords == ()
    assert profile.seniority == Seniority.MID
    assert profile.role_title


def test_go_is_case_sensitive(config):
    extractor = JDExtractor(config)
    assert _keyword(extractor.extract("Experience with Go and Kubernetes"), 'go') is not None
    assert _keyword(extractor.extract("We go above and beyond for customers"), 'go') is None


def test_r_does_not_match_r_and_d(config):
    extractor = JDExtractor(config)
    assert _keyword(extractor.extract("Join our R&D team. Python is required."), 'r') is None
    assert _keyword(extractor.extract("Statistics in R and Python required"), 'r') is not None


def test_aliases_match_canonical_term(config):
    profile = JDExtractor(config).extract("Run k8s clusters backed by Postgres")
    assert _keyword(profile, 'kubernetes').display == 'Kubernetes'
    assert _keyword(profile, 'postgresql').display == 'PostgreSQL'


def test_explicit_role_overrides_title(config):
    profile = JDExtractor(config).extract(DEVOPS_JD, "Platform Engineer")
    assert profile.role_title == "Platform Engineer"
    assert 'platform' in profile.role_terms


def test_extraction_is_memoized(config):
    extractor = JDExtractor(config)
    assert extractor.extract(DEVOPS_JD) is extractor.extract(DEVOPS_JD)


def test_extract_profile_wrapper(config):
    assert extract_profile(DEVOPS_JD, config=config) == JDExtractor(config).extract(DEVOPS_JD)
