# tests/test_dates.py
import pytest

from resume_optimizer.optimizer.dates import DateNormalizer, normalize_date_range


@pytest.mark.parametrize('raw,expected', [
    ('2020 - 2022', 'Jan 2020 - Dec 2022'),
    ('March 2021 to now', 'Mar 2021 - Present'),
    ('Jun 2019 – Aug 2021', 'Jun 2019 - Aug 2021'),
    ('January 2018 - current', 'Jan 2018 - Present'),
    ('2021 - Present', 'Jan 2021 - Present'),
])
def test_ranges_are_normalized(raw, expected):
    assert DateNormalizer().normalize_range(raw) == expected


@pytest.mark.parametrize('raw', [
    'Jan 2020 - Present',
    'Mar 2019 - Dec 2021',
    'Expected May 2026',
    '2019',
])
def test_canonical_values_are_unchanged(raw):
    assert normalize_date_range(raw) == raw


def test_unparseable_value_is_returned_as_is():
    assert normalize_date_range('sometime') == 'sometime'
    assert normalize_date_range('a - b - c') == 'a - b - c'


@pytest.mark.parametrize('raw', ['', '   ', None])
def test_empty_values(raw):
    assert normalize_date_range(raw) == ''
