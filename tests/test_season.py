from datetime import date, datetime

import pytest

from checkin_backend.core.season import season_for


@pytest.mark.parametrize(
    "day, expected_name, expected_start",
    [
        (date(2025, 1, 10), "Spring", date(2025, 2, 15)),   # between seasons, Spring is next
        (date(2025, 2, 14), "Spring", date(2025, 2, 15)),
        (date(2025, 2, 15), "Spring", date(2025, 2, 15)),
        (date(2025, 6, 30), "Spring", date(2025, 2, 15)),
        (date(2025, 7, 4), "Fall", date(2025, 8, 1)),      # between seasons, Fall is next
        (date(2025, 8, 1), "Fall", date(2025, 8, 1)),
        (date(2025, 12, 31), "Fall", date(2025, 8, 1)),
    ],
)
def test_season_for(day, expected_name, expected_start):
    season = season_for(day)
    assert season.name == expected_name
    assert season.start == expected_start
    assert season.year == 2025


def test_season_end_dates():
    spring = season_for(date(2025, 3, 1))
    fall = season_for(date(2025, 9, 1))
    assert spring.end == date(2025, 6, 30)
    assert fall.end == date(2025, 12, 31)


def test_cutoff_is_midnight_of_season_start():
    assert season_for(datetime(2025, 9, 20, 18, 30)).cutoff() == datetime(2025, 8, 1)
