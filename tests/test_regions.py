from __future__ import annotations

import pytest

from ma_chart_engine.regions import region_for, to_super_genre


@pytest.mark.parametrize(
    "genre, expected",
    [
        ("Southern Hip Hop", "Hip-Hop/Rap"),
        ("pop rap", "Hip-Hop/Rap"),
        ("album rock", "Rock/Metal"),
        ("dance pop", "Electronic/Dance"),
        ("neo soul", "R&B/Soul/Funk"),
        ("contemporary country", "Country/Folk/Americana"),
        ("latin pop", "Latin"),
        ("roots reggae", "Reggae/Caribbean"),
        ("smooth jazz", "Jazz/Blues"),
        ("synthpop", "Pop"),
        ("polka", "Other/Unknown"),
        (None, "Other/Unknown"),
        ("", "Other/Unknown"),
    ],
)
def test_to_super_genre(genre, expected):
    assert to_super_genre(genre) == expected


def test_region_for():
    assert region_for("us") == "Americas"
    assert region_for("KR") == "Asia"
    assert region_for("TR") == "Middle East"
    assert region_for("ZZ") == "Other"
    assert region_for(None) == "Other"
