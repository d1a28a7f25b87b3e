"""
Shared constants for chart loading, origin metrics, timeline playback and pins.

Usage:
- `CHART_START_DATE`: ISO lower bound applied by the globalization/universe views.
- `IGNORED_ORIGIN_CODES`: aggregate/unknown country codes dropped during normalization.
- `TOP_METRICS_N`, `TOP_PIN_N`, `WINDOW_WEEKS`: per-week slice sizes and pin window.
- `PLAYBACK_SPEED_*`: tick interval bounds (milliseconds) for timeline playback.
- `ISO_TO_NUMERIC_ID`: ISO alpha-2 → ISO numeric ids used by world-atlas features.
- `REGION_BY_ISO`, `SUPER_GENRE_ORDER`: grouping labels for pins and legends.

These values are referenced by the normalizer, aggregator, pin builders and the
CLI; keep them stable unless updating downstream renderers too.
"""
from __future__ import annotations

CHART_START_DATE = "1980-01-01"
UNKNOWN_LABEL = "Unknown"
HOME_COUNTRY = "US"

RANK_MIN = 1
RANK_MAX_HOT100 = 100
RANK_MAX_BB200 = 200

IGNORED_ORIGIN_CODES = frozenset(
    {
        "XW",
        "XE",
        "AF",
        "EU",
        "AS",
        "OC",
        "NA",
        "SA",
        "XX",
        "ZZ",
        "AQ",
    }
)

TOP_METRICS_N = 100
TOP_PIN_N = 10
TOP_TABLE_N = 10
WINDOW_WEEKS = 8

# (min, max) ranges accepted from UI inputs.
TOP_PIN_RANGE = (1, 50)
WINDOW_WEEKS_RANGE = (0, 26)

PLAYBACK_SPEED_DEFAULT_MS = 200
PLAYBACK_SPEED_MIN_MS = 50
PLAYBACK_SPEED_MAX_MS = 2000

# Cumulative-share choropleth ceiling percentile.
CUMULATIVE_SHARE_PERCENTILE = 0.95

# Geographic view pseudo-coordinates (degrees).
PIN_LAT_RANGE = (-60.0, 75.0)
PIN_LON_RANGE = (-170.0, 170.0)

ISO_TO_NUMERIC_ID = {
    "US": 840,
    "GB": 826,
    "CA": 124,
    "AU": 36,
    "DE": 276,
    "FR": 250,
    "BR": 76,
    "JP": 392,
    "KR": 410,
    "CN": 156,
    "IN": 356,
    "IT": 380,
    "ES": 724,
    "NL": 528,
    "SE": 752,
    "NO": 578,
    "FI": 246,
    "DK": 208,
    "RU": 643,
    "MX": 484,
    "AR": 32,
    "CL": 152,
    "CO": 170,
    "ZA": 710,
    "NG": 566,
    "EG": 818,
    "SA": 682,
    "TR": 792,
    "IL": 376,
    "IE": 372,
    "NZ": 554,
}

REGION_OTHER = "Other"
REGIONS = ["Africa", "Americas", "Asia", "Europe", "Oceania", "Middle East", REGION_OTHER]

REGION_BY_ISO = {
    "US": "Americas",
    "PR": "Americas",
    "CA": "Americas",
    "MX": "Americas",
    "BR": "Americas",
    "AR": "Americas",
    "CL": "Americas",
    "CO": "Americas",
    "PE": "Americas",
    "VE": "Americas",
    "UY": "Americas",
    "CR": "Americas",
    "JM": "Americas",
    "GB": "Europe",
    "UK": "Europe",
    "IE": "Europe",
    "FR": "Europe",
    "DE": "Europe",
    "ES": "Europe",
    "IT": "Europe",
    "NL": "Europe",
    "BE": "Europe",
    "SE": "Europe",
    "NO": "Europe",
    "FI": "Europe",
    "DK": "Europe",
    "CH": "Europe",
    "AT": "Europe",
    "GR": "Europe",
    "PT": "Europe",
    "PL": "Europe",
    "UA": "Europe",
    "RU": "Europe",
    "KR": "Asia",
    "CN": "Asia",
    "TW": "Asia",
    "JP": "Asia",
    "IN": "Asia",
    "PK": "Asia",
    "BD": "Asia",
    "LK": "Asia",
    "TH": "Asia",
    "VN": "Asia",
    "ID": "Asia",
    "SG": "Asia",
    "HK": "Asia",
    "MY": "Asia",
    "PH": "Asia",
    "AU": "Oceania",
    "NZ": "Oceania",
    "SA": "Middle East",
    "AE": "Middle East",
    "QA": "Middle East",
    "KW": "Middle East",
    "BH": "Middle East",
    "OM": "Middle East",
    "IL": "Middle East",
    "TR": "Middle East",
    "ZA": "Africa",
    "NG": "Africa",
    "GH": "Africa",
    "CI": "Africa",
    "EG": "Africa",
    "MA": "Africa",
    "DZ": "Africa",
    "TN": "Africa",
    "ET": "Africa",
    "KE": "Africa",
    "SN": "Africa",
}

SUPER_GENRE_OTHER = "Other/Unknown"
SUPER_GENRE_ORDER = [
    "Pop",
    "Hip-Hop/Rap",
    "Rock/Metal",
    "Electronic/Dance",
    "R&B/Soul/Funk",
    "Country/Folk/Americana",
    "Latin",
    "Reggae/Caribbean",
    "Jazz/Blues",
    SUPER_GENRE_OTHER,
]

# Ordered (super_genre, keywords); first match wins, Pop is checked last.
SUPER_GENRE_KEYWORDS = [
    ("Hip-Hop/Rap", ("hip hop", "rap", "drill", "trap", "grime")),
    ("Rock/Metal", ("rock", "metal", "punk", "grunge", "emo")),
    ("Electronic/Dance", ("edm", "electro", "house", "trance", "techno", "dance", "dubstep", "euro")),
    ("R&B/Soul/Funk", ("r&b", "soul", "motown", "funk", "quiet storm")),
    ("Country/Folk/Americana", ("country", "americana", "bluegrass", "folk")),
    ("Latin", ("latin", "reggaeton", "bachata", "merengue", "cumbia", "vallenato", "español")),
    ("Reggae/Caribbean", ("reggae", "dancehall", "soca", "calypso", "ragga")),
    ("Jazz/Blues", ("jazz", "swing", "bossa")),
    ("Pop", ("pop", "disco", "new wave", "synth")),
]
