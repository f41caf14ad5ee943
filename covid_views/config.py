import os
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("COVID_DATA_DIR", str(BASE_DIR / "data")))
DEATHS_FILE = os.getenv("COVID_DEATHS_FILE", "CovidDeaths.csv")
VACCINATIONS_FILE = os.getenv("COVID_VACCINATIONS_FILE", "CovidVaccinations.csv")

# Locations with an empty continent that are not continents either:
# income brackets, "World", and unions such as "European Union".
DEFAULT_NOT_CONTINENTS = "%income,w%,%ion%"

TRUTHY = {"1", "true", "yes", "on"}


def not_continent_patterns() -> List[str]:
    raw = os.getenv("COVID_NOT_CONTINENTS", DEFAULT_NOT_CONTINENTS)
    return [p.strip() for p in raw.split(",") if p.strip()]


def pattern_case_sensitive() -> bool:
    return os.getenv("COVID_PATTERN_CASE_SENSITIVE", "").strip().lower() in TRUTHY
