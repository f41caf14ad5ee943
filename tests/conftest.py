import pytest

from covid_views.classifier import Classifier, PatternRule
from covid_views.records import RecordStore


def case_row(location, date, continent="", population=1000, new_cases=0,
             total_cases=0, new_deaths=0, total_deaths=0):
    return {
        "location": location,
        "date": date,
        "continent": continent,
        "population": str(population) if population is not None else "",
        "new_cases": str(new_cases) if new_cases is not None else "",
        "total_cases": str(total_cases) if total_cases is not None else "",
        "new_deaths": str(new_deaths) if new_deaths is not None else "",
        "total_deaths": str(total_deaths) if total_deaths is not None else "",
    }


def vacc_row(location, date, smoothed=0, new_vaccinations=0):
    return {
        "location": location,
        "date": date,
        "new_people_vaccinated_smoothed": str(smoothed) if smoothed is not None else "",
        "new_vaccinations": str(new_vaccinations) if new_vaccinations is not None else "",
    }


@pytest.fixture
def classifier():
    return Classifier(
        [PatternRule("suffix", "income"), PatternRule("prefix", "w"), PatternRule("contains", "ion")],
        case_sensitive=False,
    )


@pytest.fixture
def case_rows():
    return [
        case_row("United States", "2021-01-02", "North America", 330, 5, 15, 1, 3),
        case_row("United States", "2021-01-01", "North America", 330, 10, 10, 2, 2),
        case_row("Canada", "2021-01-01", "North America", 38, 4, 4, 0, 0),
        case_row("Canada", "2021-01-02", "North America", 38, 6, 10, 1, 1),
        case_row("Europe", "2021-01-01", "", 750, 20, 20, 3, 3),
        case_row("Europe", "2021-01-02", "", 750, 30, 50, 4, 7),
        case_row("World", "2021-01-01", "", 7800, 100, 100, 9, 9),
        case_row("High income", "2021-01-01", "", 1200, 50, 50, 5, 5),
        case_row("European Union", "2021-01-01", "", 450, 15, 15, 2, 2),
    ]


@pytest.fixture
def vaccination_rows():
    return [
        vacc_row("United States", "2021-01-01", 100.7, 120),
        vacc_row("United States", "2021-01-02", 50, 60),
        vacc_row("Canada", "2021-01-02", 8, 9),
        vacc_row("Europe", "2021-01-01", 200, 210),
        vacc_row("Europe", "2021-01-02", 300, 310),
        vacc_row("World", "2021-01-01", 1000, 1100),
    ]


@pytest.fixture
def store(case_rows, vaccination_rows, classifier):
    return RecordStore.from_rows(case_rows, vaccination_rows, classifier)
