"""
Named report views over a RecordStore.

Every view is a plain function of the store and is recomputed on each call;
nothing is cached between calls, so a changed classifier or a new store is
picked up immediately.
"""
import logging
from typing import Callable, Dict, List

from covid_views.aggregate import running_total, with_ratio
from covid_views.classifier import LocationClass, PatternRule
from covid_views.dataframe import DataFrame
from covid_views.records import KEY, RecordStore

logger = logging.getLogger(__name__)

VACCINATED_COL = "new_people_vaccinated_smoothed"


def join(cases: DataFrame, vaccinations: DataFrame, how: str = "inner") -> DataFrame:
    """
    Pair case rows with vaccination rows on (location, date).

    ``how="inner"`` drops case rows without a vaccination match,
    ``how="left"`` keeps them with the vaccination columns set to None.
    A repeated key on either side raises JoinKeyCollision.
    """
    return cases.join(vaccinations, on=KEY, how=how)


def countries(store: RecordStore) -> DataFrame:
    cases = store.cases
    return cases.filter([bool(c) for c in cases["continent"]])


def continents(store: RecordStore) -> DataFrame:
    cases = store.cases
    return cases.filter(store.classifier.mask(cases["location"], cases["continent"], LocationClass.AGGREGATE))


def _like(store: RecordStore, df: DataFrame, pattern: str) -> DataFrame:
    rule = PatternRule.from_like(pattern)
    case_sensitive = store.classifier.case_sensitive
    return df.filter([rule.matches(loc, case_sensitive) for loc in df["location"]])


def deaths_by_country(store: RecordStore) -> DataFrame:
    cols = ["continent", "location", "date", "new_deaths", "total_deaths"]
    return countries(store).select(cols).sort_values(KEY)


def deaths_by_continent(store: RecordStore) -> DataFrame:
    return continents(store).select(["location", "date", "total_deaths"]).sort_values(KEY)


def vaccinations_by_country(store: RecordStore) -> DataFrame:
    joined = join(countries(store), store.vaccinations, how="inner")
    # values are truncated to whole people before summing
    joined = running_total(joined, VACCINATED_COL, name="PeopleVaccinated", integer=True)
    cols = ["continent", "location", "date", "population", VACCINATED_COL, "PeopleVaccinated"]
    return joined.select(cols).sort_values(KEY)


def vaccinations_by_continent(store: RecordStore) -> DataFrame:
    joined = join(continents(store), store.vaccinations, how="inner")
    joined = running_total(joined, VACCINATED_COL, name="PopulationVaccinated", integer=True)
    cols = ["location", "date", "population", VACCINATED_COL, "PopulationVaccinated"]
    return joined.select(cols).sort_values(KEY)


def percent_vaccinated_by_country(store: RecordStore) -> DataFrame:
    return with_ratio(vaccinations_by_country(store), "PeopleVaccinated", "population", "PercentVaccinated")


def case_overview(store: RecordStore) -> DataFrame:
    cols = ["location", "date", "new_cases", "total_cases", "total_deaths", "population"]
    return countries(store).select(cols).sort_values(KEY)


def death_rate(store: RecordStore, location_like: str = "%states") -> DataFrame:
    """Share of cases that ended in death, per day, for locations matching a LIKE pattern."""
    df = _like(store, store.cases, location_like)
    df = with_ratio(df, "total_deaths", "total_cases", "PercentDeaths")
    return df.select(["location", "date", "total_cases", "total_deaths", "PercentDeaths"]).sort_values(KEY)


def infection_rate(store: RecordStore, location_like: str = "%states") -> DataFrame:
    """Share of the population that tested positive, per day."""
    df = _like(store, store.cases, location_like)
    df = with_ratio(df, "total_cases", "population", "PercentInfected")
    return df.select(["location", "date", "total_cases", "population", "PercentInfected"]).sort_values(KEY)


def infection_ranking(store: RecordStore) -> DataFrame:
    grouped = countries(store).groupby(["location", "population"]).agg({"total_cases": ["max"]})
    grouped = grouped.rename({"max_total_cases": "TotalInfected"})
    grouped = with_ratio(grouped, "TotalInfected", "population", "PercentInfected")
    return grouped.sort_values("PercentInfected", ascending=False)


def _death_ranking(df: DataFrame) -> DataFrame:
    grouped = df.groupby(["location"]).agg({"total_deaths": ["max"]})
    return grouped.rename({"max_total_deaths": "TotalDeaths"}).sort_values("TotalDeaths", ascending=False)


def death_ranking_by_country(store: RecordStore) -> DataFrame:
    return _death_ranking(countries(store))


def death_ranking_by_continent(store: RecordStore) -> DataFrame:
    return _death_ranking(continents(store))


def global_daily(store: RecordStore) -> DataFrame:
    """Worldwide new cases and deaths per day, summed over countries."""
    grouped = countries(store).groupby(["date"]).agg({"new_cases": ["sum"], "new_deaths": ["sum"]})
    grouped = grouped.rename({"sum_new_cases": "total_cases", "sum_new_deaths": "total_deaths"})
    grouped = with_ratio(grouped, "total_deaths", "total_cases", "PercentDeaths")
    return grouped.sort_values("date")


VIEWS: Dict[str, Callable[[RecordStore], DataFrame]] = {
    "DeathsByCountry": deaths_by_country,
    "DeathsByContinent": deaths_by_continent,
    "VaccinationsByCountry": vaccinations_by_country,
    "VaccinationsByContinent": vaccinations_by_continent,
    "PercentVaccinatedByCountry": percent_vaccinated_by_country,
    "CaseOverview": case_overview,
    "DeathRate": death_rate,
    "InfectionRate": infection_rate,
    "InfectionRanking": infection_ranking,
    "DeathRankingByCountry": death_ranking_by_country,
    "DeathRankingByContinent": death_ranking_by_continent,
    "GlobalDaily": global_daily,
}


def view_names() -> List[str]:
    return list(VIEWS)


def evaluate(name: str, store: RecordStore) -> DataFrame:
    if name not in VIEWS:
        raise KeyError(f"Unknown view '{name}'. Available: {view_names()}")
    result = VIEWS[name](store)
    logger.info("View %s -> %d rows", name, len(result))
    return result
