import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import plotly.graph_objects as go
import streamlit as st

from covid_views import config
from covid_views.classifier import Classifier, PatternRule
from covid_views.dataframe import DataFrame
from covid_views.errors import FormatError, JoinKeyCollision
from covid_views.records import RecordStore
from covid_views.views import evaluate

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

DEFAULT_COUNTRIES = ['United States', 'India', 'Brazil', 'United Kingdom', 'Canada']
MAX_DISPLAY_ROWS = 100
PERFORMANCE_WARNING_MS = 1000

st.set_page_config(
    page_title="COVID-19 Exploration Views",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2rem;
        font-weight: 600;
        text-align: center;
        margin-bottom: 1rem;
    }

    .section-header {
        font-size: 1.5rem;
        font-weight: 600;
        margin-top: 1.5rem;
        margin-bottom: 1rem;
    }
</style>
""", unsafe_allow_html=True)

PRETTY = {
    "total_cases": "Total Cases (Cumulative)",
    "total_deaths": "Total Deaths (Cumulative)",
    "new_cases": "Daily New Cases",
    "new_deaths": "Daily New Deaths",
    "new_people_vaccinated_smoothed": "Newly Vaccinated (7-Day Avg)",
    "PeopleVaccinated": "People Vaccinated To Date",
    "PopulationVaccinated": "People Vaccinated To Date",
    "PercentVaccinated": "Vaccinated (% of Population)",
    "PercentDeaths": "Deaths (% of Cases)",
    "PercentInfected": "Infected (% of Population)",
    "TotalInfected": "Total Infected",
    "TotalDeaths": "Total Deaths",
}

# view name -> (tab title, cumulative column to chart or None)
TIME_SERIES_VIEWS: Dict[str, Tuple[str, Optional[str]]] = {
    "DeathsByCountry": ("Deaths by Country", "total_deaths"),
    "DeathsByContinent": ("Deaths by Continent", "total_deaths"),
    "VaccinationsByCountry": ("Vaccinations by Country", "PeopleVaccinated"),
    "VaccinationsByContinent": ("Vaccinations by Continent", "PopulationVaccinated"),
    "PercentVaccinatedByCountry": ("% Vaccinated", "PercentVaccinated"),
    "CaseOverview": ("Case Overview", "total_cases"),
    "DeathRate": ("Death Rate", "PercentDeaths"),
    "InfectionRate": ("Infection Rate", "PercentInfected"),
}
# views already narrowed to a few locations; chart every one of them
CHART_ALL_LOCATIONS = {"DeathsByContinent", "VaccinationsByContinent", "DeathRate", "InfectionRate"}
RANKING_VIEWS = ["InfectionRanking", "DeathRankingByCountry", "DeathRankingByContinent"]


@st.cache_resource
def _load_store(cases_path: Path, vaccinations_path: Path, delimiter: str = ','):
    try:
        with st.spinner(f"Loading {cases_path.name} and {vaccinations_path.name}..."):
            return RecordStore.from_files(cases_path, vaccinations_path, separator=delimiter)
    except FileNotFoundError as e:
        st.error(f"File not found: {e}")
    except (FormatError, JoinKeyCollision) as e:
        st.error(f"Failed to load data: {e}")
    return None


def _to_st_format(df: DataFrame, limit: int = MAX_DISPLAY_ROWS) -> Dict[str, List]:
    return {PRETTY.get(c, c): df[c][:limit] for c in df.columns}


def _line_chart(df: DataFrame, metric: str, locations: List[str], title: str) -> go.Figure:
    fig = go.Figure()
    for loc in locations:
        mask = [l == loc for l in df["location"]]
        part = df.filter(mask)
        if len(part) == 0:
            continue
        fig.add_trace(go.Scatter(
            x=part["date"],
            y=part[metric],
            mode='lines',
            name=loc,
            line=dict(width=2)
        ))
    fig.update_layout(
        title=title,
        xaxis_title="Date",
        yaxis_title=PRETTY.get(metric, metric),
        hovermode='x unified',
        height=400,
        showlegend=True
    )
    return fig


def _timed(name: str, store: RecordStore) -> Tuple[DataFrame, float]:
    start_time = time.time()
    result = evaluate(name, store)
    elapsed_ms = (time.time() - start_time) * 1000
    if elapsed_ms > PERFORMANCE_WARNING_MS:
        logger.warning("View %s took %.0f ms", name, elapsed_ms)
    return result, elapsed_ms


st.markdown('<h1 class="main-header">COVID-19 Exploration Views</h1>', unsafe_allow_html=True)

with st.sidebar:
    st.header("Data Settings")

    deaths_file = st.text_input("Cases/Deaths CSV", value=config.DEATHS_FILE)
    vaccinations_file = st.text_input("Vaccinations CSV", value=config.VACCINATIONS_FILE)

    sep_mode = st.selectbox("Separator Style", ["Comma (,)", "Tab (\\t)", "Semicolon (;)", "Custom"])

    if sep_mode == "Comma (,)":
        sep_input = ","
    elif sep_mode == "Tab (\\t)":
        sep_input = "\t"
    elif sep_mode == "Semicolon (;)":
        sep_input = ";"
    else:
        sep_input = st.text_input("Enter Custom Separator", value="|", max_chars=1)

    st.markdown("---")
    st.header("Non-Continent Patterns")
    patterns_text = st.text_input(
        "LIKE patterns (comma separated)",
        value=",".join(config.not_continent_patterns()),
        help="Empty-continent locations matching any pattern are left out of continent views"
    )
    case_sensitive = st.checkbox("Case-sensitive matching", value=config.pattern_case_sensitive())

STORE = _load_store(config.DATA_DIR / deaths_file, config.DATA_DIR / vaccinations_file, delimiter=sep_input)

if STORE is None:
    st.stop()

try:
    classifier = Classifier(
        [PatternRule.from_like(p.strip()) for p in patterns_text.split(",") if p.strip()],
        case_sensitive=case_sensitive,
    )
except ValueError as e:
    st.error(f"Invalid pattern: {e}")
    st.stop()

# cached store is shared between sessions; never mutate it
STORE = RecordStore(STORE.cases, STORE.vaccinations, classifier, STORE.coercions)

if STORE.coercions:
    details = ", ".join(f"{k}: {v:,}" for k, v in sorted(STORE.coercions.items()))
    st.warning(f"Non-numeric values were read as 0 ({details})")

all_countries = sorted(set(STORE.cases["location"]))
with st.sidebar:
    st.markdown("---")
    st.header("Location Selection")
    selected_locations = st.multiselect(
        "Locations to chart",
        options=all_countries,
        default=[c for c in DEFAULT_COUNTRIES if c in all_countries],
        key="selected_locations"
    )

tab_names = [title for title, _ in TIME_SERIES_VIEWS.values()] + ["Rankings", "Worldwide"]
tabs = st.tabs(tab_names)

for tab, (view_name, (title, metric)) in zip(tabs, TIME_SERIES_VIEWS.items()):
    with tab:
        st.markdown(f'<h2 class="section-header">{title}</h2>', unsafe_allow_html=True)
        result, elapsed_ms = _timed(view_name, STORE)
        st.caption(f"{view_name}: {len(result):,} rows in {elapsed_ms:.1f} ms")

        locations = sorted(set(result["location"]))
        if view_name in CHART_ALL_LOCATIONS:
            chart_locations = locations
        else:
            chart_locations = [l for l in selected_locations if l in set(locations)]

        if metric and chart_locations:
            st.plotly_chart(_line_chart(result, metric, chart_locations, title), use_container_width=True)
        elif not chart_locations:
            st.info("No locations selected for this view.")

        st.dataframe(_to_st_format(result), width='stretch')

with tabs[len(TIME_SERIES_VIEWS)]:
    st.markdown('<h2 class="section-header">Rankings</h2>', unsafe_allow_html=True)
    for view_name in RANKING_VIEWS:
        result, elapsed_ms = _timed(view_name, STORE)
        st.markdown(f"#### {view_name}")
        st.caption(f"{len(result):,} rows in {elapsed_ms:.1f} ms")
        st.dataframe(_to_st_format(result), width='stretch')

with tabs[len(TIME_SERIES_VIEWS) + 1]:
    st.markdown('<h2 class="section-header">Worldwide</h2>', unsafe_allow_html=True)
    daily, elapsed_ms = _timed("GlobalDaily", STORE)
    st.caption(f"GlobalDaily: {len(daily):,} rows in {elapsed_ms:.1f} ms")
    if len(daily) > 0:
        fig = go.Figure()
        fig.add_trace(go.Scatter(x=daily["date"], y=daily["PercentDeaths"], mode='lines', name="Deaths (% of Cases)"))
        fig.update_layout(title="Daily Deaths as % of Daily Cases", xaxis_title="Date", height=400)
        st.plotly_chart(fig, use_container_width=True)
    st.dataframe(_to_st_format(daily), width='stretch')
