"""
Typed records and the in-memory record store.

Every raw row goes through ``coerce_number`` exactly once, here. Columns that
the source ships as text (deaths, smoothed vaccination counts) are lenient:
unreadable values become 0 and are counted. All other numeric columns are
strict and fail the load.
"""
import logging
from collections import Counter
from dataclasses import dataclass, fields
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from covid_views.classifier import Classifier
from covid_views.csv_parser import coerce_number, read_csv_header, read_csv_rows
from covid_views.dataframe import DataFrame
from covid_views.errors import FormatError

logger = logging.getLogger(__name__)

KEY = ["location", "date"]

Source = Union[str, Path, Iterable[Mapping[str, Any]]]


def parse_date(value: Any, row: Optional[int] = None, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = "" if value is None else str(value).strip()
    if not text:
        raise FormatError("Missing date", row, field)
    try:
        # SQL exports write "2021-01-01 00:00:00.000"
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        raise FormatError(f"Invalid date '{text}', expected YYYY-MM-DD", row, field) from None


def _text(row: Mapping[str, Any], name: str, row_number: Optional[int], required: bool) -> Optional[str]:
    if name not in row:
        if required:
            raise FormatError("Missing required field", row_number, name)
        return None
    value = row[name]
    text = "" if value is None else str(value).strip()
    if not text:
        if required:
            raise FormatError("Empty required field", row_number, name)
        return None
    return text


def _number(row: Mapping[str, Any], name: str, row_number: Optional[int],
            integer: bool, lenient: bool, coercions: Counter):
    if name not in row:
        return None
    value, flagged = coerce_number(row[name], integer=integer)
    if flagged:
        if not lenient:
            raise FormatError(f"Non-numeric value {row[name]!r}", row_number, name)
        coercions[name] += 1
    return value


@dataclass(frozen=True)
class CaseRecord:
    location: str
    date: date
    continent: Optional[str]
    population: Optional[int]
    new_cases: Optional[int]
    total_cases: Optional[int]
    new_deaths: Optional[int]
    total_deaths: Optional[int]

    TABLE = "cases"
    LENIENT = ("new_deaths", "total_deaths")

    @classmethod
    def from_row(cls, row: Mapping[str, Any], row_number: Optional[int] = None,
                 coercions: Optional[Counter] = None) -> 'CaseRecord':
        coercions = Counter() if coercions is None else coercions

        def num(name):
            return _number(row, name, row_number, True, name in cls.LENIENT, coercions)

        return cls(
            location=_text(row, "location", row_number, required=True),
            date=parse_date(row.get("date"), row_number),
            continent=_text(row, "continent", row_number, required=False),
            population=num("population"),
            new_cases=num("new_cases"),
            total_cases=num("total_cases"),
            new_deaths=num("new_deaths"),
            total_deaths=num("total_deaths"),
        )


@dataclass(frozen=True)
class VaccinationRecord:
    location: str
    date: date
    new_people_vaccinated_smoothed: Optional[float]
    new_vaccinations: Optional[float]

    TABLE = "vaccinations"
    LENIENT = ("new_people_vaccinated_smoothed", "new_vaccinations")

    @classmethod
    def from_row(cls, row: Mapping[str, Any], row_number: Optional[int] = None,
                 coercions: Optional[Counter] = None) -> 'VaccinationRecord':
        coercions = Counter() if coercions is None else coercions

        def num(name):
            return _number(row, name, row_number, False, name in cls.LENIENT, coercions)

        return cls(
            location=_text(row, "location", row_number, required=True),
            date=parse_date(row.get("date"), row_number),
            new_people_vaccinated_smoothed=num("new_people_vaccinated_smoothed"),
            new_vaccinations=num("new_vaccinations"),
        )


RecordType = Union[Type[CaseRecord], Type[VaccinationRecord]]


def record_columns(record_type: RecordType) -> List[str]:
    return [f.name for f in fields(record_type)]


def load(source: Source, record_type: RecordType, separator: str = ',',
         coercions: Optional[Dict[str, int]] = None) -> DataFrame:
    """
    Parse ``source`` into a column-major table of ``record_type`` fields.

    ``source`` is a CSV path or an iterable of mapping rows. Any format
    problem aborts the whole load with FormatError. Lenient columns that had
    to be zeroed are logged and, when ``coercions`` is given, added to it
    under ``"<table>.<column>"``.
    """
    columns = record_columns(record_type)

    if isinstance(source, (str, Path)):
        header = read_csv_header(source, separator)
        if not header:
            raise FormatError(f"File {source} has no header row")
        missing = [c for c in KEY if c not in header]
        if missing:
            raise FormatError(f"Missing required columns {missing} in {source}", field=missing[0])
        rows = read_csv_rows(source, separator)
        first_row = 2
    else:
        rows = source
        first_row = 1

    flagged = Counter()
    data = {c: [] for c in columns}
    for n, row in enumerate(rows, start=first_row):
        record = record_type.from_row(row, n, flagged)
        for c in columns:
            data[c].append(getattr(record, c))

    table = DataFrame(data)
    for name, count in sorted(flagged.items()):
        logger.warning("Coerced %d non-numeric '%s' values to 0 in %s", count, name, record_type.TABLE)
        if coercions is not None:
            key = f"{record_type.TABLE}.{name}"
            coercions[key] = coercions.get(key, 0) + count

    logger.info("Loaded %d %s rows", len(table), record_type.TABLE)
    return table


def load_cases(source: Source, separator: str = ',',
               coercions: Optional[Dict[str, int]] = None) -> DataFrame:
    return load(source, CaseRecord, separator, coercions)


def load_vaccinations(source: Source, separator: str = ',',
                      coercions: Optional[Dict[str, int]] = None) -> DataFrame:
    return load(source, VaccinationRecord, separator, coercions)


class RecordStore:
    """
    Owns the two loaded tables for the length of a run.

    Views only read ``cases`` and ``vaccinations``. Construction fails with
    JoinKeyCollision if either table repeats a (location, date) key.
    """

    def __init__(self, cases: DataFrame, vaccinations: DataFrame,
                 classifier: Optional[Classifier] = None,
                 coercions: Optional[Dict[str, int]] = None):
        cases.key_index(KEY, CaseRecord.TABLE)
        vaccinations.key_index(KEY, VaccinationRecord.TABLE)
        self.cases = cases
        self.vaccinations = vaccinations
        self.classifier = classifier if classifier is not None else Classifier()
        self.coercions = dict(coercions or {})

    def __repr__(self) -> str:
        return f"<RecordStore: {len(self.cases):,} case rows, {len(self.vaccinations):,} vaccination rows>"

    @classmethod
    def from_rows(cls, case_rows: Iterable[Mapping[str, Any]],
                  vaccination_rows: Iterable[Mapping[str, Any]],
                  classifier: Optional[Classifier] = None) -> 'RecordStore':
        coercions = {}
        cases = load_cases(case_rows, coercions=coercions)
        vaccinations = load_vaccinations(vaccination_rows, coercions=coercions)
        return cls(cases, vaccinations, classifier, coercions)

    @classmethod
    def from_files(cls, cases_path: Union[str, Path], vaccinations_path: Union[str, Path],
                   separator: str = ',', classifier: Optional[Classifier] = None) -> 'RecordStore':
        coercions = {}
        cases = load_cases(cases_path, separator, coercions)
        vaccinations = load_vaccinations(vaccinations_path, separator, coercions)
        return cls(cases, vaccinations, classifier, coercions)
