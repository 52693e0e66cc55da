"""Property-based tests for reservation and pricing invariants."""

from datetime import date, datetime, timedelta

from hypothesis import assume, given
from hypothesis import strategies as st

from vip_transfer.services.catalog_service import assign_round_robin
from vip_transfer.services.rate_service import build_rate_table, parse_rate
from vip_transfer.services.reservation_service import derive_passenger_count, violates_lead_time
from vip_transfer.services.settings_service import resolve_settings, split_language_suffix

# Strategies for generating test data
head_counts = st.one_of(st.none(), st.integers(min_value=0, max_value=99))
rates = st.floats(min_value=0.0001, max_value=100000, allow_nan=False, allow_infinity=False)
stored_rates = st.dictionaries(
    st.sampled_from(["TRY", "USD", "GBP", "CHF", "JPY"]),
    st.one_of(st.none(), st.floats(min_value=-10, max_value=1000, allow_nan=False)),
)
defaults = st.fixed_dictionaries({"TRY": rates, "USD": rates, "GBP": rates})
times = st.tuples(st.integers(min_value=0, max_value=23), st.integers(min_value=0, max_value=59))
now_values = st.datetimes(min_value=datetime(2026, 1, 1), max_value=datetime(2026, 12, 30))


@given(adults=head_counts, children=head_counts)
def test_passenger_count_is_at_least_one(adults, children):
    count = derive_passenger_count(adults, children)

    assert count >= 1
    assert count >= (0 if adults is None else adults)


@given(stored=stored_rates, fallback=defaults)
def test_rate_table_has_exactly_canonical_positive_rates(stored, fallback):
    table = build_rate_table(stored, fallback)

    assert set(table) == {"EUR", "TRY", "USD", "GBP"}
    assert table["EUR"] == 1.0
    assert all(value > 0 for value in table.values())


@given(value=rates)
def test_decimal_comma_and_point_agree(value):
    text = f"{value:.4f}"

    assert parse_rate(text) == parse_rate(text.replace(".", ","))


@given(now=now_values, first=times, second=times)
def test_lead_time_is_monotonic(now, first, second):
    """A later pickup never violates the lead time when an earlier one does not."""
    assume(first <= second)
    day = (now + timedelta(hours=1)).date()
    earlier = f"{first[0]:02d}:{first[1]:02d}"
    later = f"{second[0]:02d}:{second[1]:02d}"

    if not violates_lead_time(day, earlier, now, 60):
        assert not violates_lead_time(day, later, now, 60)


@given(now=now_values, time=times)
def test_next_day_pickups_beyond_lead_time_never_violate(now, time):
    day = now.date() + timedelta(days=2)

    assert not violates_lead_time(day, f"{time[0]:02d}:{time[1]:02d}", now, 60)


@given(vehicle_ids=st.lists(st.integers(min_value=1), unique=True, max_size=30),
       files=st.lists(st.text(min_size=1, max_size=10), min_size=1, max_size=5))
def test_round_robin_assigns_every_vehicle(vehicle_ids, files):
    assigned = assign_round_robin(vehicle_ids, files)

    assert list(assigned) == vehicle_ids
    assert all(name in files for name in assigned.values())
    for index, vehicle_id in enumerate(vehicle_ids[: len(files)]):
        assert assigned[vehicle_id] == files[index]


@given(values=st.dictionaries(
    st.sampled_from(["hero_title", "hero_title_de", "hero_title_ru", "Phone", "Email_en"]),
    st.text(max_size=20),
), lang=st.sampled_from(["tr", "en", "de", "ru"]))
def test_resolved_settings_have_no_language_suffix(values, lang):
    resolved = resolve_settings(values, lang)

    assert all(split_language_suffix(key)[1] is None for key in resolved)


def test_past_date_always_violates():
    assert violates_lead_time(date(2026, 5, 31), "23:59", datetime(2026, 6, 1, 0, 0), 60)
