"""
Tests for the Patient No-Show Dashboard engine
Run with: python tests.py  (or pytest tests.py)
"""

import numpy as np
import pandas as pd
from config import *
from utils import *
from insights import *
from pipeline import compute_views, resolve_view


SAMPLE_CSV = """PatientId,Age,SMS_received,NoShow,ScheduledDay,AppointmentDay
1,25,1,1,2016-04-20 10:00:00,2016-05-04
2,27,0,0,2016-05-03 08:00:00,2016-05-04
3,62,1,0,2016-04-25T09:00:00Z,2016-05-09T00:00:00Z
4,,0,1,2016-05-10,2016-05-09
5,8,yes,0,,2016-05-11
6,45,1,abc,2016-05-01,not a date
"""


def load_sample():
    records, _ = load_appointments(SAMPLE_CSV)
    return records


def make_records(rows):
    """Normalized records from a list of field dicts"""
    records, _ = normalize_appointments(pd.DataFrame(rows))
    return records


# ---------------------------------------
# Record Normalizer
# ---------------------------------------
def test_header_cleaning_and_fuzzy_match():
    """BOMs, non-breaking spaces and punctuation in headers still resolve"""
    text = "\ufeffAge ,SMS\u00a0received,No Show,Appointment Day\n 30 ,1\u00a0,0,2016-05-04\n"
    records, info = load_appointments(text)

    assert len(records) == 1, f"Expected 1 record, got {len(records)}"
    row = records.iloc[0]
    assert row['Age'] == 30
    assert row['AgeGroup'] == '30-39', f"Got {row['AgeGroup']}"
    assert row['SMS_received'] == '1', f"Got {row['SMS_received']!r}"
    assert row['NoShow'] == 0
    assert row['Week'] == '2016-05-02', f"Got {row['Week']}"
    assert pd.isna(row['WaitingDays'])
    assert info['resolved_fields']['sms_received'] == ['SMS received']
    assert 'scheduled' in info['missing_fields']


def test_binary_flag_canonicalization():
    records = make_records({
        'SMS_received': ['1', ' 0 ', '1.0', 'yes', '', '2'],
        'NoShow': ['1', '0', 'abc', '', '0.0', '2']
    })

    assert records['SMS_received'].tolist() == ['1', '0', '1', 'yes', '', '2']

    no_show = records['NoShow']
    assert no_show.iloc[0] == 1 and no_show.iloc[1] == 0 and no_show.iloc[4] == 0
    assert no_show.iloc[[2, 3, 5]].isna().all(), "Garbage and out-of-range outcomes stay unresolved"


def test_age_group_derivation():
    records = make_records({
        'Age': ['25', '-1', '', '8', '100'],
        'AgeGroup': ['', '', '', '', '']
    })
    assert records['AgeGroup'].tolist() == ['20-29', UNKNOWN, UNKNOWN, '0-9', '100-109']

    kept = make_records({'Age': ['25'], 'AgeGroup': ['18-24']})
    assert kept['AgeGroup'].iloc[0] == '18-24', "An explicit age group wins over the derived one"


def test_malformed_rows_are_recovered():
    text = (
        "Age,SMS_received,NoShow,AppointmentDay\n"
        "30,1,0,2016-05-04\n"
        "41,0,1,2016-05-05,extra,fields\n"
        "52,1\n"
    )
    records, info = load_appointments(text)

    assert len(records) == 3, f"Expected 3 records, got {len(records)}"
    assert info['recovered_rows'] == 1
    assert records['NoShow'].iloc[1] == 1
    assert records['Week'].iloc[1] == '2016-05-02'
    assert pd.isna(records['NoShow'].iloc[2])
    assert records['Week'].iloc[2] == UNKNOWN


def test_empty_input():
    for text in ["", "   \n", "Age,NoShow\n"]:
        records, info = load_appointments(text)
        assert records.empty
        assert list(records.columns) == RECORD_COLUMNS
        assert calculate_kpis(records)['no_show_rate'] == 0.0


def test_headers_colliding_after_cleaning():
    """'Age' and 'Age ' clean to the same name; the first keeps it, the repeat gets a suffix"""
    for text in ["Age,Age ,NoShow\n30,31,1\n", "Age,Age\u00a0,NoShow\n30,31,1\n"]:
        records, info = load_appointments(text)

        assert len(records) == 1
        assert info['columns'] == ['Age', 'Age.1', 'NoShow'], f"Got {info['columns']}"
        assert records['Age'].iloc[0] == 30
        assert records['NoShow'].iloc[0] == 1

    assert unique_headers(['Week', 'Week', ' Week', 'Week.1']) == ['Week', 'Week.1', 'Week.2', 'Week.1.1']


def test_unbalanced_quote_does_not_swallow_rows():
    text = (
        "Age,SMS_received,NoShow,AppointmentDay\n"
        "30,1,0,2016-05-04\n"
        '41,"0,1,2016-05-05\n'
        "52,1,1,2016-05-11\n"
    )
    records, info = load_appointments(text)

    assert len(records) == 3, f"Expected 3 records, got {len(records)}"
    assert info['recovered_rows'] == 1
    assert records['NoShow'].tolist() == [0, 1, 1]
    assert records['SMS_received'].iloc[1] == '0'
    assert records['Week'].tolist() == ['2016-05-02', '2016-05-02', '2016-05-09']

    balanced = 'Name,NoShow\n"Smith, J",1\n"Jones, K",0\n'
    records, info = load_appointments(balanced)
    assert len(records) == 2 and info['recovered_rows'] == 0
    assert records['NoShow'].tolist() == [1, 0]


def test_normalized_record_invariants():
    records = load_sample()

    assert records['NoShow'].dropna().isin([0, 1]).all()
    assert (records['WaitingDays'].dropna() >= 0).all()
    assert (records['Week'] != '').all() and records['Week'].notna().all()
    assert records['SMS_received'].tolist() == ['1', '0', '1', '0', 'yes', '1']


def test_normalization_is_idempotent():
    records = load_sample()
    again, _ = normalize_appointments(records)
    pd.testing.assert_frame_equal(records, again, check_dtype=False)


# ---------------------------------------
# Feature Deriver
# ---------------------------------------
def test_explicit_waiting_days_win():
    row = {'WaitingDays': '5', 'ScheduledDay': '2016-04-19', 'AppointmentDay': '2016-04-29'}
    assert resolve_waiting_days(row) == 5

    row = {'AwaitingTime': '7', 'ScheduledDay': '2016-04-19', 'AppointmentDay': '2016-04-29'}
    assert resolve_waiting_days(row) == 7

    row = {'WaitingDays': 'n/a', 'AwaitingDays': '3'}
    assert resolve_waiting_days(row) == 3

    row = {'Waiting Days': '4'}
    assert resolve_waiting_days(row) == 4


def test_waiting_days_from_dates():
    row = {'ScheduledDay': '2016-04-19', 'AppointmentDay': '2016-04-29'}
    assert resolve_waiting_days(row) == 10

    row = {'ScheduledDay': '2016-04-29 18:38:08', 'AppointmentDay': '2016-04-29'}
    assert resolve_waiting_days(row) == 0, "Same-day bookings clamp to 0, not -1"

    row = {'Scheduled_Day': '2016-04-20T10:00:00Z', 'AppointmentDate': '2016-05-04T00:00:00Z'}
    assert resolve_waiting_days(row) == 13


def test_waiting_days_clamp_and_missing():
    assert resolve_waiting_days({'WaitingDays': '-3'}) == 0
    assert resolve_waiting_days({'AppointmentDay': '2016-04-29'}) is None
    assert resolve_waiting_days({'ScheduledDay': 'soon', 'AppointmentDay': '2016-04-29'}) is None


def test_scaled_waiting_column_is_ignored():
    row = {
        'WaitingDays_normalized': '0.42',
        'WaitingDays_': '0.13',
        'ScheduledDay': '2016-04-19',
        'AppointmentDay': '2016-04-29'
    }
    assert resolve_waiting_days(row) == 10


def test_week_derivation():
    # 2016-05-04 is a Wednesday, 2016-05-08 a Sunday
    assert resolve_week({'AppointmentDay': '2016-05-04'}) == '2016-05-02'
    assert resolve_week({'AppointmentDay': '2016-05-08'}) == '2016-05-02'
    assert resolve_week({'AppointmentDay': '2016-05-02'}) == '2016-05-02'
    assert resolve_week({'AppointmentDay': '2016-05-04T10:30:00Z'}) == '2016-05-02'

    assert resolve_week({'Week': 'W18', 'AppointmentDay': '2016-05-04'}) == 'W18'
    assert resolve_week({'Week': 'unknown', 'AppointmentDay': '2016-05-04'}) == '2016-05-02'
    assert resolve_week({'Week': '', 'AppointmentDay': 'not a date'}) == UNKNOWN
    assert resolve_week({}) == UNKNOWN


# ---------------------------------------
# Filter Engine
# ---------------------------------------
def test_filter_composition():
    records = load_sample()

    by_age = filter_appointments(records, update_filters(default_filters(), age_group='20-29'))
    assert len(by_age) == 2
    assert (by_age['AgeGroup'] == '20-29').all()

    both = filter_appointments(records, {'age_group': '20-29', 'sms_received': '1', 'week': ALL})
    assert both.index.tolist() == [0]

    unfiltered = filter_appointments(records, default_filters())
    pd.testing.assert_frame_equal(unfiltered, records)

    empty = filter_appointments(records, {'week': '1999-01-04'})
    assert empty.empty
    assert calculate_kpis(empty) == {'total': 0, 'no_shows': 0, 'shows': 0, 'no_show_rate': 0.0}


def test_filter_set_helpers():
    filters = default_filters()
    assert filters == {'age_group': ALL, 'sms_received': ALL, 'week': ALL}

    changed = update_filters(filters, sms_received='1')
    assert filters['sms_received'] == ALL, "Updating returns a new filter set"
    assert count_active_filters(changed) == 1
    assert describe_filters(changed) == 'SMS sent'

    changed = update_filters(changed, age_group='20-29', week='2016-05-02')
    assert describe_filters(changed) == 'age group 20-29, SMS sent, week of 2016-05-02'
    assert reset_filters() == default_filters()

    try:
        update_filters(filters, clinic='North')
        assert False, "Unknown filter fields should raise"
    except KeyError:
        pass


# ---------------------------------------
# Aggregator
# ---------------------------------------
def test_rate_calculation():
    assert calculate_no_show_rate(0, 0) == 0.0
    assert calculate_no_show_rate(1, 3) == 33.3
    assert calculate_no_show_rate(2, 3) == 66.7
    assert calculate_no_show_rate(5, 5) == 100.0


def test_partitions_cover_every_record():
    records = load_sample()

    for dimension in ['age_group', 'sms', 'week']:
        buckets = aggregate_by(records, dimension)
        assert buckets['total'].sum() == len(records), f"{dimension} buckets do not partition the records"
        assert ((buckets['rate'] >= 0) & (buckets['rate'] <= 100)).all()
        assert (buckets.loc[buckets['total'] == 0, 'rate'] == 0).all()

    try:
        aggregate_by(records, 'clinic')
        assert False, "Unknown dimensions should raise"
    except ValueError:
        pass


def test_age_group_buckets():
    buckets = aggregate_by_age_group(load_sample())

    assert buckets['key'].tolist() == ['0-9', '20-29', '40-49', '60-69', UNKNOWN]
    row = buckets.set_index('key').loc['20-29']
    assert (row['show'], row['no_show'], row['total'], row['rate']) == (1, 1, 2, 50.0)

    unresolved = buckets.set_index('key').loc['40-49']
    assert unresolved['total'] == 1 and unresolved['show'] == 0 and unresolved['no_show'] == 0


def test_age_group_sort_order():
    records = make_records({'AgeGroup': ['30-39', UNKNOWN, '5-9', '100+', '20-29'], 'NoShow': [0] * 5})
    assert aggregate_by_age_group(records)['key'].tolist() == ['5-9', '20-29', '30-39', '100+', UNKNOWN]


def test_sms_buckets_always_present():
    buckets = aggregate_by_sms(load_sample())
    assert buckets['key'].tolist() == [SMS_SENT_LABEL, NO_SMS_LABEL]
    assert buckets['total'].tolist() == [3, 3]
    assert buckets['rate'].tolist() == [33.3, 33.3]

    only_sent = aggregate_by_sms(make_records({'SMS_received': ['1', '1'], 'NoShow': ['1', '0']}))
    assert only_sent['total'].tolist() == [2, 0]
    assert only_sent['rate'].tolist() == [50.0, 0.0]


def test_week_buckets_chronological():
    buckets = aggregate_by_week(load_sample())
    assert buckets['key'].tolist() == ['2016-05-02', '2016-05-09', UNKNOWN]
    assert buckets['rate'].tolist() == [50.0, 33.3, 0.0]

    records = make_records({'Week': ['2016-05-09', UNKNOWN, '2016-04-25'], 'NoShow': [0, 1, 0]})
    assert aggregate_by_week(records)['key'].tolist() == ['2016-04-25', '2016-05-09', UNKNOWN]


def test_week_labels_mixing_timezones_sort_together():
    records = make_records({'Week': ['2016-05-09', '2016-05-02T00:00:00Z', UNKNOWN], 'NoShow': [0, 1, 0]})

    expected = ['2016-05-02T00:00:00Z', '2016-05-09', UNKNOWN]
    assert aggregate_by_week(records)['key'].tolist() == expected
    assert filter_options(records)['weeks'] == expected


def test_waiting_time_bins():
    records = make_records({'NoShow': [1, 0, 1], 'WaitingDays': [20, 5, None]})

    bins = aggregate_by_waiting_time(records)
    stats_ = waiting_days_stats(records)

    assert bins['key'].tolist() == ['0', '1-3', '4-7', '8-14', '15+']
    assert stats_ == {'valid_count': 2, 'excluded_count': 1}

    over_two_weeks = bins.set_index('key').loc['15+']
    assert over_two_weeks['total'] == 1 and over_two_weeks['no_show'] == 1
    assert bins.set_index('key').loc['4-7', 'total'] == 1
    assert bins['total'].sum() == 2


def test_waiting_time_bin_edges():
    records = make_records({'WaitingDays': [0, 1, 3, 4, 7, 8, 14, 15], 'NoShow': [0] * 8})
    assert aggregate_by_waiting_time(records)['total'].tolist() == [1, 2, 2, 2, 1]

    empty = aggregate_by_waiting_time(records.iloc[0:0])
    assert empty['total'].tolist() == [0, 0, 0, 0, 0]
    assert empty['rate'].tolist() == [0.0] * 5


def test_kpis_and_dataset_summaries():
    records = load_sample()

    assert calculate_kpis(records) == {'total': 6, 'no_shows': 2, 'shows': 3, 'no_show_rate': 33.3}
    assert outcome_distribution(calculate_kpis(records))[1] == {'name': 'No-Show', 'value': 2}

    overview = dataset_overview(records)
    assert overview['total'] == 6
    assert overview['date_range'] == '04/05/2016 to 11/05/2016'
    assert overview['date_range_days'] == 7

    quality = data_quality_stats(records)
    assert quality == {'total': 6, 'missing_waiting_days': 2, 'missing_sms': 0, 'missing_age_group': 1}

    options = filter_options(records)
    assert options['age_groups'] == ['0-9', '20-29', '40-49', '60-69', UNKNOWN]
    assert options['weeks'] == ['2016-05-02', '2016-05-09', UNKNOWN]


def test_waiting_days_by_outcome():
    cohorts = waiting_days_by_outcome(load_sample())
    assert cohorts == {'show': [0.0, 13.0], 'no_show': [0.0, 13.0]}


def test_association_stats():
    rng = np.random.default_rng(7)
    waiting = rng.integers(0, 30, size=400)
    no_show = (waiting + rng.integers(0, 20, size=400) > 30).astype(int)
    sms = rng.integers(0, 2, size=400)
    records = make_records({
        'Age': rng.integers(1, 90, size=400),
        'WaitingDays': waiting,
        'NoShow': no_show,
        'SMS_received': sms.astype(str)
    })

    result = calculate_association_stats(records)
    assert result['correlations']['waiting_days'] > 0.3
    assert result['waiting_days_ttest']['p_value'] < 0.001
    assert result['sms_chi_square']['dof'] == 1
    assert result['sms_chi_square']['n'] == 400

    tiny = calculate_association_stats(make_records({'NoShow': [1], 'WaitingDays': [3]}))
    assert tiny['correlations'] == {'waiting_days': None, 'sms_received': None, 'age': None}
    assert tiny['waiting_days_ttest'] is None and tiny['sms_chi_square'] is None
    assert format_statistical_summary(tiny) == []


# ---------------------------------------
# Insight Generator
# ---------------------------------------
def test_baseline_classification():
    cases = [
        (20.0, 20.5, 'similar to average', False),
        (20.0, 24.0, 'elevated risk', True),
        (20.0, 22.0, 'slightly elevated', False),
        (20.0, 15.0, 'significantly better', True),
        (20.0, 18.0, 'better than average', False)
    ]
    for overall, filtered, expected, flagged in cases:
        result = compare_to_baseline(overall, filtered)
        assert result['classification'] == expected, f"{filtered} vs {overall}: got {result['classification']}"
        assert result['flagged'] == flagged
    assert compare_to_baseline(20.0, 24.0)['difference'] == 4.0


def test_current_view_summary():
    overall = {'total': 100, 'no_shows': 20, 'shows': 80, 'no_show_rate': 20.0}

    unfiltered = current_view_summary(overall, overall, default_filters())
    assert unfiltered['summary'].startswith('Viewing all 100 appointments')
    assert unfiltered['baseline'] is None

    segment = {'total': 40, 'no_shows': 10, 'shows': 30, 'no_show_rate': 25.0}
    filtered = current_view_summary(overall, segment, {'age_group': '20-29'})
    assert 'age group 20-29' in filtered['summary']
    assert '5.0 percentage points higher' in filtered['summary']
    assert filtered['baseline']['classification'] == 'elevated risk'

    nothing = {'total': 0, 'no_shows': 0, 'shows': 0, 'no_show_rate': 0.0}
    assert current_view_summary(overall, nothing, {'week': '1999-01-04'})['baseline'] is None
    assert current_view_summary(nothing, nothing, default_filters()) is None


def test_waiting_time_extrema():
    records = make_records({
        'WaitingDays': [0] * 60 + [10] * 55 + [20] * 5,
        'NoShow': [1] * 6 + [0] * 54 + [1] * 11 + [0] * 44 + [1] * 5
    })
    result = waiting_time_extrema(aggregate_by_waiting_time(records))

    assert result['highest_volume']['key'] == '0'
    assert result['highest_volume']['total'] == 60
    assert result['highest_rate']['key'] == '8-14', "Bins under the support floor are skipped"
    assert result['highest_rate']['rate'] == 20.0
    assert '0 days' in result['text'] and '8-14 days' in result['text']

    small = make_records({'WaitingDays': [2, 2, 30], 'NoShow': [0, 1, 1]})
    small_result = waiting_time_extrema(aggregate_by_waiting_time(small))
    assert small_result['highest_rate'] is None
    assert small_result['text'].startswith('Most appointments have 1-3 days waiting time')

    assert waiting_time_extrema(aggregate_by_waiting_time(small.iloc[0:0])) is None


def test_age_group_insight():
    records = make_records({
        'AgeGroup': ['10-19'] * 10 + ['50-59'] * 20 + [UNKNOWN] * 2,
        'NoShow': [1] * 4 + [0] * 6 + [1] * 2 + [0] * 18 + [1, 1]
    })
    result = age_group_insight(aggregate_by_age_group(records))

    assert result['highest_volume']['key'] == '50-59'
    assert result['highest_rate']['key'] == UNKNOWN, "Highest rate has no support floor"
    assert result['younger_avg_rate'] == 40.0 and result['older_avg_rate'] == 10.0
    assert result['younger_higher']
    assert 'Younger patients' in result['rate_text']

    no_older = make_records({'AgeGroup': ['10-19', '20-29'], 'NoShow': [1, 1]})
    assert age_group_insight(aggregate_by_age_group(no_older))['younger_higher'] is False

    assert age_group_insight(aggregate_by_age_group(no_older.iloc[0:0])) is None


def test_weekly_trend_insight():
    records = make_records({
        'Week': ['2016-04-25'] * 10 + ['2016-05-02'] * 10 + ['2016-05-09'] * 10 + [UNKNOWN] * 3,
        'NoShow': ([1] * 3 + [0] * 7) + ([1] * 4 + [0] * 6) + ([1] * 2 + [0] * 8) + [1] * 3
    })
    result = weekly_trend_insight(aggregate_by_week(records))

    assert result['peak_week'] == '2016-05-02' and result['peak_rate'] == 40.0
    assert result['trend'] == 'declined'
    assert result['last_week'] == '2016-05-09' and result['last_rate'] == 20.0

    rising = make_records({'Week': ['2016-04-25', '2016-05-02'], 'NoShow': [0, 1]})
    assert weekly_trend_insight(aggregate_by_week(rising))['trend'] == 'increased'

    only_unknown = make_records({'Week': [UNKNOWN], 'NoShow': [1]})
    assert weekly_trend_insight(aggregate_by_week(only_unknown)) is None


def test_weekly_trend_without_no_shows_has_no_peak():
    records = make_records({'Week': ['2016-04-25', '2016-05-02', '2016-05-02'], 'NoShow': [0, 0, 0]})
    result = weekly_trend_insight(aggregate_by_week(records))

    assert result['peak_week'] is None and result['peak_rate'] is None
    assert result['first_week'] == '2016-04-25' and result['last_week'] == '2016-05-02'
    assert 'peaked' not in result['text']
    assert 'No no-shows recorded' in result['text']


def test_waiting_time_impact():
    assert median([3, 1, 2]) == 2
    assert median([4, 1, 3, 2]) == 2.5

    result = waiting_time_impact({'show': [1, 2, 3, 4], 'no_show': [5, 10, 15]})
    assert result['show_median'] == 2.5 and result['no_show_median'] == 10.0
    assert result['show_mean'] == 2.5 and result['no_show_mean'] == 10.0
    assert result['ratio'] == 4.0

    assert waiting_time_impact({'show': [0, 0], 'no_show': [3]})['ratio'] is None
    assert waiting_time_impact({'show': [], 'no_show': [3]}) is None


def test_key_takeaways():
    records = load_sample()
    kpis = calculate_kpis(records)
    bins = aggregate_by_waiting_time(records)
    takeaways = key_takeaways(kpis, sms_comparison(records), waiting_time_extrema(bins))

    assert takeaways[0] == 'Overall no-show rate is 33.3% (2 of 6 appointments)'
    assert 'with SMS (n=3)' in takeaways[1]
    assert '50.0% without SMS (n=2)' in takeaways[1], "Only an explicit '0' flag counts as no SMS"
    assert len(takeaways) == 3

    empty = records.iloc[0:0]
    assert key_takeaways(calculate_kpis(empty), sms_comparison(empty), None) == []


def test_sms_comparison_ignores_unflagged_records():
    records = make_records({
        'SMS_received': ['1', '0', '0', '', 'yes', '1'],
        'NoShow': [1, 0, 1, 1, 1, 0]
    })
    result = sms_comparison(records)

    assert result['sent']['total'] == 2 and result['sent']['no_show_rate'] == 50.0
    assert result['not_sent']['total'] == 2 and result['not_sent']['no_show_rate'] == 50.0
    assert aggregate_by_sms(records).set_index('key').loc[NO_SMS_LABEL, 'total'] == 4


# ---------------------------------------
# Pipeline
# ---------------------------------------
def test_compute_views_end_to_end():
    records = load_sample()

    views = compute_views(records, {'age_group': '20-29'}, view={'age_group': 'rate', 'week': 'rate'})
    assert views['active_filter_count'] == 1
    assert views['kpis']['total'] == 2 and views['kpis']['no_show_rate'] == 50.0
    assert views['overall_kpis']['no_show_rate'] == 33.3
    assert views['insights']['current_view']['baseline']['classification'] == 'elevated risk'
    assert views['insights']['age_group_text'].startswith('📊 Highest no-show rate')
    assert views['insights']['weekly_trend_text'] is not None
    assert views['by_sms']['total'].sum() == 2

    empty = compute_views(records, {'week': '1999-01-04'})
    assert empty['kpis']['total'] == 0
    assert empty['insights']['key_takeaways'] == []
    assert empty['insights']['age_group'] is None
    assert empty['insights']['weekly_trend'] is None
    assert empty['insights']['waiting_time_impact'] is None
    assert empty['by_waiting_time']['total'].sum() == 0

    again = compute_views(records, {'age_group': '20-29'}, view={'age_group': 'rate', 'week': 'rate'})
    pd.testing.assert_frame_equal(views['by_age_group'], again['by_age_group'])


def test_resolve_view():
    assert resolve_view() == {'age_group': 'count', 'sms': 'count', 'week': 'count'}
    assert resolve_view({'sms': 'rate'})['sms'] == 'rate'
    try:
        resolve_view({'sms': 'pie'})
        assert False, "Unknown view modes should raise"
    except ValueError:
        pass


def run_all_tests():
    """Run all tests"""
    print("\n" + "="*60)
    print(":material/science: Running No-Show Dashboard Tests")
    print("="*60 + "\n")

    tests = [obj for name, obj in sorted(globals().items()) if name.startswith('test_') and callable(obj)]

    try:
        for test in tests:
            test()
            print(f":material/check: {test.__name__} passed")

        print("\n" + "="*60)
        print(":material/done_all: All tests passed successfully!")
        print("="*60 + "\n")
        return True

    except AssertionError as e:
        print(f"\n:material/error: Test failed: {e}\n")
        return False
    except Exception as e:
        print(f"\n:material/warning: Error running tests: {e}\n")
        return False


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)
