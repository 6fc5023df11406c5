"""
Utility functions for the Patient No-Show Dashboard
Contains all data processing, feature derivation, filtering, and aggregations
"""

import csv
import io
import re

import numpy as np
import pandas as pd
from scipy import stats
from config import *


# ---------------------------------------
# Header matching
# ---------------------------------------
def clean_header(header):
    """Strip byte-order marks and non-breaking spaces from a header cell"""
    if header is None:
        return ''
    return str(header).replace('\ufeff', '').replace('\u00a0', ' ').strip()


def unique_headers(headers):
    """Clean headers and suffix repeats the way pandas does ('Age', 'Age.1')"""
    seen = {}
    unique = []
    for header in (clean_header(h) for h in headers):
        name = header
        while name in seen:
            seen[header] += 1
            name = f"{header}.{seen[header]}"
        seen.setdefault(name, 0)
        unique.append(name)
    return unique


def normalize_key(name):
    """Lower-case a header and drop every non-alphanumeric character"""
    return re.sub(r'[^a-z0-9]', '', str(name).lower())


def is_scaled_header(header):
    """True for headers that hold a rescaled copy of a field (e.g. WaitingDays_normalized)"""
    lowered = header.lower()
    return header.endswith('_') or any(marker in lowered for marker in SCALED_HEADER_MARKERS)


def find_field_columns(columns, field):
    """
    Return every column that can supply a logical field, in precedence order.

    Exact aliases come first, then any header whose normalized form matches
    one of the field's normalized keys. Rescaled columns only qualify by
    exact alias.
    """
    columns = list(columns)
    found = [alias for alias in FIELD_ALIASES[field] if alias in columns]

    for key in FIELD_NORMALIZED_KEYS[field]:
        for col in columns:
            if col in found or is_scaled_header(col):
                continue
            if normalize_key(col) == key:
                found.append(col)

    return found


# ---------------------------------------
# Value coercion
# ---------------------------------------
def as_text(series):
    """Trimmed string view of a column, blanks for missing cells"""
    text = series.where(series.notna(), '').astype(str)
    return text.str.replace('\u00a0', ' ', regex=False).str.strip()


def to_number(series):
    """Coerce a column to floats; blanks and non-numeric text become NaN"""
    if pd.api.types.is_bool_dtype(series) or pd.api.types.is_numeric_dtype(series):
        numbers = series.astype(float)
    else:
        numbers = pd.to_numeric(as_text(series).replace('', np.nan), errors='coerce')
    return numbers.replace([np.inf, -np.inf], np.nan)


def to_timestamp(series):
    """
    Parse a date column to UTC timestamps, NaT where unparseable.

    'YYYY-MM-DD HH:MM:SS' strings are rewritten to the ISO 'T' separator
    first. ISO text takes the fast path; anything left over is retried
    with mixed-format parsing.
    """
    if pd.api.types.is_datetime64_any_dtype(series):
        return pd.to_datetime(series, utc=True)

    text = as_text(series).str.replace(
        r'^(\d{4}-\d{1,2}-\d{1,2}) +(?=\d)', r'\1T', regex=True
    )
    parsed = pd.to_datetime(text, errors='coerce', utc=True, format='ISO8601')

    retry = parsed.isna() & (text != '')
    if retry.any():
        parsed.loc[retry] = pd.to_datetime(
            text[retry], errors='coerce', utc=True, format='mixed'
        )

    return parsed


def canonical_flag(series):
    """Map values that resolve to 1/0 onto '1'/'0', keep anything else as trimmed text"""
    numbers = to_number(series)
    text = as_text(series)
    canonical = np.where(numbers == 1, '1', np.where(numbers == 0, '0', text))
    return pd.Series(canonical, index=series.index, dtype=object)


def _first_valid(df, columns, convert, default):
    """Row-wise first non-null value across candidate columns"""
    result = default
    for col in columns:
        result = result.combine_first(convert(df[col]))
    return result


def _first_text(df, columns):
    """Row-wise first non-blank text across candidate columns"""
    result = pd.Series('', index=df.index, dtype=object)
    for col in columns:
        result = result.where(result != '', as_text(df[col]))
    return result


def _empty_numbers(df):
    return pd.Series(np.nan, index=df.index, dtype=float)


def _empty_timestamps(df):
    return pd.Series(pd.NaT, index=df.index, dtype='datetime64[ns, UTC]')


# ---------------------------------------
# Record Normalizer
# ---------------------------------------
def _detect_delimiter(header_line):
    """Pick the most frequent candidate delimiter in the header row"""
    counts = {sep: header_line.count(sep) for sep in [',', ';', '\t', '|']}
    best = max(counts, key=counts.get)
    return best if counts[best] > 0 else ','


def read_raw_table(text):
    """
    Parse delimited text with a header row into a frame of trimmed strings.

    Rows with more fields than the header are truncated to the header width,
    short rows are padded with blanks. Returns (dataframe, recovered_rows).
    """
    if isinstance(text, bytes):
        text = text.decode('utf-8-sig')

    if text is None or not text.strip():
        return pd.DataFrame(), 0

    text = text.lstrip('\ufeff')
    lines = text.lstrip('\r\n').splitlines()
    header_line, body = lines[0], lines[1:]
    expected_rows = sum(1 for line in body if line.strip())
    sep = _detect_delimiter(header_line)
    width = len(pd.read_csv(io.StringIO(text), sep=sep, nrows=0).columns)

    recovered = []

    def _recover(bad_line):
        recovered.append(bad_line)
        return bad_line[:width]

    read_options = dict(
        sep=sep,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        engine='python',
        on_bad_lines=_recover
    )

    quoted = True
    try:
        df = pd.read_csv(io.StringIO(text), **read_options)
    except pd.errors.ParserError as e:
        print(f"⚠️ Quoted parse failed ({e}); retrying without quote handling")
        quoted = False
    else:
        # An unbalanced quote makes the reader swallow every following row
        if len(df) < expected_rows and text.count('"') % 2:
            print(f"⚠️ Unbalanced quote swallowed {expected_rows - len(df)} rows; retrying without quote handling")
            quoted = False

    if not quoted:
        recovered.clear()
        df = pd.read_csv(io.StringIO(text), quoting=csv.QUOTE_NONE, **read_options)
        recovered.extend(line for line in body if line.count('"') % 2)

    df.columns = unique_headers(clean_header(c).strip('"') for c in df.columns)
    df = df.fillna('')
    for col in df.columns:
        df[col] = as_text(df[col])
        if not quoted:
            df[col] = df[col].str.strip('"').str.strip()

    return df, len(recovered)


def derive_age_group(age):
    """Decade label ('20-29') from a numeric age, 'Unknown' when missing or negative"""
    valid = age.notna() & (age >= 0)
    labels = pd.Series(UNKNOWN, index=age.index, dtype=object)
    lower = (np.floor(age[valid] / AGE_GROUP_WIDTH) * AGE_GROUP_WIDTH).astype(int)
    labels.loc[valid] = [f"{lo}-{lo + AGE_GROUP_WIDTH - 1}" for lo in lower]
    return labels


def derive_waiting_days(df, resolved=None):
    """
    Resolve waiting days per row, first parseable candidate wins:
    waiting-days aliases, then awaiting-time aliases, then the whole days
    between the scheduled and appointment timestamps. Clamped at 0.
    """
    if resolved is None:
        resolved = {field: find_field_columns(df.columns, field) for field in FIELD_ALIASES}

    explicit = _first_valid(
        df,
        resolved['waiting_days'] + resolved['awaiting'],
        to_number,
        _empty_numbers(df)
    )
    explicit = np.floor(explicit)

    scheduled = _first_valid(df, resolved['scheduled'], to_timestamp, _empty_timestamps(df))
    appointment = _first_valid(df, resolved['appointment'], to_timestamp, _empty_timestamps(df))
    from_dates = np.floor((appointment - scheduled) / pd.Timedelta(days=1)).astype(float)

    return explicit.combine_first(from_dates).clip(lower=0)


def derive_week(df, resolved=None):
    """Keep a usable week label, otherwise the Monday of the appointment week (YYYY-MM-DD)"""
    if resolved is None:
        resolved = {field: find_field_columns(df.columns, field) for field in FIELD_ALIASES}

    existing = _first_text(df, resolved['week'])
    keep = (existing != '') & (existing.str.lower() != UNKNOWN.lower())

    appointment = _first_valid(df, resolved['appointment'], to_timestamp, _empty_timestamps(df))
    monday = appointment.dt.normalize() - pd.to_timedelta(appointment.dt.dayofweek, unit='D')
    derived = monday.dt.strftime('%Y-%m-%d').fillna(UNKNOWN)

    return existing.where(keep, derived).astype(object)


def normalize_appointments(raw_df):
    """
    Build the normalized record collection from a raw table.

    Returns (records, info) where records carries RECORD_COLUMNS in input
    row order and info describes which source columns fed each field.
    Works on its own output unchanged.
    """
    df = raw_df.copy()
    df.columns = unique_headers(df.columns)

    resolved = {field: find_field_columns(df.columns, field) for field in FIELD_ALIASES}

    records = pd.DataFrame(index=df.index)
    records['Age'] = _first_valid(df, resolved['age'], to_number, _empty_numbers(df))

    age_group = _first_text(df, resolved['age_group'])
    records['AgeGroup'] = age_group.where(age_group != '', derive_age_group(records['Age']))

    records['ScheduledDay'] = _first_valid(df, resolved['scheduled'], to_timestamp, _empty_timestamps(df))
    records['AppointmentDay'] = _first_valid(df, resolved['appointment'], to_timestamp, _empty_timestamps(df))

    records['SMS_received'] = canonical_flag(_first_text(df, resolved['sms_received']))

    no_show = _first_valid(df, resolved['no_show'], to_number, _empty_numbers(df))
    records['NoShow'] = no_show.where(no_show.isin([0, 1]))

    records['WaitingDays'] = derive_waiting_days(df, resolved)
    records['Week'] = derive_week(df, resolved)

    info = {
        'rows': len(records),
        'columns': list(df.columns),
        'resolved_fields': {field: cols for field, cols in resolved.items() if cols},
        'missing_fields': [field for field, cols in resolved.items() if not cols]
    }

    return records[RECORD_COLUMNS], info


def load_appointments(text):
    """Parse raw delimited text into normalized appointment records"""
    raw_df, recovered_rows = read_raw_table(text)
    records, info = normalize_appointments(raw_df)
    info['recovered_rows'] = recovered_rows

    if recovered_rows:
        print(f"⚠️ Recovered {recovered_rows} malformed rows (extra fields dropped)")
    print(f"📊 Loaded {info['rows']} appointments, unresolved fields: {info['missing_fields'] or 'none'}")

    return records, info


def _single_row_frame(row):
    return pd.DataFrame([dict(row)], dtype=object)


def resolve_waiting_days(row):
    """Waiting days for a single record mapping, or None"""
    value = derive_waiting_days(_single_row_frame(row)).iloc[0]
    return None if pd.isna(value) else int(value)


def resolve_week(row):
    """Week label for a single record mapping"""
    return derive_week(_single_row_frame(row)).iloc[0]


# ---------------------------------------
# Filter Engine
# ---------------------------------------
def default_filters():
    """Fresh filter set with every dimension at 'All'"""
    return dict(DEFAULT_FILTERS)


def reset_filters():
    return default_filters()


def update_filters(filters, **changes):
    """Return a new filter set with the given fields replaced"""
    unknown = [key for key in changes if key not in FILTER_COLUMNS]
    if unknown:
        raise KeyError(f"Unknown filter fields: {unknown}")
    return {**default_filters(), **(filters or {}), **changes}


def count_active_filters(filters):
    return sum(1 for key in FILTER_COLUMNS if (filters or {}).get(key, ALL) != ALL)


def describe_filters(filters):
    """Human-readable summary of the active filters"""
    filters = update_filters(filters)
    parts = []
    if filters['age_group'] != ALL:
        parts.append(f"age group {filters['age_group']}")
    if filters['sms_received'] != ALL:
        parts.append('SMS sent' if filters['sms_received'] == '1' else 'no SMS')
    if filters['week'] != ALL:
        parts.append(f"week of {filters['week']}")
    return ', '.join(parts)


def filter_appointments(records, filters=None):
    """Keep records matching every non-'All' filter exactly, preserving order"""
    filters = update_filters(filters)

    mask = pd.Series(True, index=records.index)
    for key, column in FILTER_COLUMNS.items():
        value = filters[key]
        if value != ALL:
            mask &= records[column] == value

    return records[mask]


# ---------------------------------------
# Aggregator
# ---------------------------------------
BUCKET_COLUMNS = ['key', 'show', 'no_show', 'total', 'rate']


def calculate_no_show_rate(no_shows, total):
    """No-show percentage rounded to one decimal, 0 for an empty group"""
    if total <= 0:
        return 0.0
    return round(no_shows / total * 100, 1)


def leading_age(label):
    """Leading integer of an age group label, None when there isn't one"""
    match = re.match(r'^(\d+)', str(label))
    return int(match.group(1)) if match else None


def age_group_sort_key(label):
    age = leading_age(label)
    return (label == UNKNOWN, UNPARSED_AGE_SORT_KEY if age is None else age)


def week_sort_key(label):
    """Chronological order; labels with and without a timezone compare on UTC"""
    parsed = pd.to_datetime(label, errors='coerce', utc=True) if label != UNKNOWN else pd.NaT
    return (label == UNKNOWN, pd.isna(parsed), 0 if pd.isna(parsed) else parsed.value, str(label))


def _count_outcomes(records, keys):
    """Group records by key into show / no-show / total counts in first-seen order"""
    if records.empty:
        return pd.DataFrame(columns=['key', 'show', 'no_show', 'total'])

    counts = pd.DataFrame({
        'key': keys,
        'show': (records['NoShow'] == 0).astype(int),
        'no_show': (records['NoShow'] == 1).astype(int)
    }, index=records.index)

    return counts.groupby('key', sort=False, dropna=False).agg(
        show=('show', 'sum'),
        no_show=('no_show', 'sum'),
        total=('show', 'size')
    ).reset_index()


def _with_fixed_keys(buckets, keys):
    """Reindex buckets onto a fixed key list, empty groups as zeros"""
    fixed = buckets.set_index('key').reindex(keys, fill_value=0)
    fixed.index.name = 'key'
    return fixed.reset_index()


def _finish_buckets(buckets):
    buckets = buckets.copy()
    for col in ['show', 'no_show', 'total']:
        buckets[col] = buckets[col].astype(int)
    buckets['rate'] = [
        calculate_no_show_rate(n, t) for n, t in zip(buckets['no_show'], buckets['total'])
    ]
    return buckets[BUCKET_COLUMNS].reset_index(drop=True)


def _sorted_buckets(buckets, sort_key):
    order = sorted(buckets.index, key=lambda i: sort_key(buckets.at[i, 'key']))
    return buckets.loc[order]


def aggregate_by_age_group(records):
    """One bucket per age group, ascending by leading age, 'Unknown' last"""
    keys = records['AgeGroup'].replace('', UNKNOWN).fillna(UNKNOWN)
    buckets = _count_outcomes(records, keys)
    return _finish_buckets(_sorted_buckets(buckets, age_group_sort_key))


def aggregate_by_sms(records):
    """Exactly two buckets: 'SMS Sent' (flag '1') and 'No SMS' (everything else)"""
    keys = np.where(records['SMS_received'] == '1', SMS_SENT_LABEL, NO_SMS_LABEL)
    buckets = _count_outcomes(records, keys)
    return _finish_buckets(_with_fixed_keys(buckets, [SMS_SENT_LABEL, NO_SMS_LABEL]))


def aggregate_by_week(records):
    """One bucket per week label, chronological, 'Unknown' last"""
    keys = records['Week'].replace('', UNKNOWN).fillna(UNKNOWN)
    buckets = _count_outcomes(records, keys)
    return _finish_buckets(_sorted_buckets(buckets, week_sort_key))


def aggregate_by_waiting_time(records):
    """The five fixed waiting-time bins in order; unresolved waiting days are left out"""
    valid = records[records['WaitingDays'].notna()]

    edges = [-np.inf] + [np.inf if upper is None else upper for _, _, upper in WAITING_BINS]
    bin_keys = [key for key, _, _ in WAITING_BINS]
    keys = pd.Series(dtype=object)
    if not valid.empty:
        keys = pd.cut(valid['WaitingDays'], bins=edges, labels=bin_keys, right=True).astype(str)

    buckets = _finish_buckets(_with_fixed_keys(_count_outcomes(valid, keys), bin_keys))
    buckets['label'] = [label for _, label, _ in WAITING_BINS]
    return buckets


def waiting_days_stats(records):
    valid_count = int(records['WaitingDays'].notna().sum())
    return {
        'valid_count': valid_count,
        'excluded_count': len(records) - valid_count
    }


def aggregate_by(records, dimension):
    """Ordered buckets for one grouping dimension"""
    aggregators = {
        'age_group': aggregate_by_age_group,
        'sms': aggregate_by_sms,
        'week': aggregate_by_week,
        'waiting_time': aggregate_by_waiting_time
    }
    if dimension not in aggregators:
        raise ValueError(f"Unknown dimension '{dimension}', expected one of {list(DIMENSIONS)}")
    return aggregators[dimension](records)


def calculate_kpis(records):
    """Summary counts for a record collection, same arithmetic as a single bucket"""
    total = len(records)
    no_shows = int((records['NoShow'] == 1).sum())
    shows = int((records['NoShow'] == 0).sum())

    return {
        'total': total,
        'no_shows': no_shows,
        'shows': shows,
        'no_show_rate': calculate_no_show_rate(no_shows, total)
    }


def outcome_distribution(kpis):
    return [
        {'name': 'Showed Up', 'value': kpis['shows']},
        {'name': 'No-Show', 'value': kpis['no_shows']}
    ]


def sms_comparison(records):
    """KPIs for records with the flag exactly '1' vs exactly '0'; blanks and free text sit in neither"""
    return {
        'sent': calculate_kpis(records[records['SMS_received'] == '1']),
        'not_sent': calculate_kpis(records[records['SMS_received'] == '0'])
    }


def waiting_days_by_outcome(records):
    """Sorted waiting days for the show and no-show cohorts"""
    waiting = records['WaitingDays']
    return {
        'show': sorted(waiting[(records['NoShow'] == 0) & waiting.notna()].tolist()),
        'no_show': sorted(waiting[(records['NoShow'] == 1) & waiting.notna()].tolist())
    }


def dataset_overview(records):
    """Record count and appointment date span of the loaded dataset"""
    total = len(records)
    dates = records['AppointmentDay'].dropna()

    if dates.empty:
        return {
            'total': total,
            'date_range': UNKNOWN,
            'date_range_days': None,
            'min_date': None,
            'max_date': None
        }

    min_date, max_date = dates.min(), dates.max()
    return {
        'total': total,
        'date_range': f"{min_date:%d/%m/%Y} to {max_date:%d/%m/%Y}",
        'date_range_days': int(np.ceil((max_date - min_date) / pd.Timedelta(days=1))),
        'min_date': min_date,
        'max_date': max_date
    }


def data_quality_stats(records):
    return {
        'total': len(records),
        'missing_waiting_days': int(records['WaitingDays'].isna().sum()),
        'missing_sms': int((records['SMS_received'] == '').sum()),
        'missing_age_group': int(records['AgeGroup'].isin(['', UNKNOWN]).sum())
    }


def filter_options(records):
    """Distinct age groups and weeks for the filter widgets, in display order"""
    age_groups = [g for g in records['AgeGroup'].dropna().unique() if g != '']
    weeks = [w for w in records['Week'].dropna().unique() if w != '']
    return {
        'age_groups': sorted(age_groups, key=age_group_sort_key),
        'weeks': sorted(weeks, key=week_sort_key)
    }


# ---------------------------------------
# Association statistics
# ---------------------------------------
def _pearson(x, y):
    pair = pd.DataFrame({'x': x, 'y': y}).dropna()
    if len(pair) < MIN_STATS_ROWS or pair['x'].nunique() < 2 or pair['y'].nunique() < 2:
        return None
    return round(float(pair['x'].corr(pair['y'])), 3)


def calculate_association_stats(records):
    """
    Live association figures between predictors and the no-show outcome.

    Pearson correlations (waiting days, SMS flag, age), a Welch t-test of
    waiting days by outcome and a chi-square test of SMS vs outcome. Each
    entry is None when the data can't support it.
    """
    outcome = records['NoShow']
    sms = records['SMS_received'].map({'1': 1.0, '0': 0.0})

    result = {
        'correlations': {
            'waiting_days': _pearson(records['WaitingDays'], outcome),
            'sms_received': _pearson(sms, outcome),
            'age': _pearson(records['Age'], outcome)
        },
        'waiting_days_ttest': None,
        'sms_chi_square': None
    }

    waiting = waiting_days_by_outcome(records)
    if (len(waiting['show']) >= 2 and len(waiting['no_show']) >= 2
            and len(set(waiting['show']) | set(waiting['no_show'])) > 1):
        t_stat, p_value = stats.ttest_ind(waiting['no_show'], waiting['show'], equal_var=False)
        if np.isfinite(t_stat):
            result['waiting_days_ttest'] = {
                't_statistic': round(float(t_stat), 2),
                'p_value': float(p_value),
                'n_show': len(waiting['show']),
                'n_no_show': len(waiting['no_show'])
            }

    paired = pd.DataFrame({'sms': sms, 'outcome': outcome}).dropna()
    contingency = pd.crosstab(paired['sms'], paired['outcome']) if len(paired) else pd.DataFrame()
    if contingency.shape == (2, 2):
        chi2, p_value, dof, expected = stats.chi2_contingency(contingency)
        result['sms_chi_square'] = {
            'chi2': round(float(chi2), 1),
            'p_value': float(p_value),
            'dof': int(dof),
            'n': int(contingency.values.sum())
        }

    return result
