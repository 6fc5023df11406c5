"""
Insight generation for the Patient No-Show Dashboard
Turns aggregated buckets into short comparative findings. Every function
works from aggregator output only and returns None (or an empty list)
when the buckets it needs have no support.
"""

import numpy as np
from config import *
from utils import describe_filters, count_active_filters, leading_age


ASSOCIATION_NOTE = "This analysis shows patterns and correlations, not causal relationships."

BASELINE_MESSAGES = {
    'similar to average': "This segment performs similarly to the overall average.",
    'elevated risk': "⚠️ This segment shows elevated no-show risk. Consider targeted interventions like additional reminders or follow-ups.",
    'slightly elevated': "This segment shows slightly elevated no-show risk compared to average.",
    'significantly better': "✓ This segment performs significantly better than average. Study these characteristics to identify best practices.",
    'better than average': "This segment performs better than average."
}


def compare_to_baseline(overall_rate, filtered_rate):
    """Signed point difference between a segment and the overall rate, classified"""
    diff = filtered_rate - overall_rate

    if abs(diff) < SIMILAR_RATE_DIFF:
        classification = 'similar to average'
    elif diff > ELEVATED_RATE_DIFF:
        classification = 'elevated risk'
    elif diff > 0:
        classification = 'slightly elevated'
    elif diff < -ELEVATED_RATE_DIFF:
        classification = 'significantly better'
    else:
        classification = 'better than average'

    return {
        'difference': round(diff, 1),
        'classification': classification,
        'flagged': classification in ('elevated risk', 'significantly better'),
        'message': BASELINE_MESSAGES[classification]
    }


def current_view_summary(overall_kpis, kpis, filters):
    """Headline for the current view: either the whole dataset or a filtered segment"""
    if overall_kpis['total'] == 0:
        return None

    if count_active_filters(filters) == 0:
        return {
            'summary': (
                f"Viewing all {overall_kpis['total']:,} appointments. "
                f"Overall no-show rate is {overall_kpis['no_show_rate']}%."
            ),
            'insight': "Apply filters to identify specific segments with elevated or reduced no-show risk.",
            'baseline': None
        }

    description = describe_filters(filters)
    if kpis['total'] == 0:
        return {
            'summary': f"No appointments match {description}.",
            'insight': None,
            'baseline': None
        }

    baseline = compare_to_baseline(overall_kpis['no_show_rate'], kpis['no_show_rate'])
    comparison = 'higher' if baseline['difference'] > 0 else 'lower'

    return {
        'summary': (
            f"Viewing {kpis['total']:,} appointments for {description}. "
            f"No-show rate is {kpis['no_show_rate']}%, {abs(baseline['difference']):.1f} percentage points "
            f"{comparison} than the overall average ({overall_kpis['no_show_rate']}%)."
        ),
        'insight': baseline['message'],
        'baseline': baseline
    }


def _bucket_record(buckets, position):
    row = buckets.iloc[position]
    return {
        'key': row['key'],
        'label': row.get('label', row['key']),
        'total': int(row['total']),
        'no_show': int(row['no_show']),
        'rate': float(row['rate'])
    }


def waiting_time_extrema(waiting_buckets):
    """
    Busiest waiting-time bin and, among bins with at least MIN_BIN_SUPPORT
    appointments, the one with the highest no-show rate.
    """
    supported = waiting_buckets[waiting_buckets['total'] > 0]
    if supported.empty:
        return None

    highest_volume = _bucket_record(waiting_buckets, int(np.argmax(waiting_buckets['total'].values)))

    highest_rate = None
    eligible = waiting_buckets[(waiting_buckets['total'] >= MIN_BIN_SUPPORT) & (waiting_buckets['rate'] > 0)]
    if not eligible.empty:
        highest_rate = _bucket_record(eligible, int(np.argmax(eligible['rate'].values)))

    if highest_rate:
        text = (
            f"Most appointments have {highest_volume['label']} waiting time "
            f"({highest_volume['rate']}% no-show, n={highest_volume['total']:,}); "
            f"highest no-show rate is {highest_rate['rate']}% for {highest_rate['label']} waits "
            f"(n={highest_rate['total']:,})."
        )
    else:
        text = (
            f"Most appointments have {highest_volume['label']} waiting time with "
            f"{highest_volume['rate']}% no-show rate (n={highest_volume['total']:,})."
        )

    return {
        'highest_volume': highest_volume,
        'highest_rate': highest_rate,
        'text': text
    }


def _cohort_average(buckets, age_range):
    low, high = age_range
    ages = [leading_age(key) for key in buckets['key']]
    cohort = buckets[[age is not None and low <= age < high for age in ages]]
    if cohort.empty:
        return None
    return float(cohort['rate'].mean())


def age_group_insight(age_buckets):
    """Highest-volume and highest-rate age groups plus the younger vs older comparison"""
    supported = age_buckets[age_buckets['total'] > 0]
    if supported.empty:
        return None

    highest_volume = _bucket_record(supported, int(np.argmax(supported['total'].values)))
    highest_rate = _bucket_record(supported, int(np.argmax(supported['rate'].values)))

    younger_avg = _cohort_average(supported, YOUNGER_AGE_RANGE)
    older_avg = _cohort_average(supported, OLDER_AGE_RANGE)
    younger_higher = (
        younger_avg is not None and older_avg is not None
        and younger_avg > older_avg + COHORT_RATE_GAP
    )

    rate_text = (
        f"📊 Highest no-show rate: {highest_rate['rate']}% in age group {highest_rate['key']} "
        f"(n={highest_rate['total']:,})."
    )
    if younger_higher:
        rate_text += (
            f" Younger patients ({YOUNGER_AGE_RANGE[0]}-{YOUNGER_AGE_RANGE[1] - 1}) have significantly "
            f"higher no-show rates than patients {OLDER_AGE_RANGE[0]}+."
        )

    return {
        'highest_volume': highest_volume,
        'highest_rate': highest_rate,
        'younger_avg_rate': None if younger_avg is None else round(younger_avg, 1),
        'older_avg_rate': None if older_avg is None else round(older_avg, 1),
        'younger_higher': younger_higher,
        'count_text': (
            f"Highest volume: age group {highest_volume['key']} "
            f"({highest_volume['total']:,} appointments)"
        ),
        'rate_text': rate_text
    }


def weekly_trend_insight(week_buckets):
    """Peak week and the direction from the first to the last dated week"""
    valid = week_buckets[(week_buckets['key'] != UNKNOWN) & (week_buckets['total'] > 0)]
    if valid.empty:
        return None

    # Peak only counts a week with at least one no-show
    peak = None
    if valid['rate'].max() > 0:
        peak = _bucket_record(valid, int(np.argmax(valid['rate'].values)))
    first = _bucket_record(valid, 0)
    last = _bucket_record(valid, len(valid) - 1)
    trend = 'declined' if last['rate'] < first['rate'] else 'increased'

    if peak:
        text = (
            f"📈 No-show rate peaked at {peak['rate']}% in week of {peak['key']}, "
            f"then {trend} to {last['rate']}% by {last['key']}"
        )
    else:
        text = f"📈 No no-shows recorded between the weeks of {first['key']} and {last['key']}"

    return {
        'peak_week': peak['key'] if peak else None,
        'peak_rate': peak['rate'] if peak else None,
        'first_week': first['key'],
        'first_rate': first['rate'],
        'last_week': last['key'],
        'last_rate': last['rate'],
        'trend': trend,
        'text': text
    }


def median(values):
    """Middle element of the sorted values, mean of the two middle ones for even lengths"""
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def waiting_time_impact(waiting_by_outcome):
    """Median and mean waiting days for each cohort and the no-show to show mean ratio"""
    showed = waiting_by_outcome['show']
    missed = waiting_by_outcome['no_show']
    if not showed or not missed:
        return None

    show_mean = float(np.mean(showed))
    no_show_mean = float(np.mean(missed))
    ratio = round(no_show_mean / show_mean, 1) if show_mean > 0 else None

    result = {
        'show_median': round(float(median(showed)), 1),
        'no_show_median': round(float(median(missed)), 1),
        'show_mean': round(show_mean, 1),
        'no_show_mean': round(no_show_mean, 1),
        'ratio': ratio,
        'show_count': len(showed),
        'no_show_count': len(missed)
    }

    text = (
        f"Patients who missed their appointment waited a median of {result['no_show_median']} days "
        f"(mean {result['no_show_mean']}) vs {result['show_median']} days "
        f"(mean {result['show_mean']}) for those who attended."
    )
    if ratio is not None:
        text += f" No-show patients waited {ratio}x longer on average."
    result['text'] = text

    return result


def key_takeaways(kpis, sms, extrema):
    """Up to three headline sentences for the filtered view"""
    if kpis['total'] == 0:
        return []

    sent, not_sent = sms['sent'], sms['not_sent']

    takeaways = [
        f"Overall no-show rate is {kpis['no_show_rate']}% "
        f"({kpis['no_shows']:,} of {kpis['total']:,} appointments)",
        f"SMS reminder data: {sent['no_show_rate']}% no-show rate with SMS (n={sent['total']:,}) vs. "
        f"{not_sent['no_show_rate']}% without SMS (n={not_sent['total']:,}).",
        extrema['text'] if extrema else None
    ]
    return [t for t in takeaways if t]


def _format_p_value(p_value):
    return "p < 0.001" if p_value < 0.001 else f"p = {p_value:.3f}"


def format_statistical_summary(association_stats):
    """Readable lines for the live association figures; missing figures are skipped"""
    lines = []

    labels = {
        'waiting_days': 'Waiting Days',
        'sms_received': 'SMS Received',
        'age': 'Age'
    }
    for key, label in labels.items():
        r = association_stats['correlations'].get(key)
        if r is not None:
            lines.append(f"{label}: r = {r:.3f}")

    ttest = association_stats.get('waiting_days_ttest')
    if ttest:
        lines.append(
            f"T-test (Waiting Days by NoShow): t = {ttest['t_statistic']}, {_format_p_value(ttest['p_value'])}"
        )

    chi_square = association_stats.get('sms_chi_square')
    if chi_square:
        lines.append(
            f"Chi-square (SMS vs NoShow): χ² = {chi_square['chi2']}, {_format_p_value(chi_square['p_value'])}"
        )

    return lines
