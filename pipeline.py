"""
Recomputation pipeline for the Patient No-Show Dashboard

Stages run strictly in order:
    raw text -> records -> filtered records -> aggregates -> insights
Each stage is a pure function of its inputs, so callers can memoize any of
them (app.py wraps them with st.cache_data) and must rerun everything
downstream when an input changes.
"""

from config import *
from utils import *
from insights import *


def load_dataset(text):
    """Stage 1: raw delimited text to the normalized record collection"""
    return load_appointments(text)


def summarize_dataset(records):
    """Views that depend on the whole collection, not on the filters"""
    return {
        'overall_kpis': calculate_kpis(records),
        'overview': dataset_overview(records),
        'data_quality': data_quality_stats(records),
        'filter_options': filter_options(records)
    }


def aggregate_views(filtered):
    """Stage 3: every aggregate the dashboard shows for the filtered records"""
    kpis = calculate_kpis(filtered)
    return {
        'kpis': kpis,
        'by_age_group': aggregate_by(filtered, 'age_group'),
        'by_sms': aggregate_by(filtered, 'sms'),
        'sms_comparison': sms_comparison(filtered),
        'by_week': aggregate_by(filtered, 'week'),
        'by_waiting_time': aggregate_by(filtered, 'waiting_time'),
        'waiting_days_stats': waiting_days_stats(filtered),
        'waiting_days_by_outcome': waiting_days_by_outcome(filtered),
        'outcome_distribution': outcome_distribution(kpis),
        'association_stats': calculate_association_stats(filtered)
    }


def generate_insights(aggregates, overall_kpis, filters):
    """Stage 4: textual findings built from the aggregates alone"""
    extrema = waiting_time_extrema(aggregates['by_waiting_time'])
    return {
        'current_view': current_view_summary(overall_kpis, aggregates['kpis'], filters),
        'key_takeaways': key_takeaways(aggregates['kpis'], aggregates['sms_comparison'], extrema),
        'waiting_time_extrema': extrema,
        'age_group': age_group_insight(aggregates['by_age_group']),
        'weekly_trend': weekly_trend_insight(aggregates['by_week']),
        'waiting_time_impact': waiting_time_impact(aggregates['waiting_days_by_outcome']),
        'statistical_summary': format_statistical_summary(aggregates['association_stats'])
    }


def resolve_view(view=None):
    """Chart view modes ('count' or 'rate') for the age, SMS and week charts"""
    resolved = {chart: DEFAULT_VIEW for chart in ['age_group', 'sms', 'week']}
    for chart, mode in (view or {}).items():
        if chart not in resolved:
            raise KeyError(f"Unknown chart '{chart}'")
        if mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode '{mode}', expected one of {VIEW_MODES}")
        resolved[chart] = mode
    return resolved


def compute_views(records, filters=None, view=None):
    """Run the filter, aggregate and insight stages for one filter set"""
    filters = update_filters(filters)
    view = resolve_view(view)

    dataset = summarize_dataset(records)
    filtered = filter_appointments(records, filters)
    aggregates = aggregate_views(filtered)
    insights = generate_insights(aggregates, dataset['overall_kpis'], filters)

    age_insight = insights['age_group']
    if age_insight:
        insights['age_group_text'] = (
            age_insight['rate_text'] if view['age_group'] == 'rate' else age_insight['count_text']
        )
    else:
        insights['age_group_text'] = None
    insights['weekly_trend_text'] = (
        insights['weekly_trend']['text']
        if view['week'] == 'rate' and insights['weekly_trend'] else None
    )

    return {
        'filters': filters,
        'view': view,
        'active_filter_count': count_active_filters(filters),
        **dataset,
        **aggregates,
        'insights': insights
    }
