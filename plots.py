"""
Plotting functions for the Patient No-Show Dashboard
Contains all Plotly visualization functions
"""

import pandas as pd
import plotly.express as px
import matplotlib.pyplot as plt
import seaborn as sns
from config import *


GRID_AXIS = dict(
    showgrid=True,
    gridwidth=0.5,
    gridcolor='lightgray'
)


def _outcome_bar(buckets, title, x_title, height):
    """Stacked show / no-show count bars for one set of buckets"""
    fig = px.bar(
        buckets,
        x='key',
        y=['show', 'no_show'],
        title=title,
        labels={
            'key': x_title,
            'value': 'Appointments',
            'variable': 'Outcome'
        },
        height=height,
        color_discrete_map={
            'show': PLOT_COLORS['show'],
            'no_show': PLOT_COLORS['no_show']
        }
    )

    newnames = {'show': 'Showed Up', 'no_show': 'No-Show'}
    fig.for_each_trace(lambda t: t.update(name=newnames.get(t.name, t.name)))
    fig.update_xaxes(type='category')

    return fig


def _rate_bar(buckets, title, x_title, height, overall_rate):
    """No-show rate bars with the overall average as a reference line"""
    fig = px.bar(
        buckets,
        x='key',
        y='rate',
        title=title,
        labels={
            'key': x_title,
            'rate': 'No-Show Rate (%)'
        },
        height=height,
        text='rate',
        hover_data={'total': True, 'no_show': True},
        color_discrete_sequence=[PLOT_COLORS['rate']]
    )
    fig.update_traces(texttemplate='%{text}%', textposition='outside')
    fig.update_xaxes(type='category')

    fig.add_hline(
        y=overall_rate,
        line_dash='dot',
        line_color=PLOT_COLORS['average_line'],
        line_width=2,
        annotation_text=f'Avg: {overall_rate}%',
        annotation_position='top right'
    )

    return fig


def _finish_layout(fig, x_title, y_title, hovermode='x unified'):
    fig.update_layout(
        xaxis_title=x_title,
        yaxis_title=y_title,
        hovermode=hovermode,
        xaxis=GRID_AXIS,
        yaxis=GRID_AXIS
    )
    return fig


def create_age_group_plot(by_age_group, view, overall_rate):
    """No-show by age group, counts or rates depending on the view"""
    if view == 'rate':
        fig = _rate_bar(by_age_group, "No-Show Rate by Age Group", 'Age Group', AGE_PLOT_HEIGHT, overall_rate)
        return _finish_layout(fig, "Age Group", "No-Show Rate (%)")

    fig = _outcome_bar(by_age_group, "No-Show by Age Group", 'Age Group', AGE_PLOT_HEIGHT)
    return _finish_layout(fig, "Age Group", "Appointments")


def create_sms_plot(by_sms, view, overall_rate):
    """No-show by SMS reminder status"""
    if view == 'rate':
        fig = _rate_bar(by_sms, "No-Show Rate by SMS Reminder", 'SMS Reminder', SMS_PLOT_HEIGHT, overall_rate)
        return _finish_layout(fig, "SMS Reminder", "No-Show Rate (%)")

    fig = _outcome_bar(by_sms, "No-Show by SMS Reminder", 'SMS Reminder', SMS_PLOT_HEIGHT)
    return _finish_layout(fig, "SMS Reminder", "Appointments")


def create_weekly_trend_plot(by_week, view, overall_rate):
    """Weekly trend plot (stacked bars for counts, line for rates)"""
    if view != 'rate':
        fig = _outcome_bar(by_week, "No-Show Trends by Week", 'Week Starting Date', WEEKLY_PLOT_HEIGHT)
        return _finish_layout(fig, "Week Starting Date", "Appointments")

    fig = px.line(
        by_week,
        x='key',
        y='rate',
        title="No-Show Rate by Week",
        labels={
            'key': 'Week Starting Date',
            'rate': 'No-Show Rate (%)'
        },
        height=WEEKLY_PLOT_HEIGHT,
        markers=True,
        hover_data={'total': True, 'no_show': True},
        color_discrete_sequence=[PLOT_COLORS['rate']]
    )
    fig.update_traces(
        name="No-Show Rate",
        showlegend=True,
        text=by_week['rate'],
        textposition='top center',
        mode='lines+markers+text',
        textfont=dict(size=10)
    )
    fig.update_xaxes(type='category')

    fig.add_hline(
        y=overall_rate,
        line_dash='dot',
        line_color=PLOT_COLORS['average_line'],
        line_width=2,
        annotation_text=f'Avg: {overall_rate}%',
        annotation_position='top right'
    )

    return _finish_layout(fig, "Week Starting Date", "No-Show Rate (%)")


def create_waiting_time_plot(by_waiting_time):
    """No-show rate per waiting-time bin, empty bins shown as zero"""
    fig = px.bar(
        by_waiting_time,
        x='label',
        y='rate',
        title="No-Show Rate by Waiting Time",
        labels={
            'label': 'Waiting Time',
            'rate': 'No-Show Rate (%)',
            'total': 'n',
            'no_show': 'no-shows'
        },
        height=WAITING_PLOT_HEIGHT,
        text='rate',
        hover_data={'total': True, 'no_show': True},
        color_discrete_sequence=[PLOT_COLORS['waiting_bar']]
    )
    fig.update_traces(texttemplate='%{text}%', textposition='outside')
    fig.update_xaxes(type='category')

    return _finish_layout(fig, "Waiting Time", "No-Show Rate (%)", hovermode='closest')


def create_outcome_pie(distribution):
    """Overall showed-up vs no-show split"""
    fig = px.pie(
        pd.DataFrame(distribution),
        names='name',
        values='value',
        title="Overall Distribution",
        height=PIE_PLOT_HEIGHT,
        color='name',
        color_discrete_map={
            'Showed Up': PLOT_COLORS['show'],
            'No-Show': PLOT_COLORS['no_show']
        }
    )
    fig.update_traces(textinfo='percent+label')
    return fig


def create_waiting_days_histograms(waiting_by_outcome):
    """Create 1x2 subplot of waiting-day histograms using seaborn, attended vs missed"""
    sns.set_style("whitegrid")

    fig, axes = plt.subplots(1, 2, figsize=(12, 3))

    panels = [
        ('show', 'Showed Up', PLOT_COLORS['show']),
        ('no_show', 'No-Show', PLOT_COLORS['no_show'])
    ]
    for ax, (key, title, color) in zip(axes, panels):
        values = waiting_by_outcome[key]
        if values:
            sns.histplot(x=values, ax=ax, color=color, kde=len(set(values)) > 1, bins=15)
        ax.set_title(f'Waiting Days: {title} (n={len(values):,})', fontsize=12, fontweight='bold')
        ax.set_xlabel('Waiting Days', fontsize=10)
        ax.set_ylabel('Frequency', fontsize=10)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        ax.spines['left'].set_visible(False)

    plt.tight_layout()

    return fig
