import streamlit as st
from config import *
from pipeline import *
from plots import *

# Page Configuration
st.set_page_config(
    page_title=PAGE_TITLE,
    layout=PAGE_LAYOUT,
    page_icon=PAGE_ICON
)


# Cached pipeline stages (each keyed on its own inputs)
@st.cache_data(show_spinner="Parsing appointments...")
def cached_load_dataset(raw_bytes):
    return load_dataset(raw_bytes)


@st.cache_data
def cached_summarize_dataset(records):
    return summarize_dataset(records)


@st.cache_data
def cached_filter(records, filters):
    return filter_appointments(records, filters)


@st.cache_data
def cached_aggregates(filtered):
    return aggregate_views(filtered)


@st.cache_data
def cached_insights(aggregates, overall_kpis, filters):
    return generate_insights(aggregates, overall_kpis, filters)


def view_toggle(label, key):
    return st.segmented_control(
        label,
        options=VIEW_MODES,
        default=DEFAULT_VIEW,
        key=key,
        label_visibility='collapsed'
    ) or DEFAULT_VIEW


# Header
st.title(f"{PAGE_ICON} {PAGE_TITLE}")
st.caption(
    "Upload an appointments CSV to explore **no-show** patterns by age group, "
    "SMS reminder, week and waiting time. "
    f"{ASSOCIATION_NOTE}"
)

if 'filters' not in st.session_state:
    st.session_state['filters'] = default_filters()

# Sidebar Configuration
with st.sidebar:
    st.title(":material/settings: Settings")

    uploaded_file = st.file_uploader(
        "Choose CSV file",
        type="csv",
        help="One row per scheduled appointment, header row required"
    )

    st.divider()

    show_dataframe = st.checkbox(
        ":material/bug_report: Debug + Export Mode",
        value=False,
        help="Display the normalized records and aggregates."
    )

if uploaded_file is None:
    st.info(":material/upload_file: Upload a CSV file from the sidebar to get started.")
    st.stop()

try:
    records, load_info = cached_load_dataset(uploaded_file.getvalue())
except UnicodeDecodeError as e:
    st.sidebar.error(f":material/close: Could not read {uploaded_file.name} as text: {e}")
    st.stop()

if load_info['recovered_rows']:
    st.sidebar.warning(f"Recovered {load_info['recovered_rows']} malformed rows (extra fields dropped)")
if load_info['missing_fields']:
    st.sidebar.warning(f"Columns not found: {', '.join(load_info['missing_fields'])}")

if records.empty:
    st.warning(":material/warning: No appointments found in this file.")
    st.stop()

dataset = cached_summarize_dataset(records)
overview = dataset['overview']
quality = dataset['data_quality']
overall_kpis = dataset['overall_kpis']

# Data quality
with st.expander(
    f":material/fact_check: Data quality: {quality['total']:,} total appointments "
    f"({overview['date_range']})",
    expanded=False
):
    st.markdown(
        f"- **Waiting Days** missing: {quality['missing_waiting_days']:,} records\n"
        f"- **SMS Received** missing: {quality['missing_sms']:,} records\n"
        f"- **Age Group** missing: {quality['missing_age_group']:,} records\n"
        f"- NoShow=1 means the patient missed the appointment"
    )

# Filters
st.subheader("Filters")
options = dataset['filter_options']
filters = st.session_state['filters']

col1, col2, col3, col4 = st.columns([3, 3, 3, 1])
with col1:
    age_options = [ALL] + options['age_groups']
    age_group = st.selectbox(
        "Age Group",
        options=age_options,
        index=age_options.index(filters['age_group']) if filters['age_group'] in age_options else 0
    )
with col2:
    sms_labels = {ALL: 'All', '1': 'SMS Sent', '0': 'No SMS'}
    sms_received = st.selectbox(
        "SMS Received",
        options=list(sms_labels),
        format_func=sms_labels.get,
        index=list(sms_labels).index(filters['sms_received']) if filters['sms_received'] in sms_labels else 0
    )
with col3:
    week_options = [ALL] + options['weeks']
    week = st.selectbox(
        "Week",
        options=week_options,
        index=week_options.index(filters['week']) if filters['week'] in week_options else 0
    )
with col4:
    st.write("")
    if st.button("Reset", icon=":material/restart_alt:", use_container_width=True):
        st.session_state['filters'] = reset_filters()
        st.rerun()

filters = update_filters(filters, age_group=age_group, sms_received=sms_received, week=week)
st.session_state['filters'] = filters

active_filters = count_active_filters(filters)
if active_filters:
    st.badge(f":material/filter_alt: {active_filters} active filter(s): {describe_filters(filters)}", color='blue')

# Pipeline
filtered = cached_filter(records, filters)
aggregates = cached_aggregates(filtered)
insights = cached_insights(aggregates, overall_kpis, filters)
kpis = aggregates['kpis']

# KPIs
k1, k2, k3, k4 = st.columns(4)
k1.metric("Total Appointments", f"{kpis['total']:,}")
k2.metric("Showed Up", f"{kpis['shows']:,}")
k3.metric("No-Shows", f"{kpis['no_shows']:,}")
k4.metric(
    "No-Show Rate",
    f"{kpis['no_show_rate']}%",
    delta=f"{kpis['no_show_rate'] - overall_kpis['no_show_rate']:.1f} pts vs overall" if active_filters else None,
    delta_color='inverse'
)

current_view = insights['current_view']
if current_view:
    with st.container(border=True):
        st.markdown(f"**Current view.** {current_view['summary']}")
        if current_view['insight']:
            baseline = current_view['baseline']
            if baseline and baseline['classification'] == 'elevated risk':
                st.error(current_view['insight'])
            elif baseline and baseline['classification'] == 'significantly better':
                st.success(current_view['insight'])
            else:
                st.info(current_view['insight'])

if insights['key_takeaways']:
    st.subheader(":material/lightbulb: Key Takeaways")
    for takeaway in insights['key_takeaways']:
        st.markdown(f"- {takeaway}")

if kpis['total'] == 0:
    st.warning(":material/warning: No appointments match the current filters.")
    st.stop()

# Charts
left, right = st.columns(2)
with left:
    age_view = view_toggle("Age view", 'age_view')
    st.plotly_chart(
        create_age_group_plot(aggregates['by_age_group'], age_view, overall_kpis['no_show_rate']),
        use_container_width=True
    )
    age_insight = insights['age_group']
    if age_insight:
        st.caption(age_insight['rate_text'] if age_view == 'rate' else age_insight['count_text'])

with right:
    st.plotly_chart(create_outcome_pie(aggregates['outcome_distribution']), use_container_width=True)

left, right = st.columns(2)
with left:
    sms_view = view_toggle("SMS view", 'sms_view')
    st.plotly_chart(
        create_sms_plot(aggregates['by_sms'], sms_view, overall_kpis['no_show_rate']),
        use_container_width=True
    )

with right:
    st.plotly_chart(create_waiting_time_plot(aggregates['by_waiting_time']), use_container_width=True)
    excluded = aggregates['waiting_days_stats']['excluded_count']
    if excluded > 0:
        st.caption(f"Note: {excluded:,} appointments excluded (missing waiting time).")

week_view = view_toggle("Week view", 'week_view')
st.plotly_chart(
    create_weekly_trend_plot(aggregates['by_week'], week_view, overall_kpis['no_show_rate']),
    use_container_width=True
)
if week_view == 'rate' and insights['weekly_trend']:
    st.caption(insights['weekly_trend']['text'])

impact = insights['waiting_time_impact']
if impact:
    st.subheader(":material/hourglass: Waiting Time Impact")
    w1, w2, w3 = st.columns(3)
    w1.metric("Median wait (showed up)", f"{impact['show_median']} days", help=f"Mean {impact['show_mean']} days")
    w2.metric("Median wait (no-show)", f"{impact['no_show_median']} days", help=f"Mean {impact['no_show_mean']} days")
    w3.metric("No-show / show mean wait", f"{impact['ratio']}x" if impact['ratio'] is not None else "N/A")
    st.pyplot(create_waiting_days_histograms(aggregates['waiting_days_by_outcome']))

with st.expander(":material/analytics: Statistical Summary", expanded=False):
    if insights['statistical_summary']:
        for line in insights['statistical_summary']:
            st.markdown(f"- {line}")
    else:
        st.caption("Not enough data in the current view for association statistics.")
    st.caption(ASSOCIATION_NOTE)

if show_dataframe:
    with st.expander(":material/bug_report: Debug", expanded=True):
        st.write("Load info", load_info)
        st.dataframe(filtered, use_container_width=True)
        for name in ['by_age_group', 'by_sms', 'by_week', 'by_waiting_time']:
            st.write(name)
            st.dataframe(aggregates[name], use_container_width=True)
        st.download_button(
            "Download filtered records",
            data=filtered.to_csv(index=False),
            file_name="filtered_appointments.csv",
            mime="text/csv",
            icon=":material/download:"
        )
