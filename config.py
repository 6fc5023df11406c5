"""
Configuration file for the Patient No-Show Dashboard
Contains all constants, thresholds, and configuration values
"""

# Page Configuration
PAGE_TITLE = "Patient No-Show Dashboard"
PAGE_ICON = ":material/event_busy:"
PAGE_LAYOUT = "wide"

# Sentinels
ALL = "All"
UNKNOWN = "Unknown"

# Canonical record columns (order of the normalized collection)
RECORD_COLUMNS = [
    'Age',
    'AgeGroup',
    'ScheduledDay',
    'AppointmentDay',
    'SMS_received',
    'NoShow',
    'WaitingDays',
    'Week'
]

# Header aliases per logical field, tried in order before the
# case/punctuation-insensitive search over all headers
FIELD_ALIASES = {
    'age': ['Age'],
    'age_group': ['AgeGroup', 'Age_Group', 'Age Group'],
    'sms_received': ['SMS_received', 'SMSReceived', 'SMS'],
    'no_show': ['NoShow', 'No_Show'],
    'scheduled': ['ScheduledDay', 'ScheduledDate', 'Scheduled', 'Scheduled_Day'],
    'appointment': ['AppointmentDay', 'AppointmentDate', 'Appointment', 'Appointment_Day'],
    'waiting_days': ['WaitingDays'],
    'awaiting': ['AwaitingTime', 'AwaitingDays'],
    'week': ['Week']
}

# Normalized header keys used for the insensitive search
FIELD_NORMALIZED_KEYS = {
    'age': ['age'],
    'age_group': ['agegroup'],
    'sms_received': ['smsreceived'],
    'no_show': ['noshow'],
    'scheduled': ['scheduledday'],
    'appointment': ['appointmentday'],
    'waiting_days': ['waitingdays'],
    'awaiting': ['awaitingtime', 'awaitingdays'],
    'week': ['week']
}

# Headers carrying these markers hold rescaled values, never raw day counts
SCALED_HEADER_MARKERS = ('normalized', 'normalised', 'scaled', 'zscore', 'standardized')

# Waiting-Time Bins (key, label, upper bound in days; None = open ended)
WAITING_BINS = [
    ('0', '0 days', 0),
    ('1-3', '1-3 days', 3),
    ('4-7', '4-7 days', 7),
    ('8-14', '8-14 days', 14),
    ('15+', '15+ days', None)
]

# Reminder Buckets
SMS_SENT_LABEL = "SMS Sent"
NO_SMS_LABEL = "No SMS"

# Filter Defaults (filter key -> record column)
FILTER_COLUMNS = {
    'age_group': 'AgeGroup',
    'sms_received': 'SMS_received',
    'week': 'Week'
}
DEFAULT_FILTERS = {key: ALL for key in FILTER_COLUMNS}

# Aggregation dimensions (dimension -> record column)
DIMENSIONS = {
    'age_group': 'AgeGroup',
    'sms': 'SMS_received',
    'week': 'Week',
    'waiting_time': 'WaitingDays'
}

# Insight Thresholds (percentage points)
SIMILAR_RATE_DIFF = 1.0
ELEVATED_RATE_DIFF = 3.0
COHORT_RATE_GAP = 2.0
MIN_BIN_SUPPORT = 50  # Minimum appointments before a bin's rate is reported

# Age cohorts for the younger vs older comparison ([low, high) by leading age)
YOUNGER_AGE_RANGE = (10, 30)
OLDER_AGE_RANGE = (50, 100)
AGE_GROUP_WIDTH = 10
UNPARSED_AGE_SORT_KEY = 999

# Statistics
MIN_STATS_ROWS = 3

# View Modes
VIEW_MODES = ['count', 'rate']
DEFAULT_VIEW = 'count'

# Plot Configuration
PLOT_COLORS = {
    'show': '#0d9488',
    'no_show': '#fb923c',
    'rate': '#fb923c',
    'average_line': '#64748b',
    'waiting_bar': '#0d9488'
}

# Plot Heights
AGE_PLOT_HEIGHT = 400
SMS_PLOT_HEIGHT = 400
WEEKLY_PLOT_HEIGHT = 450
WAITING_PLOT_HEIGHT = 400
PIE_PLOT_HEIGHT = 400
