"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_REQUIRED_ATTENDANCE = 22
DEFAULT_ONSITE_PERFORMANCE = 3.0
DEFAULT_ANNOTATION_SCORE = 80.0

DEFAULT_WEIGHT_ANNOTATION = 20.0
DEFAULT_WEIGHT_ATTENDANCE = 20.0
DEFAULT_WEIGHT_ONSITE = 20.0
DEFAULT_WEIGHT_ACCURACY = 40.0

# Spreadsheet serial 25569 is 1970-01-01.
SPREADSHEET_SERIAL_OFFSET = 25569

IMPORT_HEADER_LABELS = ("日期", "Ngày")
IMPORT_ERROR_LIMIT = 10
RECENT_IMPORTS_LIMIT = 50

ACCURACY_THRESHOLD = 95.0
DEFAULT_SESSION_DAYS = 7
PERIOD_OPTIONS_COUNT = 12
