# --------------------------
# Spreadsheet column conventions
# --------------------------

# Bookkeeping columns of the performance exports, never charted.
TIME_SOURCE_COLUMN = "Heure programme"  # seconds since the program started
SEQUENCE_COLUMN = "Numéro de mesure"    # running measurement number
EXCLUDED_COLUMNS = (SEQUENCE_COLUMN, TIME_SOURCE_COLUMN)

# Field names used in normalized / merged rows
TIME_FIELD = "Temps"
KEY_SEPARATOR = "__"  # "<file name>__<column>"

# --------------------------
# Column grouping
# --------------------------

MAIN_INDICATOR_PATTERN = r"^Indicateur\d+$"  # matched case-insensitively
TOTAL_LOAD_COLUMN = "CHARGE_TOTALE"
TASK_MARKER = "Tache"
GENERAL_GROUP_LABEL = "Général"

# --------------------------
# Uploads
# --------------------------

ACCEPTED_EXTENSIONS = (".xlsx", ".xls")
UPLOAD_WORKERS = 4  # files decoded in parallel

# --------------------------
# Chart styling
# --------------------------

# Cycled by position among the selected series.
SERIES_COLORS = [
    "#f72585", "#06d6a0", "#3b82f6", "#ffd166",
    "#a855f7", "#ff6b35", "#00b4d8", "#95d5b2",
    "#e63946", "#457b9d", "#2ec4b6", "#ff9f1c",
]

X_AXIS_TITLE = "Temps (s)"
Y_AXIS_TITLE = "Charge (%)"

# --------------------------
# Live demo feed
# --------------------------

SAMPLE_PERIOD_S = 1.0      # seconds between samples
HISTORY_MAX_POINTS = 300   # rolling history kept in memory

WINDOW_OPTIONS = [
    {"label": "30 s", "value": 30},
    {"label": "1 min", "value": 60},
    {"label": "2 min", "value": 120},
    {"label": "5 min", "value": 300},
]
DEFAULT_WINDOW_S = 30

# These are the simulated signals shown on the live page.
# "domain" is the fixed y-axis range, "bounds" clamps the random walk.
DEMO_CHARTS = [
    {
        "key": "hr",
        "label": "Fréquence cardiaque",
        "unit": "bpm",
        "color": "#f72585",
        "domain": (50, 110),
        "bounds": (55, 105),
        "step": 2.4,
        "start": 72,
        "decimals": 0,
    },
    {
        "key": "spo2",
        "label": "Saturation en oxygène",
        "unit": "%",
        "color": "#06d6a0",
        "domain": (90, 102),
        "bounds": (93, 100),
        "step": 0.4,
        "start": 98,
        "decimals": 1,
    },
    {
        "key": "bp",
        "label": "Pression artérielle",
        "unit": "mmHg",
        "color": "#3b82f6",
        "domain": (80, 170),
        "bounds": (90, 160),
        "step": 3.0,
        "start": 120,
        "decimals": 0,
    },
    {
        "key": "temp",
        "label": "Température corporelle",
        "unit": "°C",
        "color": "#ffd166",
        "domain": (35, 39),
        "bounds": (36, 38.5),
        "step": 0.08,
        "start": 37.1,
        "decimals": 1,
    },
]

# --------------------------
# Server
# --------------------------

HOST = "127.0.0.1"
PORT = 8050
DEBUG = False
