"""Global constants for the COVID-19 report generator."""

# ---------------------------------------------------------------------------
# disease.sh base URL
# ---------------------------------------------------------------------------
DISEASE_SH_BASE_URL: str = "https://disease.sh/v3/covid-19/"

# Target identifier selecting the global aggregate endpoint.
GLOBAL_TARGET: str = "all"

# ---------------------------------------------------------------------------
# Output file naming
# ---------------------------------------------------------------------------
OUTPUT_DIR: str = "output"
REPORT_FILE_PREFIX: str = "Report-"
REPORT_FILE_EXTENSION: str = ".pdf"
TIMESTAMP_TOKEN_FORMAT: str = "%Y%m%d%H%M%S"

# Annotation rows
ANNOTATION_DATETIME_FORMAT: str = "%Y-%m-%d %H:%M"

# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------
CHART_WIDTH: int = 450
CHART_HEIGHT: int = 300
TABLE_ROW_HEIGHT: int = 20

# Text shown in place of a missing statistic.
MISSING_VALUE_TEXT: str = "N/A"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------
# Used when no TrueType file is configured; built into reportlab.
DEFAULT_FONT_FAMILY: str = "Helvetica"

# ---------------------------------------------------------------------------
# Style labels
# ---------------------------------------------------------------------------
STYLE_TITLE: str = "title"
STYLE_SUBTITLE: str = "sub_title"
STYLE_DATETIME: str = "datetime"
STYLE_TABLE_BODY: str = "tableBody"
STYLE_TABLE_HEADER: str = "tableHeader"
STYLE_IMAGE: str = "image"

TABLE_HEADER_FILL: str = "#eeeeff"

# ---------------------------------------------------------------------------
# Document text
# ---------------------------------------------------------------------------
TITLE_TEXT: str = "COVID-19 Report"
CREATED_PREFIX: str = "Created: "
STATUS_HEADING: str = "Status:"
CHART_HEADING: str = "History chart:"
ANNOTATION_HEADING: str = "Comments:"

IDENTITY_HEADER: tuple[str, str] = ("Country", "Population")
ANNOTATION_HEADER: tuple[str, str] = ("Date/Time", "Comment")

# (label, StatisticsRecord field) in display order.
STATUS_ROWS: tuple[tuple[str, str], ...] = (
    ("Active cases", "active"),
    ("Critical", "critical"),
    ("Recovered", "recovered"),
    ("Total cases", "cases"),
    ("Total deaths", "deaths"),
    ("Tests", "tests"),
)
