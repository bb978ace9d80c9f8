"""Centralized configuration constants for the easel border calculator."""

# Units
MM_PER_INCH = 25.4
POINTS_PER_INCH = 72  # ReportLab / PDF user space

# Paper presets (inches, portrait: width <= height)
PAPER_SIZES = [
    {"value": "5x7", "label": "5x7", "width": 5, "height": 7},
    {"value": "3.875x5.875", "label": "3⅞x5⅞ (postcard)", "width": 3.875, "height": 5.875},
    {"value": "8x10", "label": "8x10", "width": 8, "height": 10},
    {"value": "11x14", "label": "11x14", "width": 11, "height": 14},
    {"value": "16x20", "label": "16x20", "width": 16, "height": 20},
    {"value": "20x24", "label": "20x24", "width": 20, "height": 24},
    {"value": "custom", "label": "Custom Paper Size", "width": 0, "height": 0},
]

# Aspect ratio presets (ratio units, not physical sizes)
ASPECT_RATIOS = [
    {"value": "3:2", "label": "35mm standard frame, 6x9 (3:2)", "width": 3, "height": 2},
    {"value": "even-borders", "label": "Even borders (match paper)", "width": None, "height": None},
    {"value": "65:24", "label": "XPan Pano (65:24)", "width": 65, "height": 24},
    {"value": "4:3", "label": "6x4.5/6x8/35mm Half Frame (4:3)", "width": 4, "height": 3},
    {"value": "1:1", "label": "6x6/Square (1:1)", "width": 1, "height": 1},
    {"value": "7:6", "label": "6x7", "width": 7, "height": 6},
    {"value": "5:4", "label": "4x5", "width": 5, "height": 4},
    {"value": "7:5", "label": "5x7", "width": 7, "height": 5},
    {"value": "16:9", "label": "HDTV (16:9)", "width": 16, "height": 9},
    {"value": "1.37:1", "label": "Academy Ratio (1.37:1)", "width": 1.37, "height": 1},
    {"value": "1.85:1", "label": "Widescreen (1.85:1)", "width": 1.85, "height": 1},
    {"value": "2:1", "label": "Univisium (2:1)", "width": 2, "height": 1},
    {"value": "2.39:1", "label": "CinemaScope (2.39:1)", "width": 2.39, "height": 1},
    {"value": "2.76:1", "label": "Ultra Panavision (2.76:1)", "width": 2.76, "height": 1},
    {"value": "custom", "label": "Custom Ratio", "width": None, "height": None},
]

# Easel slots (inches, stored landscape: width >= height)
EASEL_SIZES = [
    {"label": "5x7", "width": 7, "height": 5},
    {"label": "8x10", "width": 10, "height": 8},
    {"label": "11x14", "width": 14, "height": 11},
    {"label": "16x20", "width": 20, "height": 16},
    {"label": "20x24", "width": 24, "height": 20},
]

PAPER_SIZE_MAP = {entry["value"]: entry for entry in PAPER_SIZES}
ASPECT_RATIO_MAP = {entry["value"]: entry for entry in ASPECT_RATIOS}
MAX_EASEL_DIMENSION = max(max(e["width"], e["height"]) for e in EASEL_SIZES)

CUSTOM = "custom"
EVEN_BORDERS = "even-borders"

# Defaults
DEFAULT_ASPECT_RATIO = "3:2"
DEFAULT_PAPER_SIZE = "8x10"
DEFAULT_MIN_BORDER = 0.5  # inches
DEFAULT_CUSTOM_PAPER_WIDTH = 13
DEFAULT_CUSTOM_PAPER_HEIGHT = 10
DEFAULT_CUSTOM_ASPECT_WIDTH = 2
DEFAULT_CUSTOM_ASPECT_HEIGHT = 3

# Blades
BLADE_THICKNESS = 15  # fixed easel blade constant reported with readings
BLADE_MARKING_THRESHOLD_IN = 3.0  # many easels have no scale markings below this
BASE_PAPER_AREA = 20 * 24  # square inches, reference for display blade scaling
MAX_BLADE_SCALE_FACTOR = 2

# Border suggestion search
BORDER_SEARCH_SPAN = 0.5  # inches either side of the starting border
BORDER_SEARCH_STEP = 0.01
BORDER_SEARCH_DIVISOR = 100
BORDER_SNAP = 0.25  # quarter inch grid
QUARTER_INCH = 0.25

# Precision
DECIMAL_PLACES = 2
ROUNDING_MULTIPLIER = 100
EPSILON = 1e-9

# Preview box (pixels)
PREVIEW_MAX_WIDTH_PX = 400
PREVIEW_MAX_HEIGHT_PX = 400
PREVIEW_NARROW_VIEWPORT_PX = 444  # below this width the box shrinks to 90% of the viewport
PREVIEW_SHORT_VIEWPORT_PX = 800  # below this height the box shrinks to 50% of the viewport
DEFAULT_VIEWPORT = (1280, 900)

# Caching
CACHE_MAX_ENTRIES = 50

# Debounce windows (seconds)
WARNING_DEBOUNCE_SECONDS = 0.5
PERSIST_DEBOUNCE_SECONDS = 0.5

# Worker
CALCULATION_TIMEOUT_SECONDS = 5.0  # wait for a worker result before computing inline

# Persistence
CALC_STORAGE_KEY = "borderCalculatorState_v2"
DEFAULT_STATE_FILE = "~/.easelcalc/state.json"
