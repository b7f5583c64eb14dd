# =============================================================================
# Pipeline Configuration
# =============================================================================

MAX_PDF_PAGES = 50
PDF_RENDER_SCALE = 2.0  # Upscale factor applied when rasterizing PDF pages
PDF_BASE_DPI = 72  # PDF user-space resolution; render dpi = base * scale

# Page boundary marker inserted before every page after the first
PAGE_MARKER_TEMPLATE = "\n\n--- Page {page} ---\n\n"
PAGE_MARKER_PATTERN = r"^-{3} Page \d+ -{3}$"

# File names for run artifacts
EXTRACTION_RESULT_FILE = "01_extraction.json"
STRUCTURED_RESULT_FILE = "02_structured.json"
MAPPING_RESULT_FILE = "03_mapping.json"


# =============================================================================
# Quick Sample Pass
# =============================================================================

SAMPLE_MIN_LETTERS = 10  # Below this the sample says nothing about the script
SAMPLE_ARABIC_THRESHOLD = 0.3  # Sample ratio above this selects the Arabic profile


# =============================================================================
# Script Classification
# =============================================================================

ARABIC_DOMINANT_THRESHOLD = 0.6
MIXED_LOWER_THRESHOLD = 0.15
MIXED_DOMINANCE_FACTOR = 2  # Neither script dominates >= 2:1 -> mixed language


# =============================================================================
# Script Correction
# =============================================================================

CORRECTION_SKIP_RATIO = 0.10  # Arabic share of non-space chars below which text is untouched
ARABIC_MAJORITY_RATIO = 0.5
WORD_ORDER_LINE_RATIO = 0.8
MAX_CORRECTION_ROUNDS = 3


# =============================================================================
# Structure Extraction
# =============================================================================

DEFAULT_TITLE = "Document sans titre"
DEFAULT_INSTITUTION = "Institution non identifiée"
REFERENCE_CONTEXT_CHARS = 100
REFERENCE_CONFIDENCE = 0.8
AMOUNT_CONTEXT_CHARS = 50
AMOUNT_CONFIDENCE = 0.9
PERSON_CONTEXT_CHARS = 30
PERSON_CONFIDENCE = 0.6
ENTITY_CONTEXT_CHARS = 50
WILAYA_MATCH_THRESHOLD = 85  # rapidfuzz score (0-100) for canonical wilaya names


# =============================================================================
# Confidence Scoring
# =============================================================================

SCORE_TITLE_NUMBER = 0.3
SCORE_DATE = 0.2
SCORE_INSTITUTION = 0.2
SCORE_REFERENCES = 0.15
SCORE_ARTICLES = 0.15


# =============================================================================
# Form Mapping
# =============================================================================

MAPPING_CONFIDENCE_WEIGHT = 0.7
MAPPING_COMPLETION_WEIGHT = 0.3
DESCRIPTION_MAX_CHARS = 200
TITLE_MIN_LINE_CHARS = 10
