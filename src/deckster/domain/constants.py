"""Centralized constants for deckster.

Storage keys, thresholds and windows live here so every layer imports from a
single source of truth.
"""

# ---------- Storage keys ----------
DECKS_KEY = "flashcards_decks"
STATS_KEY = "flashcards_stats"
STUDY_OPTIONS_KEY = "flashcards_study_options"
SESSION_KEY = "deckster_review_state"

APP_STORAGE_KEYS = (DECKS_KEY, STATS_KEY, STUDY_OPTIONS_KEY)

# ---------- Ratings ----------
MIN_DIFFICULTY = 0
MAX_DIFFICULTY = 3
CORRECT_THRESHOLD = 2  # Good/Easy count as correct
MISSED_THRESHOLD = 2  # Again/Hard are "missed"
MASTERED_THRESHOLD = 3

DIFFICULTY_LABELS = {0: "Again", 1: "Hard", 2: "Good", 3: "Easy"}

# ---------- Session persistence ----------
SESSION_TTL_HOURS = 24.0

# ---------- Storage quota ----------
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024
NEAR_LIMIT_RATIO = 0.8
