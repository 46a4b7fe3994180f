"""Session and ranking constants shared across UI and core layers."""

OPTION_LABELS: tuple[str, ...] = ("A", "B", "C", "D")
TICK_INTERVAL_SECONDS: int = 1
DEFAULT_DURATION_MINUTES: int = 10
TIME_WARNING_WINDOW_SECONDS: int = 30
LEADERBOARD_SIZE: int = 3
UNKNOWN_PLACEHOLDER: str = "Unknown"
