"""Static metadata describing ExamQt."""

APP_NAME = "ExamQt"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "ExamQt is a student portal for timed objective tests built with Qt and FastAPI. "
    "Pick a test published for your class, answer before the countdown ends, and see how "
    "you rank against your classmates."
)

HELP_TEXT = (
    "Choose a test and press Start. Each question has four options (A-D); pick one and press "
    "Next Question. On the last question Submit Test is always available. When the time runs "
    "out the test is submitted automatically with the answers you confirmed so far.\n\n"
    "The leaderboard ranks the fastest finishers first; on equal time the higher score wins."
)
