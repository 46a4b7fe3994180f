"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "ExamQt Student Portal"

MODE_BUTTON_TESTS: str = "Objective Tests"
MODE_BUTTON_LEADERBOARD: str = "Leaderboard"
MODE_BUTTON_RESULTS: str = "My Results"

SELECTION_DESCRIPTION: str = "Ready to test your knowledge? Pick a test published for your class."
SELECTION_EMPTY_STATE: str = "No tests are available for your class."
SELECTION_START_BUTTON: str = "Start Test"
SELECTION_REFRESH_BUTTON: str = "Reload Tests"

SESSION_NEXT_BUTTON: str = "Next Question"
SESSION_SUBMIT_BUTTON: str = "Submit Test"
SESSION_LEAVE_BUTTON: str = "Leave Test"
SESSION_QUESTION_TEMPLATE: str = "Question {number} of {total}"
SESSION_TIME_TEMPLATE: str = "Time Left: {time}"

RESULT_DIALOG_TITLE: str = "Test Completed!"
RESULT_RETRY_BUTTON: str = "Retry Saving"
RESULT_DASHBOARD_BUTTON: str = "Go to Dashboard"

LEADERBOARD_EMPTY_STATE: str = "No ranked attempts yet."
RESULTS_EMPTY_STATE: str = "You have not completed any objective tests yet."
