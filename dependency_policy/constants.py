"""Constants for dependency-policy."""

# Exit codes
EXIT_SUCCESS = 0  # Pass or warnings only
EXIT_ISSUES = 1  # At least one deny finding
EXIT_ERROR = 2  # Check aborted (bad policy, bad graph)
