"""Process exit codes for the arbor CLI."""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
API_ERROR = 3
CONFLICT = 4
