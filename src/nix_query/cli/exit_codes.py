"""Exit codes used by the CLI."""

# A NixQueryError was caught and reported.
GENERAL_ERROR = 1

# 128 + SIGINT.
KEYBOARD_INTERRUPT = 130
