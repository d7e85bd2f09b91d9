"""Allow ``python -m pmplanner``."""

from pmplanner.cli import main

main()
