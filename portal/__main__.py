"""
Entry point for running the portal as a module.

Usage:
    python -m portal serve
    python -m portal generate
    python -m portal timetable --search smith
    python -m portal list courses
"""

from portal.cli import main

if __name__ == "__main__":
    main()
