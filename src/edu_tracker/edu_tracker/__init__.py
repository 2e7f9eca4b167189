"""Classroom attendance tracker.

Students clock in/out against named groups, the teacher manages rosters and
reads aggregated durations, and state optionally converges across devices
through a single shared JSONBin document.

Organized by feature modules (attendance, roster, sync, admin, ...) with a thin
Flask controller layer over plain service objects wired in `container.py`.
"""
