"""Realtime infrastructure (Socket.IO).

Admin dashboards and attendee clients share one socket server. Rooms are
keyed by conference so every broadcast stays inside its conference.
"""
