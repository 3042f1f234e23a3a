"""
MoodTunes - Mood-to-Playlist Backend

Turns a free-text mood into search keywords with Gemini and finds matching
tracks on Spotify.
"""

__version__ = "0.1.0"
