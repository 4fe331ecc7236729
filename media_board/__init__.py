"""
Backend package for the media board API.

This package provides a FastAPI application that stores uploaded media and
sound files on disk and keeps the board's current state (top media, yes
media, notes, last image and sound) in flat JSON record files.
"""
