"""
Viewer-side domain logic.

Includes:
- viewing: the viewing-session engine (selection, gating, playback, navigation, engagement).
"""
