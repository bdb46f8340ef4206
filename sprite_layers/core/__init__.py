"""
Core exports.

Provides logging, configuration loading and the event dispatcher shared by
the loading and playback packages.
"""
