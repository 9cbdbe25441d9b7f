"""SpeechKarma API: an archive of timestamped political statements."""

__version__ = "0.1.0"
