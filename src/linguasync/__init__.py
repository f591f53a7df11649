"""LinguaSync — Audio transcription, translation & idiomatic coaching for language learners."""

__version__ = "0.1.0"
