"""Core models, report framing and subprocess sessions."""
