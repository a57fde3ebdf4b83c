"""Data models for render requests, plans and response envelopes."""
