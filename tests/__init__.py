"""
Test suite for Kilroy.

- Unit tests for models, services, state and UI helpers
- Integration tests for complete user journeys
"""
