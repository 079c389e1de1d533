"""Integration tests for textlens.

These tests validate system wiring:
- HTTP API → Service layer → SQLite database
- Service layer → LLM provider (faked)
- Admission queue and error handling across real request flows
"""
