"""
Backend package for the Career Canvas API.

This package provides a FastAPI application over a document store with
in-memory and SQL backends, plus thin routes into the OpenAI-backed
career assistant.
"""
