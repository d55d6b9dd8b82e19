"""
Backend package for the profile website generator API.

This package provides a FastAPI application with storage abstractions
(in-memory and MongoDB) plus the profile and enhancement services that
sit behind the HTTP handlers.
"""
