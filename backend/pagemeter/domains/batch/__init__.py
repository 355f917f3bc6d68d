"""Batch domain: batch job validation, cost estimation and persistence.

Use Inject(BatchJobServiceProtocol) in FastAPI endpoints.
"""
