# Schemas package init
"""
BaseDrop Backend — Pydantic Schemas
=====================================

What:  Data contracts for stored records and API responses.

Schema Inventory:
    - submission.py: Author, SubmissionRecord, SubmissionResponse,
                     error bodies, HealthResponse
"""
