"""
Pydantic schemas for analysis payloads.
"""
