"""
Data layer for ATS Assist.

Submodules:
- models: Pydantic schemas for backend and AI payloads
"""
