"""
Pydantic schemas for hostels, allocations, payments and settings.
"""
