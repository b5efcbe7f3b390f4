"""
Core building blocks: exceptions, constants, locking, middleware and
background task wiring.
"""
