"""
Pydantic schema definitions for API payloads.

``user`` holds the request models (and their validation rules) and the
public read model for user records; ``common`` holds the response
envelopes every endpoint wraps its output in.
"""
