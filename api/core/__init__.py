"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses (DB wiring,
settings, logging, error kinds, response envelopes). Keep feature-specific
SQL and validation in the corresponding feature package (e.g. `albums/`).
"""
