"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses: settings, logging,
the error types and the database connector. Keep feature-specific SQL and
business logic in the corresponding feature package (e.g. `items/`).
"""
