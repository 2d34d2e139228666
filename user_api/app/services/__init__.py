"""
Service layer abstraction.

Each service encapsulates the business logic for a domain and talks to
the record store, so API handlers stay free of query construction.
"""
