"""Storage interfaces and their SQLAlchemy implementations."""
