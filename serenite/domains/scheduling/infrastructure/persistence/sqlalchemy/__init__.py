"""SQLAlchemy persistence for the scheduling domain."""
