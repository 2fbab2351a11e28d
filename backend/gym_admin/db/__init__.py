# Database package: SQLAlchemy models and session management
