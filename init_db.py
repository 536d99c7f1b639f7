#!/usr/bin/env python
"""Database initialization script for the translation service.

This script creates the translation cache tables based on the SQLAlchemy
models. Run this once before starting the application for the first time.

Usage:
    python init_db.py
"""

import os
import sys
from linguabatch import create_app, db


def init_database():
    """Initialize the database by creating all tables."""

    config_name = os.getenv('FLASK_ENV', 'development')
    app = create_app(config_name)

    print(f"\n{'='*60}")
    print(f"Database Initialization for {config_name.upper()} Environment")
    print(f"{'='*60}\n")

    with app.app_context():
        try:
            print("Creating database tables...")
            print(f"Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}\n")

            db.create_all()

            from linguabatch.models import TranslationCache, PageTranslation

            for model in (TranslationCache, PageTranslation):
                print(f"  - {model.__tablename__}: {model.query.count()} rows")

            print("\n✅ Database tables created successfully!\n")
            return True
        except Exception as e:
            print(f"❌ Error creating database tables: {e}")
            return False


if __name__ == '__main__':
    sys.exit(0 if init_database() else 1)
