import os
from datetime import timedelta

from config import Config


class ProductionConfig(Config):
    # Use PostgreSQL for production (you'll need to set up a database)
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'taskflow-production-key-2024'

    # Any hosted PostgreSQL works:
    # - Supabase: https://supabase.com
    # - Neon: https://neon.tech
    # - Railway: https://railway.app
    # Or use Vercel Postgres

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:////tmp/taskflow.db'

    # Fix for SQLAlchemy compatibility
    if SQLALCHEMY_DATABASE_URI and SQLALCHEMY_DATABASE_URI.startswith("postgres://"):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace("postgres://", "postgresql://", 1)

    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')
