"""
Serverless entry point for the Mantra Helpdesk API
"""
import os

# Set environment variables for serverless
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("SLA_REFRESH_INTERVAL", "0")  # No background sweep in serverless

from mangum import Mangum

from mantra.config import settings
from mantra.infrastructure.database import init_database
from mantra.main import app
from mantra.shared.api.dependencies import rules_manager
from mantra.shared.infrastructure.logging import setup_logging

# Lifespan is off, so do the startup work once per cold start
setup_logging(settings.log_level, settings.environment)
init_database()
rules_manager.load(settings.rules_config_path)

handler = Mangum(app, lifespan="off")
