"""Database setup utilities.

Exposes the shared ``db`` object used by every model. The application
factory binds it to the Flask app, so import ``db`` from
``wellness_portal`` rather than from this module directly.
"""
from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
