# wsgi.py (at repo root): gunicorn wsgi:app
from wellness_portal import create_app

app = create_app()
