"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi seed-demo
    flask --app wsgi sweep-overdue
    gunicorn wsgi:app
"""

from report_portal import create_app

app = create_app()
