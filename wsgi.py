"""WSGI entry point for Gunicorn.

    gunicorn wsgi:app

FLASK_CONFIG picks the settings class (defaults to config.Config).
"""
import os

from faithsite import create_app

app = create_app(os.getenv('FLASK_CONFIG', 'config.Config'))

if __name__ == "__main__":
    app.run(port=app.config['LOCAL_PORT'])
