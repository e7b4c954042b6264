# Entry point for gunicorn / Azure App Service: `gunicorn wsgi:app`
import logging

from bidtracker.app import create_app

try:
    app = create_app()
except Exception as startup_error:
    logging.getLogger(__name__).error(f"Application startup failed: {startup_error}")
    raise

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000)
