"""
Entry point for running the Digital Offices API locally.

This module imports the application factory and starts the development
server when executed directly. In production, a WSGI server like
gunicorn should serve ``wsgi:app`` instead.
"""

import logging
import os

from digital_offices import create_app, db

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app()

if __name__ == "__main__":
    # Only create the database tables automatically in local
    # development when running this module directly. Production
    # deployments should manage migrations separately.
    with app.app_context():
        db.create_all()
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)), debug=True)
