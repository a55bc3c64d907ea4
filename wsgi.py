# wsgi.py (at repo root)
import logging

from digital_offices import create_app

logging.basicConfig(level=logging.INFO)

app = create_app()
