"""
Gunicorn configuration for Stampcard.

    gunicorn run:app
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Sync workers: each check-in holds one database transaction
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = int(os.getenv('GUNICORN_TIMEOUT', '60'))
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
capture_output = True

proc_name = 'stampcard'
preload_app = True
graceful_timeout = 30


def on_starting(server):
    server.log.info("Starting Stampcard server...")


def on_exit(server):
    server.log.info("Stampcard server shutting down...")
