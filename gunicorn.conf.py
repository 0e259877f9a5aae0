# Gunicorn configuration for the marketplace API
# Run with: gunicorn -c gunicorn.conf.py

import os

wsgi_app = "marketplace.main:app"

# Bind to the port provided by the platform
bind = f"0.0.0.0:{os.environ.get('PORT', '10000')}"

# Workers
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

# FastAPI is ASGI: run it under uvicorn workers
worker_class = "uvicorn.workers.UvicornWorker"

timeout = 60

# Graceful timeout
graceful_timeout = 30

# Keep alive
keepalive = 5

# Each worker opens its own connection pool
preload_app = False

# Log level
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

# Access log
accesslog = "-"

# Error log
errorlog = "-"
