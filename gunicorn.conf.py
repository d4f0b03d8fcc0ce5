"""Gunicorn config for the Sales Station API."""
import os

# Bind to the platform's PORT or default 8000
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

wsgi_app = "sales_station.main:app"

# One worker: the local store's append lock is per process, so more
# workers would race on the same blob. Remote mode can raise this.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "1"))

# Sheet round-trips can be slow
timeout = 60

# Graceful timeout for shutdown
graceful_timeout = 30

keepalive = 65

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("SALES_STATION_LOG_LEVEL", "info").lower()
