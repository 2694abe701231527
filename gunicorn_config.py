import os

# Server Socket
bind = os.environ.get('GUNICORN_BIND', '127.0.0.1:8000')  # NGINX proxies requests

# Worker Settings
workers = int(os.environ.get('GUNICORN_WORKERS', 4))
threads = 2  # Each worker handles 2 threads for concurrency
worker_class = "gthread"

# Security & Performance
timeout = 120
graceful_timeout = 90  # Allow workers to finish sending notifications before restarting
keepalive = 5
max_requests = 1000
max_requests_jitter = 50  # Staggered restarts to avoid downtime

# Logging
log_dir = os.path.join(os.environ.get('LOG_DIR', 'logs'), 'gunicorn')
os.makedirs(log_dir, exist_ok=True)
accesslog = os.path.join(log_dir, 'access.log')
errorlog = os.path.join(log_dir, 'error.log')
loglevel = "info"

# Process Name
proc_name = "enrollment_intake"

# Run with: gunicorn -c gunicorn_config.py app:app
