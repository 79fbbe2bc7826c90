import os

wsgi_app = "core.wsgi:application"
bind = os.getenv("GUNICORN_BIND", "unix:/run/smart-contact-form/gunicorn.sock")
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
# Upper bound on a single submit request; the contact pipeline has no timeouts of its own
timeout = int(os.getenv("GUNICORN_TIMEOUT", 30))
keepalive = 5

# Logging
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "smart-contact-form"

# Server mechanics
daemon = False
umask = 0o007


# Server hooks
def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting contact form server")


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Contact form server is ready. Spawning workers")


def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal, e.g. on timeout."""
    worker.log.warning("Worker received SIGABRT signal - request exceeded timeout")
