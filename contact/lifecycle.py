"""
Contact Form Lifecycle Hooks

Install and uninstall entry points, called by the management commands.
"""
import logging

from .store import SubmissionStore

logger = logging.getLogger(__name__)


def on_install(store=None):
    """Create the submissions table if it does not exist yet."""
    store = store or SubmissionStore()
    created = store.ensure_schema()
    if not created:
        logger.info("Contact form already installed")
    return created


def on_uninstall(store=None):
    """Remove every stored submission along with the table."""
    store = store or SubmissionStore()
    store.drop_all()
