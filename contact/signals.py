"""
Contact Form Signals

Django signals for contact submission events.
"""
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Submission

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Submission)
def submission_post_save(sender, instance, created, **kwargs):
    """Log every newly stored submission."""
    if created:
        logger.info(f"New contact submission #{instance.pk} stored")
