from django.apps import AppConfig


class ContactConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'contact'
    verbose_name = 'Contact Form'

    def ready(self):
        """Import signals when app is ready."""
        import contact.signals  # noqa
