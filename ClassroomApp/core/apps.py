"""Core app configuration and startup checks (collaborator wiring)."""

from django.apps import AppConfig
from django.core.checks import register, Error


class CoreConfig(AppConfig):
    """AppConfig registering a system check for the configured collaborators."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "ClassroomApp.core"

    def ready(self):
        """Register a Django system check that the store and blob store import paths resolve."""
        @register()
        def collaborators_check(app_configs, **kwargs):
            from django.conf import settings
            from django.utils.module_loading import import_string

            errors = []
            config = getattr(settings, "CLASSROOM", {})
            for key in ("STORE", "BLOB_STORE"):
                path = config.get(key)
                if not path:
                    errors.append(Error(f"CLASSROOM['{key}'] is not configured", id="core.E001"))
                    continue
                try:
                    import_string(path)
                except ImportError as exc:
                    errors.append(Error(f"CLASSROOM['{key}'] cannot be imported: {exc}", id="core.E002"))
            return errors
