from django.apps import AppConfig


class SecondhomeMainAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'secondhome_main_app'

    def ready(self):
        import secondhome_main_app.signals  # noqa: F401
