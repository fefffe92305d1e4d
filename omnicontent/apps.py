from django.apps import AppConfig


class OmniContentConfig(AppConfig):
    name = 'omnicontent'
    verbose_name = 'OmniContent'
