from django.apps import AppConfig


class SimpleSchemaConfig(AppConfig):
    name = 'simpleschema'
    verbose_name = 'simple schema provisioning'
