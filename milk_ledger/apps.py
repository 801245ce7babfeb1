from django.apps import AppConfig


class MilkLedgerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'milk_ledger'
    verbose_name = 'Milk Ledger'
