# Applied to every new tenant's settings row
DEFAULT_SETTINGS = {
    "currency": "COP",
    "locale": "es-CO",
    "timezone": "UTC",
    "invoice_prefix": "INV-",
}
