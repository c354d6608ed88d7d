# backend/platformapp/constants.py
"""Audit action codes and resource names."""


class AuditAction:
    # Catalog
    PRODUCT_CREATE = "PRODUCT_CREATE"
    PRODUCT_UPDATE = "PRODUCT_UPDATE"
    PRODUCT_DELETE = "PRODUCT_DELETE"
    PRODUCT_STOCK_UPDATE = "PRODUCT_STOCK_UPDATE"
    PRODUCT_PUBLISH = "PRODUCT_PUBLISH"
    PRODUCT_UNPUBLISH = "PRODUCT_UNPUBLISH"
    PRODUCT_IMAGE_UPLOAD = "PRODUCT_IMAGE_UPLOAD"
    PRODUCT_LOW_STOCK = "PRODUCT_LOW_STOCK"

    CATEGORY_CREATE = "CATEGORY_CREATE"
    CATEGORY_UPDATE = "CATEGORY_UPDATE"
    CATEGORY_DELETE = "CATEGORY_DELETE"

    # Discounts
    DISCOUNT_CREATE = "DISCOUNT_CREATE"
    DISCOUNT_UPDATE = "DISCOUNT_UPDATE"
    DISCOUNT_DELETE = "DISCOUNT_DELETE"
    DISCOUNT_VALIDATE = "DISCOUNT_VALIDATE"
    DISCOUNT_APPLY = "DISCOUNT_APPLY"

    # Orders
    ORDER_CREATE = "ORDER_CREATE"
    ORDER_UPDATE = "ORDER_UPDATE"
    ORDER_STATUS_UPDATE = "ORDER_STATUS_UPDATE"
    ORDER_CANCEL = "ORDER_CANCEL"

    # Customers
    CUSTOMER_CREATE = "CUSTOMER_CREATE"
    CUSTOMER_UPDATE = "CUSTOMER_UPDATE"
    CUSTOMER_DELETE = "CUSTOMER_DELETE"

    # Tenants & settings
    TENANT_CREATE = "TENANT_CREATE"
    TENANT_UPDATE = "TENANT_UPDATE"
    TENANT_DEACTIVATE = "TENANT_DEACTIVATE"
    SETTINGS_UPDATE = "SETTINGS_UPDATE"
    SETTINGS_DELETE = "SETTINGS_DELETE"
    SETTINGS_LOGO_UPLOAD = "SETTINGS_LOGO_UPLOAD"

    # Users & auth
    USER_CREATE = "USER_CREATE"
    USER_UPDATE = "USER_UPDATE"
    USER_DELETE = "USER_DELETE"
    USER_PASSWORD_UPDATE = "USER_PASSWORD_UPDATE"
    AUTH_LOGIN = "AUTH_LOGIN"
    AUTH_LOGOUT = "AUTH_LOGOUT"
    AUTH_PASSWORD_RESET_REQUEST = "AUTH_PASSWORD_RESET_REQUEST"
    AUTH_PASSWORD_RESET = "AUTH_PASSWORD_RESET"


class AuditResource:
    PRODUCT = "Product"
    CATEGORY = "Category"
    DISCOUNT = "Discount"
    ORDER = "Order"
    CUSTOMER = "Customer"
    TENANT = "Tenant"
    SETTINGS = "Settings"
    USER = "User"
    AUTH = "Auth"


FAILED_SUFFIX = "_FAILED"
