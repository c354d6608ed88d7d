from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

User = get_user_model()


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    UserAdmin matching the tenant-scoped User model.
    """
    ordering = ['email']
    list_display = ('email', 'tenant', 'name', 'role', 'is_staff', 'is_active')
    list_filter = ('role', 'is_staff', 'is_active')
    search_fields = ('email', 'username', 'name')

    fieldsets = (
        (None, {'fields': ('username', 'email', 'password')}),
        (_('Tenant'), {'fields': ('tenant', 'role')}),
        (_('Personal info'), {'fields': ('name',)}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        (_('Important dates'), {'fields': ('last_login_at', 'email_verified_at', 'created_at')}),
    )
    add_fieldsets = (
        (None, {'fields': ('username', 'email', 'name', 'tenant', 'role', 'password1', 'password2')}),
    )
