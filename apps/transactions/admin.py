from django.contrib import admin
from django.utils.html import format_html

from .models import Transaction, Category


class SoftDeleteAdminMixin:
    def get_queryset(self, request):
        return self.model.objects.all()


@admin.register(Transaction)
class TransactionAdmin(SoftDeleteAdminMixin, admin.ModelAdmin):
    """거래 내역 관리 (삭제된 거래 포함)"""
    list_display = [
        'date',
        'get_type_display_colored',
        'get_amount_display',
        'description',
        'category',
        'is_active'
    ]

    date_hierarchy = 'date'

    list_filter = ['is_active', 'type', 'category']

    search_fields = ['description', 'notes', 'user__username']

    @admin.display(description='Tipo', ordering='type')
    def get_type_display_colored(self, obj):
        if obj.type == 'income':
            return format_html('<span style="color:green; font-weight:bold;">{}</span>', 'Ingreso')
        return format_html('<span style="color:red; font-weight:bold;">{}</span>', 'Gasto')

    @admin.display(description='Base imponible', ordering='amount')
    def get_amount_display(self, obj):
        formatted = f"{obj.amount:,.2f} €"
        if obj.type == 'income':
            return format_html('<span style="color:green;">{}</span>', formatted)
        return format_html('<span style="color:red;">{}</span>', formatted)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'user', 'is_system', 'order']
    list_filter = ['type', 'is_system']
    ordering = ['type', 'order']
    search_fields = ['name']
