from django.contrib import admin

from .models import Invoice, InvoiceItem, Quote, QuoteItem
from .services import recompute_and_save


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ('subtotal',)


class QuoteItemInline(admin.TabularInline):
    model = QuoteItem
    extra = 0
    readonly_fields = ('subtotal',)


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'user', 'client_name', 'issue_date', 'status', 'subtotal', 'tax', 'total')
    list_filter = ('status', 'issue_date')
    search_fields = ('invoice_number', 'client_name', 'user__username')
    readonly_fields = ('subtotal', 'tax', 'total', 'created_at', 'updated_at')
    inlines = [InvoiceItemInline]

    def save_related(self, request, form, formsets, change):
        # 품목 인라인 저장 후 합계 재계산
        super().save_related(request, form, formsets, change)
        recompute_and_save(form.instance)


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ('quote_number', 'user', 'client_name', 'issue_date', 'status', 'total')
    list_filter = ('status',)
    search_fields = ('quote_number', 'client_name')
    readonly_fields = ('subtotal', 'tax', 'total', 'created_at', 'updated_at')
    inlines = [QuoteItemInline]

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        recompute_and_save(form.instance)
