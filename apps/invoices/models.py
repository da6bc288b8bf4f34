from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import UserOwnedModel
from apps.core.utils import round2
from apps.tax.additional_taxes import parse_additional_taxes
from apps.tax.utils import DocumentTotals, recompute


class FiscalDocument(UserOwnedModel):
    """
    송장/견적 공통 추상 모델

    subtotal / tax / total은 계산 결과 필드다 (editable=False).
    값을 바꾸고 싶으면 품목(items)이나 additional_taxes를 바꾸고 recompute()를 호출한다.
    """
    client_name = models.CharField(max_length=200)
    issue_date = models.DateTimeField(db_index=True)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), editable=False)
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), editable=False)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), editable=False)

    # [{"name": "IVA", "amount": 21, "isPercentage": true}, {"name": "IRPF", "amount": -15, ...}]
    additional_taxes = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        abstract = True
        ordering = ['-issue_date']

    @property
    def taxes(self):
        return parse_additional_taxes(self.additional_taxes)

    @property
    def totals(self):
        return DocumentTotals(subtotal=self.subtotal, tax_total=self.tax, total=self.total)

    def apply_totals(self, totals):
        self.subtotal = totals.subtotal
        self.tax = totals.tax_total
        self.total = totals.total

    def recompute(self, items=None, strict=False):
        """
        품목/세금 변경 후 합계 전체 재계산 (저장은 호출부 책임)

        items를 넘기지 않으면 DB에 저장된 품목을 사용한다.
        """
        if items is None:
            items = list(self.items.all()) if self.pk else []
        return recompute(self, items=items, strict=strict)


class DocumentItem(models.Model):
    description = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), editable=False)

    class Meta:
        abstract = True
        ordering = ['id']

    def __str__(self):
        return f"{self.description} ({self.quantity} x {self.unit_price})"

    def save(self, *args, **kwargs):
        self.subtotal = round2(self.quantity * self.unit_price)
        super().save(*args, **kwargs)


class Invoice(FiscalDocument):
    """송장 (factura)"""

    STATUS_CHOICES = [
        ('draft', 'Borrador'),
        ('pending', 'Pendiente'),
        ('paid', 'Pagada'),
        ('overdue', 'Vencida'),
        ('cancelled', 'Cancelada'),
    ]

    invoice_number = models.CharField(max_length=50, db_index=True)
    due_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)

    class Meta(FiscalDocument.Meta):
        db_table = 'invoices'
        indexes = [
            models.Index(fields=['user', '-issue_date'], name='invoice_user_date_idx'),
            models.Index(fields=['user', 'status', 'issue_date'], name='invoice_user_status_idx'),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.client_name} ({self.total}€)"


class InvoiceItem(DocumentItem):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')

    class Meta(DocumentItem.Meta):
        db_table = 'invoice_items'


class Quote(FiscalDocument):
    """견적 (presupuesto) - 세무 집계에는 포함되지 않음"""

    STATUS_CHOICES = [
        ('draft', 'Borrador'),
        ('sent', 'Enviado'),
        ('accepted', 'Aceptado'),
        ('rejected', 'Rechazado'),
        ('expired', 'Caducado'),
    ]

    quote_number = models.CharField(max_length=50, db_index=True)
    valid_until = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft', db_index=True)

    class Meta(FiscalDocument.Meta):
        db_table = 'quotes'
        indexes = [models.Index(fields=['user', '-issue_date'], name='quote_user_date_idx')]

    def __str__(self):
        return f"{self.quote_number} - {self.client_name} ({self.total}€)"


class QuoteItem(DocumentItem):
    quote = models.ForeignKey(Quote, on_delete=models.CASCADE, related_name='items')

    class Meta(DocumentItem.Meta):
        db_table = 'quote_items'
