from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import TimeStampedModel, SoftDeleteModel
from apps.tax.additional_taxes import parse_additional_taxes


class Category(TimeStampedModel):
    """거래 카테고리 (수입/지출 분류, 시스템 기본값 + 사용자 정의)"""

    TYPE_CHOICES = [
        ('income', 'Ingreso'),
        ('expense', 'Gasto'),
    ]

    name = models.CharField(max_length=50)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    color = models.CharField(max_length=20, blank=True)
    icon = models.CharField(max_length=20, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name='custom_categories'
    )
    order = models.IntegerField(default=0, db_index=True)
    is_system = models.BooleanField(default=False, db_index=True)

    class Meta:
        db_table = 'categories'
        ordering = ['type', 'order', 'name']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'name'],
                condition=models.Q(user__isnull=False),
                name='unique_user_category_name'
            ),
            models.UniqueConstraint(
                fields=['name'],
                condition=models.Q(is_system=True),
                name='unique_system_category_name'
            )
        ]

    def __str__(self):
        return f"[{self.get_type_display()}] {self.name}"

    @classmethod
    def visible_to(cls, user):
        return cls.objects.filter(models.Q(is_system=True) | models.Q(user=user))


class Transaction(SoftDeleteModel):
    """
    수입/지출 거래 (movimiento)

    amount는 IVA 제외 금액(base imponible)으로 저장한다.
    IVA/IRPF는 additional_taxes(JSON 문자열)에 비율로 남겨 두고
    대시보드 집계에서 매번 다시 계산한다.
    """
    TYPE_CHOICES = [('income', 'Ingreso'), ('expense', 'Gasto')]
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Efectivo'),
        ('bank_transfer', 'Transferencia'),
        ('credit_card', 'Tarjeta'),
        ('direct_debit', 'Domiciliación'),
        ('other', 'Otro'),
    ]

    type = models.CharField(max_length=10, choices=TYPE_CHOICES, db_index=True)
    title = models.CharField(max_length=200, blank=True)
    description = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    date = models.DateTimeField(db_index=True)
    category = models.ForeignKey(
        Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions'
    )
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    notes = models.TextField(blank=True)
    invoice = models.ForeignKey(
        'invoices.Invoice', on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions'
    )
    # 원본 데이터 호환: JSON 배열을 문자열로 저장
    additional_taxes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'transactions'
        ordering = ['-date']
        indexes = [
            models.Index(fields=['user', '-date'], name='tx_user_date_idx'),
            models.Index(fields=['user', 'type', 'date'], name='tx_user_type_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_type_display()} {self.amount}€ ({self.date.date()})"

    @property
    def taxes(self):
        return parse_additional_taxes(self.additional_taxes)

    @property
    def category_name(self):
        return self.category.name if self.category_id else ''

    def clean(self):
        errors = {}
        if self.category_id and self.category.type != self.type:
            errors['category'] = 'La categoría no corresponde al tipo de movimiento.'
        if self.additional_taxes:
            try:
                parse_additional_taxes(self.additional_taxes, strict=True)
            except ValueError as e:
                errors['additional_taxes'] = str(e)
        if errors:
            raise ValidationError(errors)
