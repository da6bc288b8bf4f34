"""
송장/견적 입력 폼

API 본문(JSON)을 검증하는 용도. 합계 필드(subtotal/tax/total)는
폼에 없다: 항상 품목과 추가 세금으로 계산된다.
"""
from decimal import Decimal

from django import forms

from .models import Invoice, Quote


class InvoiceForm(forms.ModelForm):
    class Meta:
        model = Invoice
        fields = ['invoice_number', 'client_name', 'issue_date', 'due_date', 'status', 'notes']

    def clean_invoice_number(self):
        number = (self.cleaned_data.get('invoice_number') or '').strip()
        if not number:
            raise forms.ValidationError('El número de factura es obligatorio.')
        return number

    def clean(self):
        cleaned_data = super().clean()
        issue_date = cleaned_data.get('issue_date')
        due_date = cleaned_data.get('due_date')
        if issue_date and due_date and due_date < issue_date:
            self.add_error('due_date', 'La fecha de vencimiento no puede ser anterior a la fecha de emisión.')
        return cleaned_data


class QuoteForm(forms.ModelForm):
    class Meta:
        model = Quote
        fields = ['quote_number', 'client_name', 'issue_date', 'valid_until', 'status', 'notes']


class LineItemForm(forms.Form):
    """품목 1줄 검증 (수량 > 0, 단가 >= 0)"""

    description = forms.CharField(max_length=255)
    quantity = forms.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    unit_price = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    tax_rate = forms.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0.00'), required=False)

    def clean_tax_rate(self):
        return self.cleaned_data.get('tax_rate') or Decimal('0.00')
