from decimal import Decimal

from django import forms
from django.db.models import Q

from .models import Transaction, Category


class ExpenseFromGrossForm(forms.Form):
    """
    지출 등록 폼 (영수증 총액 기준)

    총액과 IVA/IRPF 비율을 받아 과세표준은 서버에서 계산한다.
    """
    description = forms.CharField(max_length=255)
    gross = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    vat_rate = forms.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0.00'), initial=Decimal('21'), required=False,
        error_messages={'min_value': 'El tipo de IVA no es válido.'},
    )
    irpf_rate = forms.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0.00'), required=False)
    includes_irpf = forms.BooleanField(required=False)
    date = forms.DateTimeField()
    category = forms.ModelChoiceField(queryset=Category.objects.none(), required=False)
    payment_method = forms.ChoiceField(choices=[('', '---')] + Transaction.PAYMENT_METHOD_CHOICES, required=False)
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 3}))

    def __init__(self, *args, **kwargs):
        self.user = kwargs.pop('user', None)
        super().__init__(*args, **kwargs)

        # 카테고리: 시스템 + 사용자 정의 지출 카테고리만
        if self.user:
            self.fields['category'].queryset = Category.objects.filter(
                Q(is_system=True) | Q(user=self.user),
                type='expense',
            )

    def clean_vat_rate(self):
        vat_rate = self.cleaned_data.get('vat_rate')
        if vat_rate is None:
            return Decimal('21')
        return vat_rate
