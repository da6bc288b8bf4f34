"""
송장/견적 저장 서비스 테스트

- 합계는 항상 서버에서 전체 재계산
- 번호 연속성 경고는 저장을 막지 않음
- 추가 세금 형식 오류는 ValidationError
"""
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from apps.invoices.models import Invoice, InvoiceItem, Quote
from apps.invoices.services import save_invoice, save_quote, recompute_and_save, clean_line_items
from apps.invoices.views import FIELD_ALIASES


def to_model_fields(data):
    return {FIELD_ALIASES.get(key, key): value for key, value in data.items()}


@pytest.mark.django_db
class TestSaveInvoice:
    def test_create_computes_totals(self, test_user, invoice_data):
        invoice, sequence = save_invoice(test_user, to_model_fields(invoice_data))

        assert invoice.pk is not None
        assert invoice.subtotal == Decimal('1000.00')
        assert invoice.tax == Decimal('60.00')
        assert invoice.total == Decimal('1060.00')
        assert invoice.items.count() == 2
        assert sequence.is_valid

    def test_item_subtotals_stored(self, test_user, invoice_data):
        invoice, _ = save_invoice(test_user, to_model_fields(invoice_data))
        assert sorted(i.subtotal for i in invoice.items.all()) == [Decimal('200.00'), Decimal('800.00')]

    def test_taxes_stored_as_json_list(self, test_user, invoice_data):
        invoice, _ = save_invoice(test_user, to_model_fields(invoice_data))
        invoice.refresh_from_db()

        assert invoice.additional_taxes == [
            {'name': 'IVA', 'amount': 21.0, 'isPercentage': True},
            {'name': 'IRPF', 'amount': -15.0, 'isPercentage': True},
        ]

    def test_update_replaces_items_and_recomputes(self, test_user, invoice_data):
        """품목 삭제 후 합계 재계산"""
        invoice, _ = save_invoice(test_user, to_model_fields(invoice_data))

        data = to_model_fields(invoice_data)
        data['items'] = data['items'][1:]
        invoice, sequence = save_invoice(test_user, data, invoice=invoice)

        assert invoice.items.count() == 1
        assert invoice.subtotal == Decimal('200.00')
        assert invoice.total == Decimal('212.00')
        assert sequence.is_valid  # 번호가 그대로면 검사하지 않음

    def test_sequence_gap_warns_but_saves(self, test_user, invoice_data):
        save_invoice(test_user, to_model_fields(invoice_data))

        data = to_model_fields(invoice_data)
        data['invoice_number'] = 'F-2025-005'
        invoice, sequence = save_invoice(test_user, data)

        assert Invoice.objects.filter(pk=invoice.pk).exists()
        assert not sequence.is_valid
        assert sequence.expected == 'F-2025-002'

    def test_sequence_is_per_user(self, test_user, other_user, invoice_data):
        save_invoice(other_user, to_model_fields(invoice_data))

        _, sequence = save_invoice(test_user, to_model_fields(invoice_data))
        assert sequence.is_valid

    def test_simplified_invoice_without_items(self, test_user, invoice_data):
        """품목 없는 간이 송장: subtotal 입력값을 과세표준으로 사용"""
        data = to_model_fields(invoice_data)
        data['items'] = []
        data['subtotal'] = '500,00'
        invoice, _ = save_invoice(test_user, data)

        assert invoice.subtotal == Decimal('500.00')
        assert invoice.total == Decimal('530.00')

    def test_client_cannot_set_totals(self, test_user, invoice_data):
        data = to_model_fields(invoice_data)
        data['total'] = '99999'
        invoice, _ = save_invoice(test_user, data)
        assert invoice.total == Decimal('1060.00')

    def test_default_status_pending(self, test_user, invoice_data):
        data = to_model_fields(invoice_data)
        del data['status']
        invoice, _ = save_invoice(test_user, data)
        assert invoice.status == 'pending'

    @pytest.mark.parametrize("taxes", [
        [{'name': '', 'amount': 21}],
        [{'name': 'IVA', 'amount': 'abc'}],
        'not json',
    ])
    def test_invalid_taxes_rejected(self, test_user, invoice_data, taxes):
        data = to_model_fields(invoice_data)
        data['additionalTaxes'] = taxes

        with pytest.raises(ValidationError) as exc_info:
            save_invoice(test_user, data)

        assert 'additionalTaxes' in exc_info.value.message_dict
        assert not Invoice.objects.exists()

    def test_due_date_before_issue_date(self, test_user, invoice_data):
        data = to_model_fields(invoice_data)
        data['due_date'] = '2025-01-01T00:00:00'

        with pytest.raises(ValidationError) as exc_info:
            save_invoice(test_user, data)
        assert 'due_date' in exc_info.value.message_dict

    def test_blank_invoice_number(self, test_user, invoice_data):
        data = to_model_fields(invoice_data)
        data['invoice_number'] = '   '

        with pytest.raises(ValidationError):
            save_invoice(test_user, data)


class TestCleanLineItems:
    def test_valid(self):
        items = clean_line_items([{'description': 'a', 'quantity': '1,5', 'unitPrice': '10'}])
        assert items[0].subtotal == Decimal('15.0')

    @pytest.mark.parametrize("raw", [
        {'description': 'a', 'quantity': 0, 'unitPrice': 10},
        {'description': 'a', 'quantity': 1, 'unitPrice': -1},
        {'description': '', 'quantity': 1, 'unitPrice': 10},
        'texto',
    ])
    def test_invalid_item(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            clean_line_items([raw])
        assert 'items[0]' in exc_info.value.message_dict

    def test_not_a_list(self):
        with pytest.raises(ValidationError):
            clean_line_items({'description': 'a'})


@pytest.mark.django_db
class TestQuotes:
    def test_save_quote(self, test_user):
        quote = save_quote(test_user, {
            'quote_number': 'P-2025-001',
            'client_name': 'Cliente',
            'issue_date': '2025-02-01T09:00:00',
            'items': [{'description': 'Consultoría', 'quantity': 10, 'unitPrice': 50}],
            'additionalTaxes': [{'name': 'IVA', 'amount': 21}],
        })

        assert quote.status == 'draft'
        assert quote.total == Decimal('605.00')
        assert Quote.objects.count() == 1


@pytest.mark.django_db
class TestRecomputeAndSave:
    def test_after_orm_item_edit(self, test_user, invoice_data):
        """ORM으로 품목을 직접 바꾼 뒤 합계 동기화"""
        invoice, _ = save_invoice(test_user, to_model_fields(invoice_data))
        InvoiceItem.objects.filter(invoice=invoice, description='Hosting anual').delete()

        totals = recompute_and_save(invoice)
        invoice.refresh_from_db()

        assert totals.subtotal == Decimal('800.00')
        assert invoice.total == Decimal('848.00')
