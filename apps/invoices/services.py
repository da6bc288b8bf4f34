"""
송장/견적 저장 서비스

저장 흐름 (한 트랜잭션):
    1. 헤더 필드 폼 검증
    2. 품목 검증 → LineItem
    3. 추가 세금 엄격 파싱 (이름 없음, 숫자 아님 → 400)
    4. 합계 전체 재계산 (부분 패치 없음, 마지막 전체 재계산이 이김)
    5. 저장 + 품목 교체
    6. 송장 번호 연속성 검사 (권고: 저장은 막지 않음)
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.exceptions import FiscalError
from apps.core.utils import to_money
from apps.tax.additional_taxes import parse_additional_taxes, dump_additional_taxes
from apps.tax.utils import LineItem
from .forms import InvoiceForm, QuoteForm, LineItemForm
from .models import Invoice, InvoiceItem, QuoteItem
from .sequence import SequenceCheck, check_sequence

logger = logging.getLogger(__name__)


def _decimal_text(value):
    # "12,50" 같은 쉼표 소수점 허용
    if isinstance(value, str):
        return value.strip().replace(',', '.')
    return value


def clean_line_items(raw_items):
    """API 품목 목록 검증 → LineItem 리스트 (오류는 ValidationError로 모아서)"""
    if raw_items in (None, ''):
        return []
    if not isinstance(raw_items, (list, tuple)):
        raise ValidationError({'items': 'Los conceptos deben ser una lista.'})

    items = []
    errors = {}
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            errors[f'items[{index}]'] = 'Concepto inválido.'
            continue
        form = LineItemForm({
            'description': raw.get('description'),
            'quantity': _decimal_text(raw.get('quantity')),
            'unit_price': _decimal_text(raw.get('unit_price', raw.get('unitPrice'))),
            'tax_rate': _decimal_text(raw.get('tax_rate', raw.get('taxRate'))),
        })
        if not form.is_valid():
            errors[f'items[{index}]'] = [
                f"{field}: {message}" for field, messages in form.errors.items() for message in messages
            ]
            continue
        items.append(LineItem(**form.cleaned_data))

    if errors:
        raise ValidationError(errors)
    return items


def clean_additional_taxes(raw_taxes):
    try:
        return parse_additional_taxes(raw_taxes, strict=True)
    except FiscalError as e:
        raise ValidationError({'additionalTaxes': str(e)}) from e


def _save_document(form_class, item_model, parent_field, user, data, instance=None):
    form = form_class(data, instance=instance)
    if not form.is_valid():
        raise ValidationError(form.errors)

    # 수정 시 본문에 없는 품목/세금/과세표준은 저장된 값을 유지한다 (예: 상태만 변경)
    is_update = instance is not None and instance.pk is not None
    replace_items = not is_update or 'items' in data
    tax_key = 'additional_taxes' if 'additional_taxes' in data else 'additionalTaxes'

    if replace_items:
        items = clean_line_items(data.get('items'))
    else:
        items = [LineItem.coerce(item) for item in instance.items.all()]

    document = form.save(commit=False)
    document.user = user
    if not is_update or tax_key in data:
        document.additional_taxes = dump_additional_taxes(clean_additional_taxes(data.get(tax_key)))
    if not items and (not is_update or 'subtotal' in data):
        # 품목 없는 간이 문서: 사용자가 입력한 과세표준
        document.subtotal = to_money(data.get('subtotal'))

    totals = document.recompute(items=items)
    document.save()

    if replace_items:
        document.items.all().delete()
        for item in items:
            item_model.objects.create(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_rate=item.tax_rate,
                **{parent_field: document},
            )

    logger.info(
        f"{document._meta.model_name} 저장: user={user.pk}, id={document.pk}, "
        f"subtotal={totals.subtotal}, tax={totals.tax_total}, total={totals.total}"
    )
    return document


@transaction.atomic
def save_invoice(user, data, invoice=None):
    """
    송장 생성/수정

    Returns:
        (invoice, SequenceCheck) - 번호가 연속되지 않아도 저장은 완료된다
    """
    previous_number = invoice.invoice_number if invoice is not None else None
    data = {'status': invoice.status if invoice is not None else 'pending', **data}

    invoice = _save_document(InvoiceForm, InvoiceItem, 'invoice', user, data, instance=invoice)

    if previous_number is not None and previous_number == invoice.invoice_number:
        return invoice, SequenceCheck(True)

    prior_numbers = (
        Invoice.objects.for_user(user)
        .exclude(pk=invoice.pk)
        .values_list('invoice_number', flat=True)
    )
    sequence = check_sequence(invoice.invoice_number, list(prior_numbers))
    if not sequence.is_valid:
        logger.warning(f"송장 번호 연속성 경고: user={user.pk}, {sequence.message}")
    return invoice, sequence


@transaction.atomic
def save_quote(user, data, quote=None):
    data = {'status': quote.status if quote is not None else 'draft', **data}
    return _save_document(QuoteForm, QuoteItem, 'quote', user, data, instance=quote)


def recompute_and_save(document):
    """품목을 ORM으로 직접 수정한 뒤 합계 동기화"""
    document.recompute()
    document.save(update_fields=['subtotal', 'tax', 'total', 'updated_at'])
    return document.totals
