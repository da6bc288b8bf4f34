"""
송장 JSON API

POST /api/invoices          생성 (합계는 서버에서 계산)
GET  /api/invoices          목록
GET  /api/invoices/<id>     조회
PUT  /api/invoices/<id>     수정 (전체 재계산)

번호 연속성 경고는 저장을 막지 않고 응답의 "sequenceWarning"으로 전달된다.
"""
import json
import logging

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from apps.core.utils import jsonable
from .models import Invoice
from .services import save_invoice

logger = logging.getLogger(__name__)

# API(camelCase) → 모델 필드
FIELD_ALIASES = {
    'invoiceNumber': 'invoice_number',
    'clientName': 'client_name',
    'issueDate': 'issue_date',
    'dueDate': 'due_date',
}


def _unauthorized():
    return JsonResponse({'message': 'Not authenticated'}, status=401)


def _parse_body(request):
    try:
        data = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    return {FIELD_ALIASES.get(key, key): value for key, value in data.items()}


def _validation_response(error):
    errors = error.message_dict if hasattr(error, 'error_dict') else {'__all__': error.messages}
    return JsonResponse({'message': 'Datos de factura no válidos', 'errors': errors}, status=400)


def serialize_invoice(invoice):
    return jsonable({
        'id': invoice.pk,
        'invoiceNumber': invoice.invoice_number,
        'clientName': invoice.client_name,
        'issueDate': invoice.issue_date.isoformat() if invoice.issue_date else None,
        'dueDate': invoice.due_date.isoformat() if invoice.due_date else None,
        'status': invoice.status,
        'subtotal': invoice.subtotal,
        'tax': invoice.tax,
        'total': invoice.total,
        'additionalTaxes': invoice.additional_taxes or [],
        'notes': invoice.notes,
        'items': [
            {
                'description': item.description,
                'quantity': item.quantity,
                'unitPrice': item.unit_price,
                'taxRate': item.tax_rate,
                'subtotal': item.subtotal,
            }
            for item in invoice.items.all()
        ],
    })


def _saved_response(invoice, sequence, status):
    payload = serialize_invoice(invoice)
    payload['sequenceWarning'] = None if sequence.is_valid else {
        'message': sequence.message,
        'expected': sequence.expected,
    }
    return JsonResponse(payload, status=status)


@require_http_methods(['GET', 'POST'])
def invoice_collection(request):
    if not request.user.is_authenticated:
        return _unauthorized()

    if request.method == 'GET':
        invoices = Invoice.objects.for_user(request.user).prefetch_related('items')
        return JsonResponse([serialize_invoice(inv) for inv in invoices], safe=False)

    data = _parse_body(request)
    if data is None:
        return JsonResponse({'message': 'JSON inválido'}, status=400)

    try:
        invoice, sequence = save_invoice(request.user, data)
    except ValidationError as e:
        return _validation_response(e)

    return _saved_response(invoice, sequence, status=201)


@require_http_methods(['GET', 'PUT'])
def invoice_detail(request, pk):
    if not request.user.is_authenticated:
        return _unauthorized()

    invoice = get_object_or_404(Invoice, pk=pk, user=request.user)

    if request.method == 'GET':
        return JsonResponse(serialize_invoice(invoice))

    data = _parse_body(request)
    if data is None:
        return JsonResponse({'message': 'JSON inválido'}, status=400)

    try:
        invoice, sequence = save_invoice(request.user, data, invoice=invoice)
    except ValidationError as e:
        return _validation_response(e)

    return _saved_response(invoice, sequence, status=200)
