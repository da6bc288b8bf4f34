"""
지출 등록 API

POST /api/transactions/expenses
    {"description", "gross", "vatRate", "irpfRate", "includesIrpf", "date", "categoryId", "paymentMethod", "notes"}

총액에서 과세표준/IVA/IRPF를 분리하고, 세금 메타데이터와 함께 저장한다.
"""
import json
import logging

from django.http import JsonResponse
from django.views.decorators.http import require_POST

from apps.core.utils import jsonable
from apps.tax.utils import looks_like_irpf_total
from .forms import ExpenseFromGrossForm
from .models import Transaction
from .utils import build_expense_amounts

logger = logging.getLogger(__name__)

FIELD_ALIASES = {
    'vatRate': 'vat_rate',
    'irpfRate': 'irpf_rate',
    'includesIrpf': 'includes_irpf',
    'categoryId': 'category',
    'paymentMethod': 'payment_method',
}


@require_POST
def expense_create(request):
    if not request.user.is_authenticated:
        return JsonResponse({'message': 'Not authenticated'}, status=401)

    try:
        body = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JsonResponse({'message': 'JSON inválido'}, status=400)
    if not isinstance(body, dict):
        return JsonResponse({'message': 'JSON inválido'}, status=400)

    data = {FIELD_ALIASES.get(key, key): value for key, value in body.items()}
    form = ExpenseFromGrossForm(data, user=request.user)
    if not form.is_valid():
        errors = {field: list(messages) for field, messages in form.errors.items()}
        return JsonResponse({'message': 'Datos de gasto no válidos', 'errors': errors}, status=400)

    cleaned = form.cleaned_data
    amounts = build_expense_amounts(
        cleaned['gross'],
        cleaned['vat_rate'],
        cleaned.get('irpf_rate'),
        includes_irpf=cleaned.get('includes_irpf', False),
    )

    expense = Transaction.objects.create(
        user=request.user,
        type='expense',
        description=cleaned['description'],
        amount=amounts['amount'],
        date=cleaned['date'],
        category=cleaned.get('category'),
        payment_method=cleaned.get('payment_method') or '',
        notes=cleaned.get('notes') or '',
        additional_taxes=amounts['additional_taxes'],
    )

    # 총액 끝자리가 IRPF 패턴인데 IRPF가 입력되지 않았으면 검토 표시
    review_irpf = not cleaned.get('irpf_rate') and looks_like_irpf_total(cleaned['gross'])
    if review_irpf:
        logger.info(f"IRPF 누락 가능성: user={request.user.pk}, transaction={expense.pk}, gross={cleaned['gross']}")

    return JsonResponse(jsonable({
        'id': expense.pk,
        'type': expense.type,
        'description': expense.description,
        'amount': expense.amount,
        'vatAmount': amounts['vat_amount'],
        'irpfAmount': amounts['irpf_amount'],
        'date': expense.date.isoformat(),
        'categoryId': expense.category_id,
        'additionalTaxes': json.loads(expense.additional_taxes),
        'reviewIrpf': review_irpf,
    }), status=201)
