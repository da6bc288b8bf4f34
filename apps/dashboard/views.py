"""
대시보드 세무 요약 API

GET /api/stats/dashboard?year=2025&period=q1
GET /api/stats/dashboard?period=2025-3
GET /api/stats/dashboard?year=2025&period=all&strict=1   (신고용: 잘못된 데이터가 있으면 400)

잘못된 기간은 올해 전체로 대체하고 응답의 "period"에 실제 사용한 토큰을 돌려준다.
"""
import logging

from django.db import transaction
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps.core.exceptions import FiscalError
from apps.core.utils import jsonable
from apps.invoices.models import Invoice
from apps.transactions.models import Category, Transaction
from .periods import period_from_params
from .utils import aggregate

logger = logging.getLogger(__name__)

TRUE_VALUES = ('1', 'true', 'yes')


@require_GET
def dashboard_stats(request):
    if not request.user.is_authenticated:
        return JsonResponse({'message': 'Not authenticated'}, status=401)

    user = request.user
    period = period_from_params(request.GET.get('year'), request.GET.get('period'))
    strict = request.GET.get('strict', '').strip().lower() in TRUE_VALUES

    start = timezone.make_aware(period.start)
    end = timezone.make_aware(period.end)

    # 거래와 송장은 같은 스냅샷에서 읽는다
    with transaction.atomic():
        transactions = list(
            Transaction.active.filter(user=user, date__gte=start, date__lt=end).select_related('category')
        )
        invoices = list(Invoice.objects.filter(user=user, issue_date__gte=start, issue_date__lt=end))
        categories = list(Category.visible_to(user))

    try:
        summary = aggregate(transactions, invoices, period, strict=strict, categories=categories)
    except FiscalError as e:
        logger.warning(f"엄격 모드 집계 실패: user={user.pk}, period={period.token}, error={e}")
        return JsonResponse({'message': 'Datos fiscales incompletos', 'errors': {'__all__': [str(e)]}}, status=400)

    logger.info(
        f"대시보드 집계: user={user.pk}, period={summary.period}, "
        f"income={summary.income}, expenses={summary.expenses}, ivaALiquidar={summary.iva_a_liquidar}"
    )
    return JsonResponse(jsonable(summary.to_dict()))
