"""
세무 요약 집계 (대시보드 / 분기 신고 참고용)

aggregate(transactions, invoices, period) → FiscalSummary

    income               = 수입 거래 amount 합 + 결제된(paid) 송장의 subtotal 합
    expenses             = 지출 거래 amount 합 (IVA 제외 금액)
    baseImponible        = income - expenses
    ivaRepercutido       = 결제된 송장의 IVA 기여액 합
    ivaSoportado         = 지출 거래 additional_taxes의 IVA 기여액 합
    irpfRetenidoIngresos = 발행된 송장(초안/취소 제외)의 IRPF 원천징수액 (음수 기여액 → 양수)
    totalWithholdings    = 지출 거래의 IRPF 원천징수액
    taxes.vat = taxes.ivaALiquidar = ivaRepercutido - ivaSoportado
    taxes.incomeTax      = irpfRetenidoIngresos

누적 합계를 저장하지 않고 매 조회마다 원본 문서에서 다시 계산한다.
DB 접근 없음: 호출부가 한 트랜잭션 안에서 조회한 목록을 넘긴다.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from apps.core.exceptions import FiscalError, StrictModeError
from apps.core.utils import to_decimal, round2, ZERO
from apps.tax.additional_taxes import parse_additional_taxes, HUNDRED
from .periods import Period, resolve_period, to_local_naive

logger = logging.getLogger(__name__)

UNCATEGORIZED = 'Sin categoría'

PENDING_STATUSES = ('pending', 'overdue')
NOT_ISSUED_STATUSES = ('draft', 'cancelled')

DEFAULT_FLAT_VAT_RATE = Decimal('21')
DEFAULT_FLAT_IRPF_RATE = Decimal('15')


def _get(obj, name, default=None):
    # 모델 인스턴스와 dict 둘 다 허용
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _label(document):
    return f"{type(document).__name__}#{_get(document, 'pk') or _get(document, 'id') or '?'}"


@dataclass
class FiscalSummary:
    """
    기간별 세무 요약 (저장하지 않는 파생 값)

    불변식:
        base_imponible == income - expenses
        iva_a_liquidar == iva_repercutido - iva_soportado
    """
    period: str
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    base_imponible: Decimal = ZERO
    iva_repercutido: Decimal = ZERO
    iva_soportado: Decimal = ZERO
    irpf_retenido_ingresos: Decimal = ZERO
    total_withholdings: Decimal = ZERO
    iva_a_liquidar: Decimal = ZERO
    income_tax: Decimal = ZERO
    net_result: Decimal = ZERO
    invoice_total: Decimal = ZERO
    pending_invoices: Decimal = ZERO
    issued_count: int = 0
    paid_count: int = 0
    pending_count: int = 0
    overdue_count: int = 0
    estimated: bool = False
    category_breakdown: list = field(default_factory=list)

    def to_dict(self):
        return {
            'period': self.period,
            'income': self.income,
            'expenses': self.expenses,
            'baseImponible': self.base_imponible,
            'ivaRepercutido': self.iva_repercutido,
            'ivaSoportado': self.iva_soportado,
            'irpfRetenidoIngresos': self.irpf_retenido_ingresos,
            'totalWithholdings': self.total_withholdings,
            'taxes': {
                'vat': self.iva_a_liquidar,
                'incomeTax': self.income_tax,
                'ivaALiquidar': self.iva_a_liquidar,
            },
            'netResult': self.net_result,
            'invoiceTotal': self.invoice_total,
            'pendingInvoices': self.pending_invoices,
            'issuedCount': self.issued_count,
            'paidCount': self.paid_count,
            'pendingCount': self.pending_count,
            'overdueCount': self.overdue_count,
            'estimated': self.estimated,
            'categoryBreakdown': self.category_breakdown,
        }


class _Totals:
    """집계 중간 합계 (반올림 전)"""

    def __init__(self):
        self.income = ZERO
        self.expenses = ZERO
        self.iva_repercutido = ZERO
        self.iva_soportado = ZERO
        self.irpf_retenido = ZERO
        self.withholdings = ZERO
        self.invoice_total = ZERO
        self.pending_invoices = ZERO
        self.issued = 0
        self.paid = 0
        self.pending = 0
        self.overdue = 0
        self.estimated = False


def _skip_or_raise(document, error, strict):
    if strict:
        raise error
    logger.warning(f"{_label(document)} 집계 제외: {error}")


def _withheld(tax, contribution, document, strict):
    """IRPF 기여액(음수) → 원천징수액(양수). 양수 IRPF는 잘못된 데이터로 본다."""
    if contribution <= ZERO:
        return -contribution
    message = f"{_label(document)}의 IRPF가 양수입니다 ({tax.name} {tax.amount}), 제외합니다"
    if strict:
        raise StrictModeError(message)
    logger.warning(message)
    return ZERO


def _in_period(document, date_field, period, strict):
    value = _get(document, date_field)
    moment = to_local_naive(value)
    if moment is None:
        _skip_or_raise(document, StrictModeError(f"날짜를 해석할 수 없습니다: {date_field}={value!r}"), strict)
        return False
    return period.start <= moment < period.end


def _flat_rates():
    vat = to_decimal(getattr(settings, 'FISCAL_FLAT_VAT_RATE', DEFAULT_FLAT_VAT_RATE))
    irpf = to_decimal(getattr(settings, 'FISCAL_FLAT_IRPF_RATE', DEFAULT_FLAT_IRPF_RATE))
    return vat, irpf


def _add_expense(totals, tx, strict, estimate_missing):
    amount = to_decimal(_get(tx, 'amount'), strict=strict, field='amount')
    raw_taxes = _get(tx, 'additional_taxes')
    taxes = parse_additional_taxes(raw_taxes, strict=strict)

    iva = ZERO
    withholding = ZERO
    for tax in taxes:
        contribution = tax.contribution(amount)
        if tax.is_vat:
            iva += contribution
        elif tax.is_irpf:
            withholding += _withheld(tax, contribution, tx, strict)

    if not taxes and raw_taxes in (None, '') and estimate_missing:
        # 세금 메타데이터가 아예 없는 과거 데이터만 추정 (명시적 [] 는 면세로 본다)
        if strict:
            raise StrictModeError(f"{_label(tx)}에 세금 정보가 없어 추정치를 사용할 수 없습니다")
        vat_rate, irpf_rate = _flat_rates()
        iva = amount * vat_rate / HUNDRED
        withholding = amount * irpf_rate / HUNDRED
        totals.estimated = True

    totals.expenses += amount
    totals.iva_soportado += iva
    totals.withholdings += withholding


def _add_invoice(totals, invoice, strict, today):
    status = _get(invoice, 'status') or ''
    if status in NOT_ISSUED_STATUSES:
        return

    subtotal = to_decimal(_get(invoice, 'subtotal'), strict=strict, field='subtotal')
    total = to_decimal(_get(invoice, 'total'), strict=strict, field='total')
    taxes = parse_additional_taxes(_get(invoice, 'additional_taxes'), strict=strict)

    iva = ZERO
    irpf = ZERO
    for tax in taxes:
        contribution = tax.contribution(subtotal)
        if tax.is_vat:
            iva += contribution
        elif tax.is_irpf:
            irpf += _withheld(tax, contribution, invoice, strict)

    totals.irpf_retenido += irpf
    totals.issued += 1

    if status == 'paid':
        totals.income += subtotal
        totals.iva_repercutido += iva
        totals.invoice_total += total
        totals.paid += 1
    elif status in PENDING_STATUSES:
        totals.pending += 1
        totals.pending_invoices += total
        due = to_local_naive(_get(invoice, 'due_date'))
        if status == 'overdue' or (due is not None and due.date() < today):
            totals.overdue += 1


def aggregate(transactions, invoices, period, strict=False, categories=None, today=None, estimate_missing=None):
    """
    기간 내 거래/송장으로 FiscalSummary 계산

    Args:
        transactions: Transaction 목록 (is_active=False는 제외)
        invoices: Invoice 목록
        period: Period 또는 토큰 문자열 ("2025-q1")
        strict: True면 잘못된 문서를 건너뛰지 않고 예외 (신고용)
        categories: 카테고리 분류용 Category 목록 (없으면 거래의 category 사용)
        today: 연체 판정 기준일 (기본: 오늘)
        estimate_missing: 세금 정보 없는 지출에 고정 세율(21%/15%) 추정 적용 여부
            (기본: settings.FISCAL_ESTIMATE_MISSING_TAXES, 없으면 False)

    Returns:
        FiscalSummary
    """
    if not isinstance(period, Period):
        period = resolve_period(period)
    if today is None:
        today = timezone.localdate()
    elif isinstance(today, datetime):
        today = today.date()
    if estimate_missing is None:
        estimate_missing = getattr(settings, 'FISCAL_ESTIMATE_MISSING_TAXES', False)

    totals = _Totals()
    expense_rows = []

    for tx in transactions:
        if _get(tx, 'is_active', True) is False:
            continue
        if not _in_period(tx, 'date', period, strict):
            continue

        tx_type = _get(tx, 'type')
        try:
            if tx_type == 'income':
                totals.income += to_decimal(_get(tx, 'amount'), strict=strict, field='amount')
            elif tx_type == 'expense':
                _add_expense(totals, tx, strict, estimate_missing)
                expense_rows.append(tx)
            else:
                raise StrictModeError(f"알 수 없는 거래 유형: {tx_type!r}")
        except FiscalError as e:
            _skip_or_raise(tx, e, strict)

    for invoice in invoices:
        if not _in_period(invoice, 'issue_date', period, strict):
            continue
        try:
            _add_invoice(totals, invoice, strict, today)
        except FiscalError as e:
            _skip_or_raise(invoice, e, strict)

    income = round2(totals.income)
    expenses = round2(totals.expenses)
    iva_repercutido = round2(totals.iva_repercutido)
    iva_soportado = round2(totals.iva_soportado)
    irpf_retenido = round2(totals.irpf_retenido)
    withholdings = round2(totals.withholdings)

    summary = FiscalSummary(
        period=period.token,
        income=income,
        expenses=expenses,
        base_imponible=income - expenses,
        iva_repercutido=iva_repercutido,
        iva_soportado=iva_soportado,
        irpf_retenido_ingresos=irpf_retenido,
        total_withholdings=withholdings,
        iva_a_liquidar=iva_repercutido - iva_soportado,
        income_tax=irpf_retenido,
        net_result=income - expenses - irpf_retenido - withholdings,
        invoice_total=round2(totals.invoice_total),
        pending_invoices=round2(totals.pending_invoices),
        issued_count=totals.issued,
        paid_count=totals.paid,
        pending_count=totals.pending,
        overdue_count=totals.overdue,
        estimated=totals.estimated,
        category_breakdown=category_breakdown(expense_rows, categories),
    )

    if summary.estimated:
        logger.warning(f"{period.token}: 세금 정보 없는 지출에 고정 세율 추정치 사용")

    return summary


def category_breakdown(expenses, categories=None):
    """
    지출 카테고리별 합계/건수/비율

    매칭 순서: category_id → 카테고리 이름(대소문자 무시) → 'Sin categoría'
    정렬: 금액 내림차순

    Returns:
        [{'categoryId', 'name', 'color', 'icon', 'amount', 'count', 'percentage'}, ...]
    """
    by_id = {}
    by_name = {}
    for category in categories or ():
        category_id = _get(category, 'pk') or _get(category, 'id')
        by_id[category_id] = category
        name_key = str(_get(category, 'name', '')).strip().lower()
        # 같은 이름이면 사용자 정의 카테고리가 시스템 카테고리보다 우선
        if name_key not in by_name or not _get(category, 'is_system', False):
            by_name[name_key] = category

    groups = {}
    total = ZERO

    for tx in expenses:
        category = _resolve_category(tx, by_id, by_name, use_own=categories is None)
        if category is None:
            key = None
            info = {'categoryId': None, 'name': UNCATEGORIZED, 'color': '', 'icon': ''}
        else:
            key = _get(category, 'pk') or _get(category, 'id') or _get(category, 'name')
            info = {
                'categoryId': _get(category, 'pk') or _get(category, 'id'),
                'name': _get(category, 'name'),
                'color': _get(category, 'color') or '',
                'icon': _get(category, 'icon') or '',
            }

        amount = to_decimal(_get(tx, 'amount'))
        group = groups.setdefault(key, {**info, 'amount': ZERO, 'count': 0})
        group['amount'] += amount
        group['count'] += 1
        total += amount

    result = []
    for group in groups.values():
        percentage = (group['amount'] / total * 100) if total > 0 else ZERO
        result.append({
            **group,
            'amount': round2(group['amount']),
            'percentage': round2(percentage),
        })

    result.sort(key=lambda item: (-item['amount'], str(item['name'])))
    return result


def _resolve_category(tx, by_id, by_name, use_own):
    category_id = _get(tx, 'category_id')
    if category_id is not None and category_id in by_id:
        return by_id[category_id]

    own = _get(tx, 'category')
    if isinstance(own, str):
        # dict 입력에서 카테고리 이름만 있는 경우
        name, own = own, None
    else:
        name = _get(tx, 'category_name') or (_get(own, 'name') if own is not None else '')

    if use_own and own is not None:
        return own
    if name:
        return by_name.get(str(name).strip().lower())
    return None
