"""
지출 등록 유틸리티

영수증 총액(IVA 포함)만 아는 경우가 대부분이므로
총액 → 과세표준(amount) + 추가 세금 메타데이터로 변환해서 저장한다.

저장 규칙:
    amount            = IVA 제외 금액 (base imponible)
    additional_taxes  = '[{"name": "IVA", "amount": 21, "isPercentage": true},
                          {"name": "IRPF", "amount": -15, "isPercentage": true}]'

대시보드 집계는 이 메타데이터로 IVA soportado / IRPF를 다시 계산한다.
"""
import json
import logging

from apps.core.utils import to_decimal, ZERO
from apps.tax.additional_taxes import AdditionalTax, dump_additional_taxes, HUNDRED
from apps.tax.utils import ONE, split_gross_amount, split_net_amount

logger = logging.getLogger(__name__)


def build_expense_amounts(gross, vat_rate, irpf_rate=None, includes_irpf=False, strict=False):
    """
    지출 총액 → 저장할 금액/세금 메타데이터

    Args:
        gross: 영수증 총액
        vat_rate: IVA 비율 (21, 10, 4, 0)
        irpf_rate: 공급자 원천징수 IRPF 비율 (양수로 입력, 예: 15). None이면 없음
        includes_irpf: True면 총액이 이미 IRPF 차감 후 금액 (base + IVA - IRPF)

    Returns:
        {
            'amount': 과세표준,
            'vat_amount': IVA 금액,
            'irpf_amount': IRPF 금액,
            'additional_taxes': JSON 문자열 (Transaction.additional_taxes 저장용)
        }
    """
    vat = to_decimal(vat_rate, strict=strict, field='vatRate')
    irpf = None if irpf_rate in (None, '') else abs(to_decimal(irpf_rate, strict=strict, field='irpfRate'))

    if includes_irpf and irpf:
        split = split_net_amount(gross, vat, irpf, strict=strict)
        denominator = ONE + vat / HUNDRED - irpf / HUNDRED
    else:
        split = split_gross_amount(gross, vat, irpf, strict=strict)
        denominator = ONE + vat / HUNDRED

    # 분모가 0 이하면 split은 세금 효과 없음으로 계산된다. 메타데이터도 같게 맞춘다
    taxes_applied = denominator > ZERO
    taxes = []
    if taxes_applied and vat != ZERO:
        taxes.append(AdditionalTax(name='IVA', amount=vat, is_percentage=True))
    if irpf and (taxes_applied or not includes_irpf):
        taxes.append(AdditionalTax(name='IRPF', amount=-irpf, is_percentage=True))

    logger.debug(
        f"지출 분리: gross={gross}, base={split.base}, iva={split.vat_amount}, irpf={split.irpf_amount}"
    )

    return {
        'amount': split.base,
        'vat_amount': split.vat_amount,
        'irpf_amount': split.irpf_amount,
        'additional_taxes': json.dumps(dump_additional_taxes(taxes)),
    }
