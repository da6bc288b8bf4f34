"""
세무 계산 엔진 공통 예외

- FiscalError: 모든 도메인 오류의 기반 (ValueError 하위)
- InvalidAdditionalTax: 추가 세금 항목(IVA, IRPF 등) 형식 오류
- InvalidTaxRate: 0 이하 분모가 되는 세율 (예: IVA -100%)
- InvalidPeriodToken: "2025-q5" 같은 잘못된 기간 토큰
- StrictModeError: strict 모드에서 기본값 대체(0 변환, 건너뛰기)가 발생한 경우
"""


class FiscalError(ValueError):
    """세무 계산 도메인 오류"""


class InvalidAdditionalTax(FiscalError):
    pass


class InvalidTaxRate(FiscalError):
    pass


class InvalidPeriodToken(FiscalError):
    def __init__(self, token, reason=''):
        self.token = token
        self.reason = reason
        message = f"잘못된 기간 토큰: {token!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class StrictModeError(FiscalError):
    """신고용 계산에서 값이 조용히 0으로 대체되는 것을 막기 위한 예외"""
