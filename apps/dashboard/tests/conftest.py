"""
dashboard 앱 테스트용 공통 fixture
"""
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.contrib.auth.models import User


@pytest.fixture
def test_user(db):
    """테스트용 사용자"""
    return User.objects.create_user(username='tester', password='pass')


@pytest.fixture
def auth_client(client, test_user):
    """로그인된 클라이언트"""
    client.login(username='tester', password='pass')
    return client


@pytest.fixture
def today():
    return date(2025, 12, 31)


@pytest.fixture
def make_invoice():
    """DB 없이 집계기에 넘길 송장 (모델과 같은 속성 이름)"""
    def _make(**overrides):
        data = {
            'id': 1,
            'status': 'paid',
            'issue_date': datetime(2025, 6, 1, 10, 0),
            'due_date': None,
            'subtotal': Decimal('1000.00'),
            'total': Decimal('1060.00'),
            'additional_taxes': [
                {'name': 'IVA', 'amount': 21, 'isPercentage': True},
                {'name': 'IRPF', 'amount': -15, 'isPercentage': True},
            ],
        }
        data.update(overrides)
        return SimpleNamespace(**data)
    return _make


@pytest.fixture
def make_expense():
    """DB 없이 집계기에 넘길 지출 거래"""
    def _make(**overrides):
        data = {
            'id': 1,
            'type': 'expense',
            'amount': Decimal('100.00'),
            'date': datetime(2025, 6, 2, 9, 0),
            'additional_taxes': '[{"name": "IVA", "amount": 21, "isPercentage": true}]',
            'category_id': None,
            'category': None,
            'is_active': True,
        }
        data.update(overrides)
        return SimpleNamespace(**data)
    return _make
