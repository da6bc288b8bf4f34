"""
invoices 앱 테스트용 공통 fixture
"""
import pytest
from django.contrib.auth.models import User


@pytest.fixture
def test_user(db):
    """테스트용 사용자"""
    return User.objects.create_user(username='tester', password='pass')


@pytest.fixture
def other_user(db):
    """다른 사용자 (권한 테스트용)"""
    return User.objects.create_user(username='other', password='pass')


@pytest.fixture
def auth_client(client, test_user):
    """로그인된 클라이언트"""
    client.login(username='tester', password='pass')
    return client


@pytest.fixture
def invoice_data():
    """IVA 21% + IRPF -15% 송장 (소계 1000)"""
    return {
        'invoiceNumber': 'F-2025-001',
        'clientName': 'Cliente Ejemplo SL',
        'issueDate': '2025-03-10T10:00:00',
        'dueDate': '2025-04-10T10:00:00',
        'status': 'pending',
        'items': [
            {'description': 'Diseño web', 'quantity': 2, 'unitPrice': 400},
            {'description': 'Hosting anual', 'quantity': 1, 'unitPrice': 200},
        ],
        'additionalTaxes': [
            {'name': 'IVA', 'amount': 21, 'isPercentage': True},
            {'name': 'IRPF', 'amount': -15, 'isPercentage': True},
        ],
    }
