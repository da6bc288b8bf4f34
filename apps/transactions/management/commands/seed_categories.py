from django.core.management.base import BaseCommand
from django.db import transaction

from apps.transactions.models import Category

# (이름, 색상, 아이콘) - 순서가 곧 order 값
DEFAULT_CATEGORIES = {
    'income': [
        ('Ventas', '#10b981', 'cart'),
        ('Servicios', '#3b82f6', 'briefcase'),
        ('Otros ingresos', '#6366f1', 'plus'),
    ],
    'expense': [
        ('Suministros', '#f59e0b', 'bolt'),
        ('Alquiler', '#ef4444', 'home'),
        ('Material de oficina', '#8b5cf6', 'pencil'),
        ('Servicios profesionales', '#0ea5e9', 'users'),
        ('Publicidad', '#ec4899', 'megaphone'),
        ('Transporte', '#14b8a6', 'car'),
        ('Seguros', '#64748b', 'shield'),
        ('Impuestos', '#dc2626', 'receipt'),
        ('Otros gastos', '#9ca3af', 'dots'),
    ],
}


class Command(BaseCommand):
    help = '시스템 기본 카테고리 재적용 (Ingresos / Gastos, 여러 번 실행해도 안전)'

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        updated = 0
        for category_type, items in DEFAULT_CATEGORIES.items():
            for order, (name, color, icon) in enumerate(items):
                _, is_new = Category.objects.update_or_create(
                    name=name,
                    is_system=True,
                    defaults={'type': category_type, 'color': color, 'icon': icon, 'order': order, 'user': None},
                )
                if is_new:
                    created += 1
                else:
                    updated += 1

        self.stdout.write(
            self.style.SUCCESS(f'카테고리 생성: {created}개, 업데이트: {updated}개')
        )
