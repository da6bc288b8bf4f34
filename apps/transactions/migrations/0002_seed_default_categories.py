from django.db import migrations


def seed_system_categories(apps, schema_editor):
    Category = apps.get_model('transactions', 'Category')

    income_items = [
        ('Ventas', '#10b981', 'cart'),
        ('Servicios', '#3b82f6', 'briefcase'),
        ('Otros ingresos', '#6366f1', 'plus'),
    ]

    expense_items = [
        ('Suministros', '#f59e0b', 'bolt'),
        ('Alquiler', '#ef4444', 'home'),
        ('Material de oficina', '#8b5cf6', 'pencil'),
        ('Servicios profesionales', '#0ea5e9', 'users'),
        ('Publicidad', '#ec4899', 'megaphone'),
        ('Transporte', '#14b8a6', 'car'),
        ('Seguros', '#64748b', 'shield'),
        ('Impuestos', '#dc2626', 'receipt'),
        ('Otros gastos', '#9ca3af', 'dots'),
    ]

    for type_, items in (('income', income_items), ('expense', expense_items)):
        for order, (name, color, icon) in enumerate(items):
            Category.objects.get_or_create(
                name=name,
                is_system=True,
                defaults={
                    'type': type_,
                    'color': color,
                    'icon': icon,
                    'order': order,
                },
            )


def unseed_system_categories(apps, schema_editor):
    Category = apps.get_model('transactions', 'Category')
    Category.objects.filter(is_system=True, user__isnull=True).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('transactions', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_system_categories, unseed_system_categories),
    ]
