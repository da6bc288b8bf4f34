from django.urls import path
from . import views

app_name = 'invoices'

urlpatterns = [
    path('invoices', views.invoice_collection, name='invoice_collection'),
    path('invoices/<int:pk>', views.invoice_detail, name='invoice_detail'),
]
