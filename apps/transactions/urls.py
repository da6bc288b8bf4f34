from django.urls import path
from . import views

app_name = 'transactions'

urlpatterns = [
    path('expenses', views.expense_create, name='expense_create'),
]
