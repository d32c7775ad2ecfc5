from django.urls import path

from . import views

app_name = 'exports'

urlpatterns = [
    path('pdf/', views.export_pdf, name='export-pdf'),
    path('text/', views.export_text, name='export-text'),
    path('table/', views.export_table, name='export-table'),
]
