from django.urls import path
from . import views

app_name = 'kds'

urlpatterns = [
    # Grouped by table
    path('pending/', views.pending_tickets, name='pending_tickets'),
    path('ready/', views.ready_tickets, name='ready_tickets'),
    path('all/', views.all_tickets, name='all_tickets'),

    path('send/', views.send_ticket, name='send_ticket'),

    # Per table
    path('table/<int:table_no>/', views.table_tickets, name='table_tickets'),
    path('table/<int:table_no>/ready/', views.mark_table_ready, name='mark_table_ready'),
    path('table/<int:table_no>/serve/', views.mark_table_served, name='mark_table_served'),

    # Single ticket
    path('<int:ticket_id>/', views.ticket_detail, name='ticket_detail'),
    path('<int:ticket_id>/ready/', views.mark_ticket_ready, name='mark_ticket_ready'),
    path('<int:ticket_id>/serve/', views.mark_ticket_served, name='mark_ticket_served'),
]
