from django.urls import path
from . import views

app_name = 'admissions'

urlpatterns = [
    # Enquiries
    path('enquiries/', views.enquiry_list, name='enquiry_list'),
    path('enquiries/<int:pk>/', views.enquiry_detail, name='enquiry_detail'),
    path('enquiries/<int:pk>/update/', views.enquiry_update, name='enquiry_update'),
    path('enquiries/<int:pk>/delete/', views.enquiry_delete, name='enquiry_delete'),
    path('enquiries/<int:pk>/promote/', views.promote_enquiry, name='promote_enquiry'),

    # Recycle bin
    path('enquiries/bin/', views.recycle_bin, name='recycle_bin'),
    path('enquiries/<int:pk>/restore/', views.enquiry_restore, name='enquiry_restore'),
    path('enquiries/<int:pk>/purge/', views.enquiry_purge, name='enquiry_purge'),

    # Registrations
    path('registrations/', views.registration_list, name='registration_list'),
    path('registrations/bulk-review/', views.bulk_review, name='bulk_review'),
    path('registrations/<int:pk>/', views.registration_detail, name='registration_detail'),
    path('registrations/<int:pk>/review/', views.review_registration, name='review_registration'),
    path('registrations/<int:pk>/complete/', views.complete_registration, name='complete_registration'),
    path('registrations/<int:pk>/delete/', views.registration_delete, name='registration_delete'),
]
