"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

# Import contact form URL patterns
from contact.urls import api_urlpatterns as contact_api_urls
from contact.urls import page_urlpatterns as contact_page_urls

urlpatterns = [
    path('', RedirectView.as_view(url='/contact/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/contact/', include((contact_api_urls, 'contact_api'))),  # AJAX submission + staff listing
    path('contact/', include((contact_page_urls, 'contact'))),  # Public form page + staff table
]
