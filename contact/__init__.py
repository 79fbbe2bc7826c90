"""
Contact Form App

Public contact form with server-side validation and storage:
- Form page and AJAX submission endpoint
- Field validation and sanitization
- Append-only storage of accepted submissions
- Staff listing of recent submissions
- Install/uninstall lifecycle commands
"""
