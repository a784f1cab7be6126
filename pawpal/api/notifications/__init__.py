# pawpal/api/notifications/__init__.py
