# pawpal/api/follows/__init__.py
