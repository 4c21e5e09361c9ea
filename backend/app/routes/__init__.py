# Routes package init
"""
BaseDrop Backend — Routes Package
===================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - upload.py:  GET  /                 (submission form)
                  POST /                 (submit a base)
    - images.py:  GET  /image/{name}     (stored screenshots)
    - health.py:  GET  /health           (service health check)

Routes stay thin: extract form data, call a service, return its result.
"""
