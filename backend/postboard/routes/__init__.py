"""
Postboard Backend — API Routes Package
=========================================

Route Inventory:
    - posts.py:   POST   /api/posts        (create, auth)
                  GET    /api/posts        (list, optional pagination)
                  GET    /api/posts/{id}   (detail)
                  PUT    /api/posts/{id}   (replace, auth + ownership)
                  DELETE /api/posts/{id}   (delete, auth + ownership)
    - images.py:  GET    /images/{name}    (uploaded images)
    - health.py:  GET    /health           (service health check)
    - legacy.py:  unauthenticated /api/posts handlers, behind a setting

Routes stay thin: they read the request, call a service, and pick the
status code. Business rules live in services.
"""
