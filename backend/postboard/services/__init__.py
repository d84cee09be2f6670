"""
Postboard Backend — Services Layer
=====================================

Business logic between routes (HTTP) and the database.

Service Inventory:
    - FileService: image MIME/size validation, naming, storage and cleanup
    - PostService: create/list/get/update/delete with ownership checks
    - LegacyPostService: the unauthenticated legacy handlers' behavior

Services are stateless singletons; each call receives the request's
database session.
"""
