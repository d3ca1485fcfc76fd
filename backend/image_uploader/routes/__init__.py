"""
Image Uploader Backend - API Routes Package
============================================

Route Inventory:
    - images.py:  POST   /api/upload          (upload a new image)
                  GET    /api/allImages       (list every image record)
                  DELETE /api/image/{id}      (delete record and binary)
                  PUT    /api/image/{id}      (replace title and/or binary)
    - health.py:  GET    /                    (landing page linking the docs)
                  GET    /health              (dependency health check)

Routes stay thin: they unpack the request, call ImageService and shape the
response. Errors are raised and left to the global exception handlers.
"""
