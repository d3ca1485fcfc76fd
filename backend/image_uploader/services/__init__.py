"""
Image Uploader Backend - Services Layer
========================================

What:  Business logic between the routes (HTTP) and the external systems.

Service Inventory:
    - MediaHost (abstract): interface for the binary hosting provider
    - CloudinaryMediaHost: MediaHost backed by the Cloudinary SDK
    - ImageService: upload / list / delete / update of image records
"""
