"""
Image Uploader Backend - Application Package
=============================================

What: Marks `image_uploader` as a Python package and carries the version.
Who:  Imported by uvicorn, Alembic and pytest.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   ImageService (Lifecycle Logic)    │  ← validation, orchestration
    ├──────────────────┬──────────────────┤
    │   Media Host     │   Record Store   │  ← Cloudinary / SQLAlchemy
    └──────────────────┴──────────────────┘

Each request runs one sequential chain: validate, then at most two calls to
the Media Host and one write to the Record Store.
"""

__version__ = "1.0.0"
