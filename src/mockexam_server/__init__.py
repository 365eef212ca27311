"""mockexam_server — FastAPI REST API for the mock exam lifecycle SDK.

Exposes the stage catalog, wizard context loading and stage transitions
over HTTP, backed by ``mockexam_db``.
"""
