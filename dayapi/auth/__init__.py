"""
Authentication package.

Exports the ClientCertAuth gate and the subject extraction helper used by
the ingestion route.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from dayapi.auth.client_cert import ClientCertAuth, extract_cert_subject, subjects_match

__all__ = ["ClientCertAuth", "extract_cert_subject", "subjects_match"]
