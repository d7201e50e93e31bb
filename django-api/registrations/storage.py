"""File-blob store for payment proof uploads.

Returns an opaque storage name; registrations keep it as payment_proof_ref
and never look inside the file.
"""

import logging
import os
import uuid

from django.core.files.storage import default_storage

logger = logging.getLogger("turnstile.registrations")

PAYMENT_PROOF_DIR = "payment_proofs"


def store_payment_proof(upload, owner_id: str) -> str:
    _, extension = os.path.splitext(upload.name or "")
    name = f"{PAYMENT_PROOF_DIR}/{owner_id}/{uuid.uuid4().hex}{extension.lower()}"
    reference = default_storage.save(name, upload)
    logger.info("Payment proof stored: owner=%s, reference=%s", owner_id, reference)
    return reference


def payment_proof_url(reference: str) -> str:
    return default_storage.url(reference)
