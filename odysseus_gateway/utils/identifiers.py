"""Transaction id and customer-facing reference generation"""

import random
import time
import uuid


def generate_transaction_id() -> str:
    """Unique, roughly time-ordered transaction id"""
    return f"txn-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"


def generate_reference_id(rng: random.Random | None = None) -> str:
    """Short reference printed on receipts, e.g. ODS-48213"""
    number = (rng or random).randint(10000, 99999)
    return f"ODS-{number}"


def generate_recipient_id() -> str:
    return f"rec-{uuid.uuid4().hex[:12]}"
