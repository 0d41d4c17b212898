"""Reference number generation utilities."""

import random
import string
from datetime import datetime
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def generate_payment_reference(db: AsyncSession) -> str:
    """Generate a unique payment reference.

    Args:
        db: Database session for uniqueness check

    Returns:
        str: Payment reference like 'PAY-20240115-K9M2QX'
    """
    from rento.models.payment import Payment

    date_part = datetime.now().strftime("%Y%m%d")
    chars = string.ascii_uppercase + string.digits
    while True:
        random_part = "".join(random.choices(chars, k=6))
        reference = f"PAY-{date_part}-{random_part}"

        result = await db.execute(select(Payment).where(Payment.reference == reference))
        if not result.scalar_one_or_none():
            return reference


def build_upi_link(
    payee_vpa: str,
    payee_name: str,
    amount: str,
    currency: str,
    reference: str,
    note: str,
) -> str:
    """Build a `upi://pay` deep link that UPI apps can open.

    Returns:
        str: Link like 'upi://pay?pa=rento%40upi&pn=Rento&am=2700.00&cu=INR&tr=PAY-...'
    """
    params = {
        "pa": payee_vpa,
        "pn": payee_name,
        "am": amount,
        "cu": currency,
        "tr": reference,
        "tn": note,
    }
    return f"upi://pay?{urlencode(params)}"
