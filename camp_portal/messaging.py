"""
Doctor notification links.
"""

from datetime import date
from typing import Optional
from urllib.parse import quote

from camp_portal.config import DEFAULT_COUNTRY_CODE, MESSAGE_LINK_SCHEME, ORGANIZATION_NAME

CAMP_MESSAGE_TEMPLATE = """\
Dear Dr. {doctor_name},

Thank you for your consent to conduct Vitamin D Risk Assessment Camp at your clinic on {camp_date}.

We will initiate screening patients for their risk of Vitamin D deficiency shortly.
Once the camp concludes, we'll share a brief summary report highlighting the number of patients screened and key findings.

Thank you for partnering with {organization} in this mission to make India Vitamin D deficiency-free.

Team {organization}
Your Partner in Vitamin D Management"""


def normalize_phone(number: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    number = number.strip()
    return number if number.startswith("+") else f"{country_code}{number}"


def build_camp_message(doctor_name: Optional[str], camp_date: date) -> str:
    return CAMP_MESSAGE_TEMPLATE.format(
        doctor_name=doctor_name or "",
        camp_date=camp_date.strftime("%d/%m/%Y"),
        organization=ORGANIZATION_NAME,
    )


def build_message_link(number: Optional[str], doctor_name: Optional[str], camp_date: date) -> Optional[str]:
    """Deep link that opens the messaging app with the camp confirmation text.

    Returns None when the doctor has no number to message.
    """
    if not number or not number.strip():
        return None
    to = quote(normalize_phone(number), safe="")
    text = quote(build_camp_message(doctor_name, camp_date), safe="")
    return f"{MESSAGE_LINK_SCHEME}://send?to={to}&text={text}"
