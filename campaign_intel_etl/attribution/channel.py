"""SMS channel detection.

Purely informational: the hint is attached to attribution results and never
changes their tier, platform or confidence.
"""

REFCODE_PATTERN = "refcode_pattern"
FORM_PATTERN = "form_pattern"

SMS_REFCODE_MARKERS = ("txt", "sms")
SMS_FORM_MARKERS = ("sms", "text")


def detect_sms_channel(refcode: str | None, contribution_form: str | None) -> str | None:
    """
    Detect whether a donation likely came from an SMS campaign.

    Args:
        refcode: Raw refcode
        contribution_form: ActBlue contribution form name

    Returns:
        'refcode_pattern', 'form_pattern' or None
    """
    refcode_key = (refcode or "").strip().lower()
    if refcode_key and any(marker in refcode_key for marker in SMS_REFCODE_MARKERS):
        return REFCODE_PATTERN

    form_key = (contribution_form or "").strip().lower()
    if form_key and any(marker in form_key for marker in SMS_FORM_MARKERS):
        return FORM_PATTERN

    return None
