"""
Webhook authenticity checks.

Gitee sends the shared secret itself in the X-Gitee-Token header (no
HMAC digest), so verification is a direct comparison. The comparison is
constant time so response timing does not leak how much of a guessed
token matched.
"""

import hmac


def verify_token(expected: str, received: str | None) -> bool:
    """
    Compare the configured secret against the token sent with a delivery.

    Args:
        expected: Secret resolved for the event
        received: Value of the token header, None when absent

    Returns:
        True if the tokens match byte for byte
    """
    if received is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
