"""
TLS client context construction.

Verification is on by default. Skipping it is an explicit opt-in reserved
for certificate inspection, where the certificate must be read even when it
is expired, self-signed or issued for another name.
"""

import ssl


def create_tls_context(skip_verification: bool = False) -> ssl.SSLContext:
    """
    Create a client-side TLS context.

    Args:
        skip_verification: Disable chain and hostname verification. Only the
            certificate probe passes True.

    Returns:
        Configured ssl.SSLContext
    """
    if not skip_verification:
        return ssl.create_default_context(ssl.Purpose.SERVER_AUTH)

    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    # check_hostname must be cleared before verify_mode can be relaxed
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx
