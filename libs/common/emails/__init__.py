"""
Buneko Blooms email package.

Modules:
- core: Base send_email function (SMTP, never raises)
- store: Order and account notification emails
"""
