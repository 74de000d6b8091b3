"""Identity Toolkit admin client.

To use the services:
    from identity_admin.core.toolkit.admin import IdentityAdmin

To use the low-level dispatcher:
    from identity_admin.core.toolkit import IdentityToolkitClient, GET_ACCOUNT_INFO
"""
__version__ = "1.0.0"
