from .accounts import AccountConfigParser, account_uuid

__all__ = ["AccountConfigParser", "account_uuid"]
