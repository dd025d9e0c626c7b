"""服务层 - CLI 与其他入口共享的编排逻辑"""

from vendorsync.services.sync_service import SyncRequest, SyncService
from vendorsync.services.verify_service import VerifyReport, verify_vendor

__all__ = [
    "SyncRequest",
    "SyncService",
    "VerifyReport",
    "verify_vendor",
]
