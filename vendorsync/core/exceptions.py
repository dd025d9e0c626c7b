"""统一异常体系

所有业务异常继承 VendorError，CLI 层据此输出友好提示并返回非零退出码。
"""

from __future__ import annotations


class VendorError(Exception):
    """vendorsync 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(VendorError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ConflictError(VendorError):
    """多个包落到同一个目标目录"""

    code = "CONFLICT"


class DuplicateVersionError(ConflictError):
    """同名包存在多个版本 / 同一版本来自多个来源"""

    code = "DUPLICATE_VERSION"


class ResourceError(VendorError):
    """文件系统读写失败（创建、复制、删除）"""

    code = "RESOURCE_ERROR"


class FetchError(VendorError):
    """解析器 / 拉取层无法提供包数据"""

    code = "FETCH_ERROR"


class OriginError(VendorError):
    """无法识别或无法表达的包来源"""

    code = "ORIGIN_ERROR"
