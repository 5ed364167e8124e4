"""
关系引擎的错误分类。

服务层只抛这些异常；web_app 里注册的 handler 负责映射成稳定的
HTTP 状态码和机器可读的 code，存储层原始错误信息不会透出给调用方。
"""


class RelationError(Exception):
    code = "RELATION_ERROR"
    status_code = 500
    default_message = "Relationship operation failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "code": self.code, "message": self.message}


class InvalidArgument(RelationError):
    code = "INVALID_ARGUMENT"
    status_code = 400
    default_message = "Invalid argument"


class SelfReferenceForbidden(RelationError):
    code = "SELF_REFERENCE_FORBIDDEN"
    status_code = 400
    default_message = "Cannot create a relationship with yourself"


class Unauthenticated(RelationError):
    code = "UNAUTHENTICATED"
    status_code = 401
    default_message = "Login required"


class Forbidden(RelationError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Not allowed"


class TargetNotFound(RelationError):
    code = "TARGET_NOT_FOUND"
    status_code = 404
    default_message = "Target not found"


class TransactionFailed(RelationError):
    """存储层事务已回滚，调用方可以安全地整体重试。"""
    code = "TRANSACTION_FAILED"
    status_code = 503
    default_message = "Storage transaction failed, please retry"
