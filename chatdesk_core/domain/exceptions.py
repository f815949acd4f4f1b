"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
命令层（api.dispatcher）会把它们转换成可展示给用户的错误字符串。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "CONVERSATION_NOT_FOUND"）。
        message: 用户可读错误信息。
        extra: 其他补充字段（例如 conversation_id、provider 等）。
    """

    def __init__(self, code: str, message: str, **extra):
        self.code = code
        self.message = message
        self.extra = extra
        super().__init__(message)


class ConversationNotFoundError(BusinessError):
    """会话 ID 不存在或格式不合法。"""

    def __init__(self, conversation_id: object):
        super().__init__(
            code="CONVERSATION_NOT_FOUND",
            message=f"Conversation not found: {conversation_id}",
            conversation_id=str(conversation_id),
        )


class TransportError(BusinessError):
    """远端模型调用失败的统称，命令层不再细分。"""


class NetworkError(TransportError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(TransportError):
    """第三方 API 返回非 2xx/429 错误时抛出。"""

    def __init__(self, code: str, message: str, http_status: int = 500, **extra):
        self.http_status = http_status
        super().__init__(code, message, http_status=http_status, **extra)


class RateLimitError(TransportError):
    """Provider 限流错误；本层不做重试。"""


class ConfigurationError(BusinessError):
    """配置加载或校验失败，启动阶段致命。"""


class ValidationError(BusinessError):
    """命令参数校验失败。"""


class EventDeliveryError(BusinessError):
    """事件监听器执行失败。"""
