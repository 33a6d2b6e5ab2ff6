from .push import SendPushRequestBody, SendPushResponse

__all__ = [
    "SendPushRequestBody",
    "SendPushResponse",
]
