from chatrelay.api.ws.formats.json import JSONFormatStrategy
from chatrelay.api.ws.formats.protocol import MessageFormatStrategy

__all__ = ["JSONFormatStrategy", "MessageFormatStrategy"]
