"""URL-safe base64 as used in MEGA links and API payloads."""
import base64


class Base64Encoder:
    """
    Unpadded URL-safe base64.
    
    MEGA drops the ``=`` padding from keys and attributes, and session
    tokens are often pasted with stray whitespace around them.
    """
    
    @staticmethod
    def encode(data: bytes) -> str:
        return base64.urlsafe_b64encode(data).decode('ascii').rstrip('=')
    
    @staticmethod
    def decode(text: str) -> bytes:
        """
        Decode with or without padding.
        
        Raises:
            binascii.Error: On characters outside the URL-safe alphabet or
                an impossible length
        """
        text = text.strip().rstrip('=')
        text += '=' * (-len(text) % 4)
        return base64.b64decode(text, altchars=b'-_', validate=True)
