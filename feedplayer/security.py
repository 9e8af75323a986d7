import re


def redact_secrets(text: str) -> str:
    """Redact API keys and tokens embedded in URLs or error strings before logging."""
    if not isinstance(text, str):
        return text

    # Query params like api_key=, apikey=, key=, token=, secret=
    redacted = re.sub(r"(?i)\b(api[_-]?key|key|token|secret|access_token)=([^&#\s]+)", r"\1=***", text)

    # Authorization: Bearer <token>
    redacted = re.sub(r"(?i)Bearer\s+[A-Za-z0-9._\-]+", "Bearer ***", redacted)

    return redacted
