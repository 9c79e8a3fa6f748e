"""HTTP response header helpers."""

from starlette.datastructures import MutableHeaders


def append_vary(headers: MutableHeaders, token: str) -> None:
    """Add ``token`` to the ``Vary`` header without dropping existing values."""

    existing_vary = headers.get("Vary")
    if existing_vary:
        tokens = [item.strip() for item in existing_vary.split(",") if item.strip()]
        if token.lower() in {item.lower() for item in tokens} or "*" in tokens:
            return
        tokens.append(token)
        headers["Vary"] = ", ".join(tokens)
    else:
        headers["Vary"] = token
