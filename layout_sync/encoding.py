"""PlantUML server URL encoding for handing documents to the renderer."""

from .constants import PLANTUML_SERVER, RENDER_FORMATS


def encode_plantuml(text: str) -> str:
    """Hex form understood by the PlantUML server: ``~h`` + UTF-8 bytes as hex."""
    return "~h" + text.encode("utf-8").hex()


def diagram_url(text: str, fmt: str = "svg", server: str = PLANTUML_SERVER) -> str:
    """
    Build the render URL for a document.

    Returns:
        URL string, or "" when the text is blank
    """
    if fmt not in RENDER_FORMATS:
        raise ValueError(f"Invalid format '{fmt}'. Must be one of {RENDER_FORMATS}")
    if not text.strip():
        return ""
    return f"{server.rstrip('/')}/{fmt}/{encode_plantuml(text)}"
