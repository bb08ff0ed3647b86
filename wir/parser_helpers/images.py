import re

__all__ = ["has_infobox_image", "has_file_link", "has_image"]

# parameter of an infobox template, e.g. "| image = Foo.png"
INFOBOX_IMAGE_RE = re.compile(r"image\s*=\s*([^\n|]+)", flags=re.IGNORECASE)
FILE_LINK_RE = re.compile(r"\[\[File:", flags=re.IGNORECASE)


def has_infobox_image(wikitext: str) -> bool:
    return INFOBOX_IMAGE_RE.search(wikitext) is not None


def has_file_link(wikitext: str) -> bool:
    return FILE_LINK_RE.search(wikitext) is not None


def has_image(wikitext: str | None) -> bool:
    """
    Checks if the wikitext of a page shows an image, either as a non-empty
    ``image`` parameter of a template or as a ``[[File:...]]`` link.

    This is a heuristic on the raw text, the wikitext is not parsed.

    :param wikitext: the wikitext of the page, may be ``None``
    :returns: ``True`` if an image was found
    """
    if not wikitext:
        return False
    return has_infobox_image(wikitext) or has_file_link(wikitext)
