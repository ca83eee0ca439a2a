from pathlib import PurePath
from typing import Union


def normalize_rel_path(rel: Union[str, PurePath]) -> str:
    """
    Turn an OS-relative path into a forward-slash path with no leading './'.
    Case is preserved; theme paths are case-sensitive.
    """
    text = str(rel).replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    return text.strip("/")
