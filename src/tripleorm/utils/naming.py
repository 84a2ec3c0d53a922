"""
Naming utilities used when coining resource identifiers.
"""

import re
import uuid


_FIRST_CAP_RE = re.compile("(.)([A-Z][a-z]+)")
_ALL_CAP_RE = re.compile("([a-z0-9])([A-Z])")


def camel_to_snake(name: str) -> str:
    step1 = _FIRST_CAP_RE.sub(r"\1_\2", name)
    return _ALL_CAP_RE.sub(r"\1_\2", step1).lower()


def coin_identifier(namespace: str, type_name: str) -> str:
    """
    Build a fresh IRI ``<namespace><snake_type>/<uuid>`` for a new resource.
    """
    base = namespace if namespace.endswith(("/", "#", ":")) else f"{namespace}/"
    return f"{base}{camel_to_snake(type_name)}/{uuid.uuid4()}"
