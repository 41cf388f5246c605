"""Name conversions shared by the schema factory and the scaffolder."""
import re


def to_pascal_case(value: str) -> str:
    """Convert ``order-item``, ``order_item`` or ``orderItem`` to ``OrderItem``."""
    parts = re.split(r"[-_\s]+", value.strip())
    return "".join(part[0].upper() + part[1:] for part in parts if part)


def to_camel_case(value: str) -> str:
    pascal = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def to_snake_case(value: str) -> str:
    """Convert ``OrderItem`` or ``order-item`` to ``order_item``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", to_pascal_case(value))
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.lower()


def pluralize(word: str) -> str:
    """Naive English plural, enough for collection names."""
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def route_segment(resource_name: str) -> str:
    """URL segment for a resource: lowercased name plus ``s`` (``User`` -> ``users``)."""
    return f"{to_pascal_case(resource_name).lower()}s"
