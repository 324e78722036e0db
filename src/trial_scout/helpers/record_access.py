"""Safe lookups into deeply nested, partially optional API records.

ClinicalTrials.gov studies and openFDA labels are externally owned JSON
trees where any level may be missing. Every read goes through `dig` so
callers never index a dict or list directly.
"""

from typing import Any


def dig(record: Any, path: str, default: Any = None) -> Any:
    """Follow a dotted path through dicts and lists, returning default on a miss.

    Numeric segments index into lists:

        dig(study, "protocolSection.identificationModule.nctId")
        dig(label, "openfda.brand_name.0")
    """
    current = record
    for key in path.split("."):
        if isinstance(current, dict):
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, list) and key.lstrip("-").isdigit():
            index = int(key)
            if not -len(current) <= index < len(current):
                return default
            current = current[index]
        else:
            return default
    return default if current is None else current


def first(value: Any, default: Any = None) -> Any:
    """Unwrap openFDA's single-element lists; scalars pass through."""
    if isinstance(value, list):
        return value[0] if value else default
    return default if value is None else value
