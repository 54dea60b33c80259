"""Document cloning for base templates.

Base templates are shared, read-mostly state. Every transform works on a
deep copy so that concurrent requests never alias each other's documents.
"""

import copy
import re
from typing import Any, Dict, List, Mapping, Union

from .exceptions import TemplateError


Document = Union[Dict[str, Any], List[Any]]

_SCALARS = (str, int, float, bool, type(None))


def validate_template(document: Any, path: str = "$") -> None:
    """Check that a document is a tree of JSON values.
    
    Called at registration time so that cloning never meets a malformed
    template on the request path.
    
    Raises:
        TemplateError: If a non-JSON value or a non-string key is found
    """
    if isinstance(document, dict):
        for key, value in document.items():
            if not isinstance(key, str):
                raise TemplateError(f"Template key {key!r} at {path} is not a string")
            validate_template(value, f"{path}.{key}")
    elif isinstance(document, list):
        for index, value in enumerate(document):
            validate_template(value, f"{path}[{index}]")
    elif not isinstance(document, _SCALARS):
        raise TemplateError(
            f"Template value at {path} has unsupported type {type(document).__name__}"
        )


def clone_template(document: Document) -> Document:
    """Return an independent deep copy of a base template."""
    if not isinstance(document, (dict, list)):
        raise TemplateError(
            f"Template root must be an object or array, got {type(document).__name__}"
        )
    try:
        return copy.deepcopy(document)
    except (TypeError, copy.Error, RecursionError) as e:
        raise TemplateError(f"Template could not be cloned: {e}") from e


_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def interpolate_parameters(document: Any, params: Mapping[str, str]) -> Any:
    """Replace ``{{name}}`` placeholders in string leaves with parameter values.

    Works in place on containers and returns the (possibly new) node.
    Placeholders naming an unknown parameter are left untouched.
    """
    def _replace(match: "re.Match[str]") -> str:
        return params.get(match.group(1), match.group(0))

    if isinstance(document, dict):
        for key, value in document.items():
            document[key] = interpolate_parameters(value, params)
    elif isinstance(document, list):
        for index, value in enumerate(document):
            document[index] = interpolate_parameters(value, params)
    elif isinstance(document, str) and "{{" in document:
        return _PLACEHOLDER.sub(_replace, document)
    return document
