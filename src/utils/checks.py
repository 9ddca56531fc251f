"""Checks that are performed to configuration options."""

import os
from typing import Optional
from urllib.parse import urlparse

from pydantic import FilePath


class InvalidConfigurationError(Exception):
    """Life coach service configuration is invalid."""


def get_attribute_from_file(data: dict, file_name_key: str) -> Optional[str]:
    """
    Return the contents of a file whose path is stored in the given mapping.

    Looks up file_name_key in data; if a non-None value is found it is treated
    as a filesystem path, the content of the file is read. In case the key is
    missing or maps to None, returns None.

    Parameters:
        data (dict): Mapping containing the file path under file_name_key.
        file_name_key (str): Key in `data` whose value is the path to the file.

    Returns:
        Optional[str]: File contents with trailing whitespace stripped, or None
        if the key is not present or is None.
    """
    file_path = data.get(file_name_key)
    if file_path is not None:
        with open(file_path, encoding="utf-8") as f:
            return f.read().rstrip()
    return None


def file_check(path: FilePath, desc: str) -> None:
    """
    Ensure the given path is an existing regular file and is readable.

    If the path is not a regular file or is not readable, raises
    InvalidConfigurationError.

    Parameters:
        path (FilePath): Filesystem path to validate.
        desc (str): Short description of the value being checked; used in error
        messages.

    Raises:
        InvalidConfigurationError: If `path` does not point to a file or is not
        readable.
    """
    if not os.path.isfile(path):
        raise InvalidConfigurationError(f"{desc} '{path}' is not a file")
    if not os.access(path, os.R_OK):
        raise InvalidConfigurationError(f"{desc} '{path}' is not readable")


def url_template_check(template: str, placeholder: str, desc: str) -> None:
    """
    Ensure the URL template is an HTTP(S) URL containing the placeholder.

    Parameters:
        template (str): URL template with `{placeholder}` field.
        placeholder (str): Name of the field that has to be present.
        desc (str): Short description of the value being checked; used in error
        messages.

    Raises:
        InvalidConfigurationError: If the scheme is not http or https, or the
        placeholder field is missing, or the template uses other fields.
    """
    scheme = urlparse(template).scheme
    if scheme not in ("http", "https"):
        raise InvalidConfigurationError(
            f"{desc} '{template}' must use http or https scheme"
        )
    if "{" + placeholder + "}" not in template:
        raise InvalidConfigurationError(
            f"{desc} '{template}' must contain '{{{placeholder}}}' placeholder"
        )
    try:
        template.format(**{placeholder: placeholder})
    except (KeyError, IndexError, ValueError) as e:
        raise InvalidConfigurationError(
            f"{desc} '{template}' can not be formatted: {e!r}"
        ) from e
