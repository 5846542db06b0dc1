"""Repository slug utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. They are not
filesystem paths, even though they use ``/`` as a separator.
"""

from __future__ import annotations


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug from owner and name.

    Examples
    --------
    >>> repo_slug("gengo", "goship")
    'gengo/goship'

    """
    return f"{owner}/{name}"
