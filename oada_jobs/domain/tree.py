"""Record store tree shape for service bookmarks.

Passed as the ``tree`` hint on writes so intermediate resources are created
with the right content types.
"""

from typing import Any, Final

SERVICE_TREE: Final[dict[str, Any]] = {
    "bookmarks": {
        "_type": "application/vnd.oada.bookmarks.1+json",
        "services": {
            "_type": "application/vnd.oada.services.1+json",
            "*": {
                "_type": "application/vnd.oada.service.1+json",
                "jobs": {
                    "_type": "application/vnd.oada.service.jobs.1+json",
                    "*": {
                        "_type": "application/vnd.oada.service.job.1+json",
                    },
                },
                "jobs-success": {
                    "_type": "application/vnd.oada.service.jobs.1+json",
                    "day-index": {
                        "*": {
                            "_type": "application/vnd.oada.service.jobs.1+json",
                            "*": {
                                "_type": "application/vnd.oada.service.job.1+json",
                            },
                        },
                    },
                },
                "jobs-failure": {
                    "_type": "application/vnd.oada.service.jobs.1+json",
                    "day-index": {
                        "*": {
                            "_type": "application/vnd.oada.service.jobs.1+json",
                            "*": {
                                "_type": "application/vnd.oada.service.job.1+json",
                            },
                        },
                    },
                },
            },
        },
    },
}


def subtree(tree: dict[str, Any] | None, segment: str) -> dict[str, Any] | None:
    """Return the shape below ``segment``, honouring ``*`` wildcards."""
    if not tree:
        return None
    node = tree.get(segment, tree.get("*"))
    return node if isinstance(node, dict) else None
