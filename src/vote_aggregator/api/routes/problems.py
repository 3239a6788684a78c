"""RFC 7807 problem details for HTTPException responses."""

from typing import Any

from fastapi import HTTPException, Request

PROBLEM_TYPE_PREFIX = "urn:vote-aggregator"


def problem(
    request: Request,
    status: int,
    problem_type: str,
    title: str,
    detail: str,
    headers: dict[str, str] | None = None,
    **extensions: Any,
) -> HTTPException:
    """Build an HTTPException whose detail is an RFC 7807 problem object."""
    return HTTPException(
        status_code=status,
        detail={
            "type": f"{PROBLEM_TYPE_PREFIX}:{problem_type}",
            "title": title,
            "status": status,
            "detail": detail,
            "instance": str(request.url),
            **extensions,
        },
        headers=headers,
    )
