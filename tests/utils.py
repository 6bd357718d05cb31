"""
Test utility functions and assertions.

This module provides helper functions for common testing patterns:
- Rendering SQLAlchemy expressions to SQL text for comparisons
- Response assertions (status codes, list envelopes)
"""

from typing import Any, Optional

from httpx import Response


# =============================================================================
# SQL rendering helpers
# =============================================================================


def compile_sql(expression: Any) -> str:
    """
    Render a SQLAlchemy expression with literal values inlined.

    Args:
        expression: Condition, ordering or statement

    Returns:
        SQL text, e.g. "resources.status = 'LISTED'"
    """
    return str(expression.compile(compile_kwargs={"literal_binds": True}))


def bound_value(condition: Any) -> Any:
    """
    Return the value bound on the right-hand side of a comparison.

    Args:
        condition: Binary comparison such as ``column == value``

    Returns:
        The bound Python value (a list for IN)
    """
    return condition.right.value


# =============================================================================
# Response assertion helpers
# =============================================================================


def assert_status_code(response: Response, expected: int):
    """
    Assert that the response has the expected status code.

    Args:
        response: The HTTP response
        expected: Expected status code

    Raises:
        AssertionError: If status code doesn't match
    """
    assert response.status_code == expected, (
        f"Expected status code {expected}, got {response.status_code}. "
        f"Response body: {response.text}"
    )


def assert_envelope_structure(
    response: Response, expected_total: Optional[int] = None
):
    """
    Assert that the response body is a list envelope.

    Args:
        response: The HTTP response
        expected_total: Optional expected total count

    Raises:
        AssertionError: If the envelope structure is invalid
    """
    assert_status_code(response, 200)
    body = response.json()

    assert "data" in body, "Response missing 'data' field"
    assert "meta" in body, "Response missing 'meta' field"
    assert isinstance(body["data"], list), "'data' should be a list"

    meta = body["meta"]
    for key in ("total", "limit", "offset"):
        assert isinstance(meta.get(key), int), f"'meta.{key}' should be an integer"
    assert isinstance(meta.get("has_more"), bool), "'meta.has_more' should be a boolean"

    if expected_total is not None:
        assert meta["total"] == expected_total, (
            f"Expected total={expected_total}, got {meta['total']}"
        )
