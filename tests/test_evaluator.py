import logging

import pytest

from corsgate.evaluator import (
    CORSFeatures,
    Decision,
    RequestEvaluator,
    split_header_list,
)
from corsgate.policy import PolicyStore

ORIGIN = "http://a.com"


def make_evaluator(policy, **features):
    return RequestEvaluator(PolicyStore.from_mapping(policy), CORSFeatures(**features))


def test_allowed_actual_request_is_forwarded():
    evaluator = make_evaluator({ORIGIN: ["GET", "POST"]})

    evaluation = evaluator.evaluate("GET", {"Origin": ORIGIN})

    assert evaluation.decision is Decision.ALLOWED
    assert evaluation.forward is True
    assert evaluation.status_code is None
    assert evaluation.headers == [
        ("Vary", "Origin"),
        ("Access-Control-Allow-Origin", ORIGIN),
        ("Access-Control-Allow-Methods", "GET,POST"),
    ]


def test_unknown_origin_is_denied_with_null_origin():
    evaluator = make_evaluator({ORIGIN: ["GET", "POST"]})

    evaluation = evaluator.evaluate("GET", {"Origin": "http://b.com"})

    assert evaluation.decision is Decision.DENIED_BAD_ORIGIN
    assert evaluation.status_code == 403
    assert evaluation.forward is False
    assert dict(evaluation.headers) == {
        "Vary": "Origin",
        "Access-Control-Allow-Origin": "null",
    }


def test_preflight_with_refused_method_is_denied():
    evaluator = make_evaluator({ORIGIN: ["GET"]})

    evaluation = evaluator.evaluate(
        "OPTIONS", {"Origin": ORIGIN, "Access-Control-Request-Method": "POST"}
    )

    assert evaluation.decision is Decision.DENIED_BAD_METHOD
    assert evaluation.status_code == 403
    assert evaluation.forward is False
    assert dict(evaluation.headers)["Access-Control-Allow-Origin"] == ORIGIN


def test_method_denial_can_omit_allow_origin():
    evaluator = make_evaluator({ORIGIN: ["GET"]}, deny_keeps_origin=False)

    evaluation = evaluator.evaluate("DELETE", {"Origin": ORIGIN})

    assert evaluation.decision is Decision.DENIED_BAD_METHOD
    assert "Access-Control-Allow-Origin" not in dict(evaluation.headers)
    assert dict(evaluation.headers)["Vary"] == "Origin"


def test_wildcard_origin_echoes_requesting_origin():
    evaluator = make_evaluator({"*": ["GET"]})

    evaluation = evaluator.evaluate("GET", {"Origin": "http://anything.com"})

    assert evaluation.allowed
    assert dict(evaluation.headers)["Access-Control-Allow-Origin"] == "http://anything.com"


def test_wildcard_method_allows_delete():
    evaluator = make_evaluator({ORIGIN: ["*"]})

    evaluation = evaluator.evaluate("DELETE", {"Origin": ORIGIN})

    assert evaluation.allowed
    assert evaluation.forward is True
    assert dict(evaluation.headers)["Access-Control-Allow-Methods"] == "*"


def test_preflight_success_answers_with_200_and_no_forward():
    evaluator = make_evaluator({ORIGIN: ["GET", "PUT"]})

    evaluation = evaluator.evaluate(
        "OPTIONS", {"Origin": ORIGIN, "Access-Control-Request-Method": "PUT"}
    )

    assert evaluation.allowed
    assert evaluation.status_code == 200
    assert evaluation.forward is False
    assert evaluation.context.preflight is True
    assert evaluation.context.method == "PUT"
    assert dict(evaluation.headers) == {
        "Vary": "Origin",
        "Access-Control-Allow-Origin": ORIGIN,
        "Access-Control-Allow-Methods": "GET,PUT",
    }


def test_preflight_without_probe_header_uses_options():
    evaluator = make_evaluator({ORIGIN: ["GET"]})
    denied = evaluator.evaluate("OPTIONS", {"Origin": ORIGIN})
    assert denied.context.method == "OPTIONS"
    assert denied.decision is Decision.DENIED_BAD_METHOD

    evaluator = make_evaluator({ORIGIN: ["OPTIONS"]})
    allowed = evaluator.evaluate("OPTIONS", {"Origin": ORIGIN})
    assert allowed.status_code == 200


def test_plain_dicts_with_lower_case_names_are_read():
    evaluator = make_evaluator({ORIGIN: ["PATCH"]})

    evaluation = evaluator.evaluate(
        "OPTIONS", {"origin": ORIGIN, "access-control-request-method": "PATCH"}
    )

    assert evaluation.allowed
    assert evaluation.context.origin == ORIGIN


def test_header_check_echoes_requested_headers_and_single_method():
    evaluator = make_evaluator(
        {ORIGIN: {"methods": ["GET", "POST"], "headers": ["Content-Type", "X-Token"]}},
        check_headers=True,
    )

    evaluation = evaluator.evaluate(
        "OPTIONS",
        {
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "x-token, Content-Type",
        },
    )

    assert evaluation.allowed
    assert dict(evaluation.headers) == {
        "Vary": "Origin",
        "Access-Control-Allow-Origin": ORIGIN,
        "Access-Control-Allow-Methods": "POST",
        "Access-Control-Allow-Headers": "x-token,Content-Type",
    }


def test_header_check_denies_unlisted_header():
    evaluator = make_evaluator(
        {ORIGIN: {"methods": ["GET"], "headers": ["Content-Type"]}}, check_headers=True
    )

    evaluation = evaluator.evaluate(
        "OPTIONS",
        {
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Content-Type,X-Secret",
        },
    )

    assert evaluation.decision is Decision.DENIED_BAD_HEADERS
    assert evaluation.status_code == 403
    assert dict(evaluation.headers)["Access-Control-Allow-Origin"] == ORIGIN


def test_header_check_without_requested_headers_writes_no_allow_headers():
    evaluator = make_evaluator({ORIGIN: ["GET"]}, check_headers=True)

    evaluation = evaluator.evaluate("GET", {"Origin": ORIGIN})

    assert evaluation.allowed
    assert "Access-Control-Allow-Headers" not in dict(evaluation.headers)
    assert dict(evaluation.headers)["Access-Control-Allow-Methods"] == "GET"


def test_headers_ignored_when_header_check_disabled():
    evaluator = make_evaluator({ORIGIN: ["GET"]})

    evaluation = evaluator.evaluate(
        "OPTIONS",
        {
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "X-Secret",
        },
    )

    assert evaluation.allowed
    assert "Access-Control-Allow-Headers" not in dict(evaluation.headers)


def test_checks_short_circuit_in_order():
    evaluator = make_evaluator(
        {ORIGIN: {"methods": ["GET"], "headers": []}}, check_headers=True
    )
    headers = {"Access-Control-Request-Headers": "X-Secret"}

    bad_origin = evaluator.evaluate("PUT", {"Origin": "http://b.com", **headers})
    bad_method = evaluator.evaluate("PUT", {"Origin": ORIGIN, **headers})
    bad_headers = evaluator.evaluate("GET", {"Origin": ORIGIN, **headers})

    assert bad_origin.decision is Decision.DENIED_BAD_ORIGIN
    assert bad_method.decision is Decision.DENIED_BAD_METHOD
    assert bad_headers.decision is Decision.DENIED_BAD_HEADERS


def test_missing_origin_is_denied_without_wildcard():
    evaluator = make_evaluator({ORIGIN: ["GET"]})

    evaluation = evaluator.evaluate("GET", {})

    assert evaluation.decision is Decision.DENIED_BAD_ORIGIN
    assert evaluation.context.origin == ""


def test_missing_origin_with_wildcard_does_not_emit_empty_allow_origin():
    evaluator = make_evaluator({"*": ["GET"]})

    evaluation = evaluator.evaluate("GET", {})

    assert evaluation.allowed
    assert "Access-Control-Allow-Origin" not in dict(evaluation.headers)


def test_denial_is_logged_through_injected_logger(caplog):
    logger = logging.getLogger("tests.cors")
    evaluator = RequestEvaluator(
        PolicyStore.from_mapping({ORIGIN: ["GET"]}), logger=logger
    )
    caplog.set_level(logging.INFO)

    evaluator.evaluate("GET", {"Origin": "http://b.com"})

    record = next(r for r in caplog.records if r.name == "tests.cors")
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "Request blocked by CORS: bad origin"
    assert record.cors_reason == "bad_origin"
    assert record.cors_origin == "http://b.com"


def test_allowed_requests_are_not_logged(caplog):
    evaluator = make_evaluator({ORIGIN: ["GET"]})
    caplog.set_level(logging.INFO)

    evaluator.evaluate("GET", {"Origin": ORIGIN})

    assert not [r for r in caplog.records if r.name == "corsgate.cors"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, ()),
        ("", ()),
        ("X-A", ("X-A",)),
        (" X-A , ,X-B ", ("X-A", "X-B")),
    ],
)
def test_split_header_list(raw, expected):
    assert split_header_list(raw) == expected


def test_evaluator_accepts_store_built_from_raw_lists():
    evaluator = RequestEvaluator(PolicyStore({ORIGIN: ["GET"]}))

    evaluation = evaluator.evaluate("GET", {"Origin": ORIGIN})

    assert evaluation.allowed
    assert evaluation.forward is True
