from __future__ import annotations

import logging
from datetime import timedelta

import pytest
from selenium.common.exceptions import StaleElementReferenceException

from selfheal.config.schema import HealingConfig
from selfheal.core.exceptions import ElementNotFoundError, LowConfidenceError, NoFingerprintError
from selfheal.core.fingerprint import build_fingerprint
from selfheal.core.healer import SelfHealingEngine
from selfheal.core.matcher import ElementMatcher
from selfheal.core.metadata import HealContext
from selfheal.core.models import SIMILARITY, SIMILARITY_LOCATOR, ElementFingerprint, LocatorKind, LocatorStrategy
from selfheal.logging.audit import HealingAuditLogger
from tests.helpers import FIXED_NOW, FakeDocument, login_form, make_element


def test_heal_resolves_broken_locator_via_test_id(engine, heal_context):
    form = login_form()
    document = FakeDocument(form.values())
    engine.register(document, "#username", "usernameInput")

    element = engine.heal(document, "#nonexistent", "usernameInput", heal_context)

    assert element is form["username"]
    (event,) = engine.store.all_events()
    assert event.strategy is LocatorKind.TEST_ID
    assert event.confidence == 0.95
    assert event.original_locator == "#nonexistent"
    assert event.healed_locator == '[data-testid="username-input"]'
    assert event.test_file == "test_healer.py"
    assert event.test_name == "test_heal_resolves_broken_locator_via_test_id"


def test_heal_disambiguates_shared_class_by_placeholder(engine, store):
    form = login_form()
    store.save(
        ElementFingerprint(
            name="usernameInput",
            primary_locator=".field",
            alternative_locators=(
                LocatorStrategy(kind=LocatorKind.CLASS, selector=".field", priority=9, confidence=0.5),
            ),
            attributes=make_element("input", placeholder="Enter username", class_name="field").attributes,
        )
    )
    document = FakeDocument(form.values())

    element = engine.heal(document, ".field", "usernameInput")

    assert element is form["username"]
    (event,) = store.all_events()
    assert event.strategy is LocatorKind.CLASS
    assert event.confidence >= 0.6


def test_heal_without_fingerprint_fails_before_matching(engine):
    document = FakeDocument(login_form().values())

    with pytest.raises(NoFingerprintError) as excinfo:
        engine.heal(document, "#ghost", "ghost")

    assert excinfo.value.element_name == "ghost"
    assert excinfo.value.locator == "#ghost"
    assert "#ghost" in str(excinfo.value)
    assert document.queries == ["#ghost"]


def test_heal_falls_back_to_similarity_scan(engine):
    banner = make_element("div", "banner", position=(10, 10, 600, 80))
    document = FakeDocument([banner], selectors={"#banner": [banner]})
    engine.register(document, "#banner", "banner")
    moved = make_element("div", "moved", position=(14, 30, 600, 80))
    document = FakeDocument([make_element("div", position=(10, 700, 20, 20)), moved])

    element = engine.heal(document, "#banner", "banner")

    assert element is moved
    (event,) = engine.store.all_events()
    assert event.strategy == SIMILARITY
    assert event.healed_locator == SIMILARITY_LOCATOR


def test_low_confidence_reports_achieved_and_required(store):
    strict = SelfHealingEngine(HealingConfig(confidence_threshold=0.99), store=store)
    close = make_element("button", aria_label="Close dialog")
    document = FakeDocument([close], selectors={"button.close": [close]})
    strict.register(document, "button.close", "closeButton")

    with pytest.raises(LowConfidenceError) as excinfo:
        strict.heal(document, "button.dismiss", "closeButton")

    assert excinfo.value.confidence == 0.85
    assert excinfo.value.threshold == 0.99
    assert "85.0%" in str(excinfo.value)
    assert "99.0%" in str(excinfo.value)
    assert store.all_events() == []
    assert store.get("closeButton").heal_count == 0


def test_disabled_healing_raises_not_found(store):
    engine = SelfHealingEngine(HealingConfig(enabled=False), store=store)
    form = login_form()
    document = FakeDocument(form.values())
    engine.register(document, "#username", "usernameInput")

    with pytest.raises(ElementNotFoundError) as excinfo:
        engine.find(document, ".field", "usernameInput")

    assert excinfo.value.match_count == 2
    assert excinfo.value.healing_disabled
    assert store.all_events() == []


def test_direct_resolution_refreshes_fingerprint_without_counting_a_heal(engine, store):
    form = login_form()
    document = FakeDocument(form.values())

    element = engine.find(document, "#password", "passwordInput")

    assert element is form["password"]
    fingerprint = store.get("passwordInput")
    assert fingerprint.primary_locator == "#password"
    assert fingerprint.heal_count == 0
    assert fingerprint.last_seen == FIXED_NOW


def test_each_heal_increments_heal_count_once(engine, store):
    form = login_form()
    document = FakeDocument(form.values())
    engine.register(document, "#username", "usernameInput")

    engine.heal(document, "#old-username", "usernameInput")
    engine.heal(document, "#old-username", "usernameInput")
    engine.find(document, "#username", "usernameInput")

    assert store.get("usernameInput").heal_count == 2
    assert len(store.all_events()) == 2


def test_register_replaces_history_and_requires_a_match(engine, store):
    form = login_form()
    document = FakeDocument(form.values())
    healed_before = build_fingerprint(form["login"].attributes, "loginButton", "#login-btn")
    store.save(healed_before.model_copy(update={"heal_count": 4}))

    engine.register(document, "#login-btn", "loginButton")

    assert store.get("loginButton").heal_count == 0
    with pytest.raises(ElementNotFoundError):
        engine.register(document, "#missing", "missing")


def test_register_on_multiple_matches_takes_the_first(engine, store):
    form = login_form()
    document = FakeDocument(form.values())

    element = engine.register(document, ".field", "firstField")

    assert element is form["username"]


def test_healing_event_reaches_context_sinks_and_log(store, caplog, tmp_path):
    seen_by_context = []
    seen_by_sink = []
    audit_logger = HealingAuditLogger(tmp_path)
    engine = SelfHealingEngine(store=store, event_sinks=[seen_by_sink.append], audit_logger=audit_logger)
    document = FakeDocument(login_form().values())
    engine.register(document, "#username", "usernameInput")

    with caplog.at_level(logging.WARNING, logger="selfheal.core.healer"):
        engine.heal(document, "#user", "usernameInput", HealContext(emit=seen_by_context.append))
    with pytest.raises(NoFingerprintError):
        engine.heal(document, "#nothing", "nothing")

    assert seen_by_context == seen_by_sink == store.all_events()
    assert "usernameInput" in caplog.text
    assert "data-testid" in caplog.text
    attempts = audit_logger.read_attempts()
    assert [attempt["success"] for attempt in attempts] == [True, False]
    assert attempts[1]["failure_type"] == "NoFingerprintError"
    assert audit_logger.failed_attempts() == 1


class StaleSnapshotDocument(FakeDocument):
    def describe_many(self, elements):
        raise StaleElementReferenceException("element is not attached to the page document")


def test_unexpected_matcher_error_is_audited_as_failure(store, tmp_path):
    audit_logger = HealingAuditLogger(tmp_path)
    engine = SelfHealingEngine(store=store, audit_logger=audit_logger)
    store.save(
        ElementFingerprint(
            name="usernameInput",
            primary_locator=".field",
            alternative_locators=(
                LocatorStrategy(kind=LocatorKind.CLASS, selector=".field", priority=9, confidence=0.5),
            ),
            attributes=login_form()["username"].attributes,
        )
    )

    with pytest.raises(StaleElementReferenceException):
        engine.heal(StaleSnapshotDocument(login_form().values()), ".field", "usernameInput")

    (attempt,) = audit_logger.read_attempts()
    assert attempt["success"] is False
    assert attempt["failure_type"] == "StaleElementReferenceException"
    assert store.all_events() == []
    assert store.get("usernameInput").heal_count == 0


def test_failing_event_sink_leaves_heal_fully_recorded(store, tmp_path):
    registered_at = FIXED_NOW
    healed_at = FIXED_NOW + timedelta(minutes=5)
    audit_logger = HealingAuditLogger(tmp_path)

    def broken_sink(event):
        raise RuntimeError("sink offline")

    engine = SelfHealingEngine(
        store=store,
        clock=iter([registered_at, healed_at]).__next__,
        event_sinks=[broken_sink],
        audit_logger=audit_logger,
    )
    document = FakeDocument(login_form().values())
    engine.register(document, "#username", "usernameInput")

    with pytest.raises(RuntimeError, match="sink offline"):
        engine.heal(document, "#user", "usernameInput")

    fingerprint = store.get("usernameInput")
    assert fingerprint.heal_count == 1
    assert fingerprint.last_seen == healed_at
    assert len(store.all_events()) == 1
    assert audit_logger.read_attempts()[0]["success"] is True


def test_matcher_threshold_must_agree_with_config():
    with pytest.raises(ValueError, match="confidence_threshold"):
        SelfHealingEngine(HealingConfig(confidence_threshold=0.8), matcher=ElementMatcher(0.6))

    engine = SelfHealingEngine(HealingConfig(confidence_threshold=0.8), matcher=ElementMatcher(0.8))
    assert engine.matcher.confidence_threshold == engine.confidence_threshold
